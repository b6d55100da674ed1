"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models (db/models.py): relational tables
- Schemas: API contract (what client sends/receives)
"""
