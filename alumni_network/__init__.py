"""
Alumni Network Platform
A multi-tenant alumni network backend.

Architecture:
- PostgreSQL: Primary store for every resource (SQLAlchemy ORM)
- MongoDB: Document mirror for universities, connections and admin users
- Polygon / IPFS: Credential anchoring and metadata storage
"""

__version__ = "1.0.0"
