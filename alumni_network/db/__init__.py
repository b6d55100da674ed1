"""
Database module - relational (SQLAlchemy) and MongoDB connections.
"""
from alumni_network.db.postgres import get_db_session, init_db, test_postgres_connection
from alumni_network.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "get_db_session",
    "init_db",
    "test_postgres_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
