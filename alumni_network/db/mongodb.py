"""
MongoDB Connection Utility

MongoDB holds the document mirror of:
- universities
- alumni connections
- users and their profiles (admin back-office)

The relational database stays the primary store; the mirror serves the
/api/mirror routes only.
"""
import logging

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from alumni_network.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """Get the alumni_docs database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection by its name in COLLECTIONS."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "universities": "universities",
    "connections": "connections",
    "users": "users",
    "profiles": "user_profiles"
}


def init_mongo_indexes():
    """
    Create indexes for the mirrored collections.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Domain and tenant are unique per university
    db[COLLECTIONS["universities"]].create_index("domain", unique=True)
    db[COLLECTIONS["universities"]].create_index("tenantId", unique=True)

    # Connections are looked up from either side
    db[COLLECTIONS["connections"]].create_index([("requesterId", ASCENDING), ("createdAt", ASCENDING)])
    db[COLLECTIONS["connections"]].create_index([("recipientId", ASCENDING), ("createdAt", ASCENDING)])

    db[COLLECTIONS["users"]].create_index("email", unique=True)
    db[COLLECTIONS["profiles"]].create_index("userId", unique=True)

    logger.info("MongoDB indexes created successfully")
