"""
Document Service - CRUD over the MongoDB mirror collections.

Collections:
1. universities   - tenant documents (domain and tenantId unique)
2. connections    - requester/recipient pairs
3. users          - member accounts for the admin back-office
4. user_profiles  - one profile per user, joined on userId

Documents are stored with camelCase keys so they serialize exactly like the
relational API responses.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic.alias_generators import to_camel
from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection

from alumni_network.db.mongodb import COLLECTIONS, get_collection


# ============================================================
# HELPERS
# ============================================================

def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Replace the ObjectId `_id` with a string `id`."""
    if doc is None:
        return None
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


def serialize_docs(docs) -> List[dict]:
    return [serialize_doc(doc) for doc in docs]


def camel_keys(values: Dict[str, Any]) -> Dict[str, Any]:
    """Column-style snake_case keys to document camelCase keys."""
    return {to_camel(key): value for key, value in values.items()}


def regex_contains(term: str) -> dict:
    """Case-insensitive substring match on a string field."""
    return {"$regex": re.escape(term), "$options": "i"}


# ============================================================
# COLLECTION SERVICE
# ============================================================

class DocumentService:
    """
    Generic CRUD for one mirrored collection.

    Usage:
        universities = DocumentService("universities")
        doc = universities.insert({"name": "Example University", ...})
    """

    def __init__(self, name: str):
        self.collection: Collection = get_collection(COLLECTIONS[name])

    def find(self, filters: dict, limit: int, offset: int = 0, sort_field: str = "createdAt") -> List[dict]:
        cursor = (
            self.collection.find(filters)
            .sort(sort_field, DESCENDING)
            .skip(offset)
            .limit(limit)
        )
        return serialize_docs(cursor)

    def find_one(self, filters: dict) -> Optional[dict]:
        return serialize_doc(self.collection.find_one(filters))

    def get(self, doc_id: ObjectId) -> Optional[dict]:
        return self.find_one({"_id": doc_id})

    def exists(self, filters: dict, exclude_id: Optional[ObjectId] = None) -> bool:
        if exclude_id is not None:
            filters = dict(filters, _id={"$ne": exclude_id})
        return self.collection.find_one(filters, projection={"_id": 1}) is not None

    def insert(self, values: dict, stamped: tuple = ()) -> dict:
        """
        Insert with createdAt/updatedAt stamps; returns the stored document.

        Fields named in `stamped` get the same creation time.
        """
        now = datetime.utcnow()
        doc = dict(values, createdAt=now, updatedAt=now)
        doc.update((field, now) for field in stamped)
        result = self.collection.insert_one(doc)
        return self.get(result.inserted_id)

    def update(self, doc_id: ObjectId, changes: dict) -> Optional[dict]:
        """Apply $set and return the updated document, or None if it is gone."""
        doc = self.collection.find_one_and_update(
            {"_id": doc_id},
            {"$set": dict(changes, updatedAt=datetime.utcnow())},
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def delete(self, doc_id: ObjectId) -> Optional[dict]:
        """Delete and return the removed document."""
        return serialize_doc(self.collection.find_one_and_delete({"_id": doc_id}))


class UserDocumentService(DocumentService):
    """Users joined with their profile document, as the admin back-office reads them."""

    def __init__(self):
        super().__init__("users")
        self.profiles = DocumentService("profiles")

    def with_profile(self, user: Optional[dict]) -> Optional[dict]:
        if user is None:
            return None
        user["profile"] = self.profiles.find_one({"userId": user["id"]})
        return user

    def user_ids_with_role(self, role: str) -> List[str]:
        return [doc["userId"] for doc in self.profiles.collection.find({"role": role}, projection={"userId": 1})]

    def delete_with_profile(self, doc_id: ObjectId) -> Optional[dict]:
        user = self.with_profile(self.get(doc_id))
        if user is None:
            return None
        self.collection.delete_one({"_id": doc_id})
        self.profiles.collection.delete_many({"userId": user["id"]})
        return user
