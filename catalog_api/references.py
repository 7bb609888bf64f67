import re
from typing import Dict, Iterable, List

from bson import ObjectId
from pymongo.database import Database

from .errors import ValidationError

BRANDS = "brands"
CATEGORIES = "categories"
TAGS = "tags"


class ReferenceResolver:
    """Maps brand, category and tag names onto their stored records."""

    def __init__(self, db: Database):
        self.db = db

    def _resolve_id(self, collection: str, name: str, error_message: str) -> ObjectId:
        document = self.db[collection].find_one({"name": name}, {"_id": 1})
        if not document:
            raise ValidationError(error_message)
        return document["_id"]

    def resolve_brand(self, name: str) -> ObjectId:
        return self._resolve_id(BRANDS, name, "Invalid brand")

    def resolve_category(self, name: str) -> ObjectId:
        return self._resolve_id(CATEGORIES, name, "Invalid category")

    def resolve_tags(self, names: Iterable[str]) -> List[Dict]:
        # Unknown tag names are dropped rather than rejected.
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []
        return list(self.db[TAGS].find({"name": {"$in": wanted}}))

    def match_ids(self, collection: str, pattern: str) -> List[ObjectId]:
        criteria = {"name": {"$regex": re.escape(pattern), "$options": "i"}}
        return [document["_id"] for document in self.db[collection].find(criteria, {"_id": 1})]

    def names_by_id(self, collection: str, ids: Iterable[ObjectId]) -> Dict[ObjectId, str]:
        unique_ids = [value for value in dict.fromkeys(ids) if isinstance(value, ObjectId)]
        if not unique_ids:
            return {}
        documents = self.db[collection].find({"_id": {"$in": unique_ids}}, {"name": 1})
        return {document["_id"]: document.get("name", "") for document in documents}
