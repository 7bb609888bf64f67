import math
from dataclasses import dataclass
from numbers import Real
from typing import Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.database import Database

from .errors import NotFoundError, ValidationError
from .queries import LIST_PROJECTION, ProductSearch, build_product_filter, split_tags
from .references import BRANDS, CATEGORIES, ReferenceResolver

PRODUCTS = "products"
REQUIRED_PRODUCT_FIELDS = ("name", "category", "brand", "price", "description", "tags")
MAX_INT64 = 2**63 - 1


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def parse_object_id(value) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


@dataclass
class ProductInput:
    name: str
    category: str
    brand: str
    price: float
    description: str
    tags: List[str]

    @classmethod
    def from_payload(cls, payload) -> "ProductInput":
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")

        missing = [key for key in REQUIRED_PRODUCT_FIELDS if _is_missing(payload.get(key))]
        if missing:
            raise ValidationError("Missing fields required", fields=missing)

        price = payload["price"]
        if isinstance(price, bool) or not isinstance(price, Real):
            raise ValidationError("Price must be a number", fields=["price"])
        if isinstance(price, int) and price > MAX_INT64:
            raise ValidationError("Price is too large", fields=["price"])
        if isinstance(price, float) and not math.isfinite(price):
            raise ValidationError("Price must be a finite number", fields=["price"])
        if price < 0:
            raise ValidationError("Price cannot be negative", fields=["price"])

        raw_tags = payload["tags"]
        if isinstance(raw_tags, str):
            tags = split_tags(raw_tags)
        elif isinstance(raw_tags, list) and all(isinstance(tag, str) for tag in raw_tags):
            tags = [tag.strip() for tag in raw_tags if tag.strip()]
        else:
            raise ValidationError("Tags must be a list of names", fields=["tags"])

        return cls(
            name=str(payload["name"]).strip(),
            category=str(payload["category"]).strip(),
            brand=str(payload["brand"]).strip(),
            price=price,
            description=str(payload["description"]).strip(),
            tags=tags,
        )


def serialize_tag(tag: Dict) -> Dict:
    serialized = {key: value for key, value in tag.items() if key != "_id"}
    serialized["id"] = str(tag.get("_id")) if tag.get("_id") is not None else None
    return serialized


def serialize_product(document: Dict) -> Dict:
    serialized = {"id": str(document["_id"])}
    for key, value in document.items():
        if key == "_id":
            continue
        if isinstance(value, ObjectId):
            serialized[key] = str(value)
        elif key == "tags":
            serialized[key] = [serialize_tag(tag) for tag in value or []]
        else:
            serialized[key] = value
    return serialized


class ProductRepository:
    def __init__(self, db: Database, resolver: ReferenceResolver):
        self.collection = db[PRODUCTS]
        self.resolver = resolver

    def _build_document(self, product: ProductInput) -> Dict:
        brand_id = self.resolver.resolve_brand(product.brand)
        category_id = self.resolver.resolve_category(product.category)
        tag_documents = self.resolver.resolve_tags(product.tags)
        return {
            "name": product.name,
            "category_id": category_id,
            "brand_id": brand_id,
            "price": product.price,
            "description": product.description,
            "tags": tag_documents,
        }

    def create(self, product: ProductInput) -> ObjectId:
        document = self._build_document(product)
        result = self.collection.insert_one(document)
        return result.inserted_id

    def get(self, product_id) -> Dict:
        object_id = parse_object_id(product_id)
        document = self.collection.find_one({"_id": object_id}) if object_id else None
        if not document:
            raise NotFoundError("Product not found")
        return document

    def search(self, search: ProductSearch) -> List[Dict]:
        criteria = build_product_filter(search, self.resolver)
        return list(self.collection.find(criteria, LIST_PROJECTION))

    def summarize(self, documents: List[Dict]) -> List[Dict]:
        """Shape list results as {id, name, category, brand, tags}."""
        category_names = self.resolver.names_by_id(
            CATEGORIES, [document.get("category_id") for document in documents]
        )
        brand_names = self.resolver.names_by_id(
            BRANDS, [document.get("brand_id") for document in documents]
        )
        return [
            {
                "id": str(document["_id"]),
                "name": document.get("name"),
                "category": category_names.get(document.get("category_id")),
                "brand": brand_names.get(document.get("brand_id")),
                "tags": [serialize_tag(tag) for tag in document.get("tags") or []],
            }
            for document in documents
        ]

    def update(self, product_id, product: ProductInput) -> None:
        document = self._build_document(product)
        object_id = parse_object_id(product_id)
        if object_id is None:
            raise NotFoundError("Product not found")
        result = self.collection.update_one({"_id": object_id}, {"$set": document})
        if result.matched_count == 0:
            raise NotFoundError("Product not found")

    def delete(self, product_id) -> None:
        object_id = parse_object_id(product_id)
        if object_id is None:
            raise NotFoundError("Product not found")
        result = self.collection.delete_one({"_id": object_id})
        if result.deleted_count == 0:
            raise NotFoundError("Product not found")
