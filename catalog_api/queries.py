import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .references import BRANDS, CATEGORIES, ReferenceResolver

# Price and description are only returned by the single product lookup.
LIST_PROJECTION = {"name": 1, "category_id": 1, "brand_id": 1, "tags": 1}


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def split_tags(value) -> List[str]:
    if not value:
        return []
    return [segment.strip() for segment in str(value).split(",") if segment.strip()]


@dataclass
class ProductSearch:
    name: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_args(cls, args: Mapping) -> "ProductSearch":
        return cls(
            name=_clean(args.get("name")),
            category=_clean(args.get("category")),
            brand=_clean(args.get("brand")),
            tags=split_tags(args.get("tags")),
        )


def contains_ignore_case(text: str) -> Dict[str, str]:
    return {"$regex": re.escape(text), "$options": "i"}


def build_product_filter(search: ProductSearch, resolver: ReferenceResolver) -> Dict:
    """Translate search parameters into a filter on the products collection.

    Every supplied parameter narrows the result (logical AND); omitted ones
    add nothing. Category and brand are matched against the names of the
    referenced records, so they are resolved to id sets first.
    """
    criteria: Dict[str, object] = {}

    if search.tags:
        criteria["tags.name"] = {"$in": list(search.tags)}

    if search.category:
        criteria["category_id"] = {
            "$in": resolver.match_ids(CATEGORIES, search.category)
        }

    if search.brand:
        criteria["brand_id"] = {"$in": resolver.match_ids(BRANDS, search.brand)}

    if search.name:
        criteria["name"] = contains_ignore_case(search.name)

    return criteria
