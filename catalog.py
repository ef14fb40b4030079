from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo.database import Database

from database import PRODUCTS, get_documents, to_object_id, with_id
from schemas import Product


class Catalog:
    def __init__(self, db: Database):
        self.db = db
        self.products = db[PRODUCTS]

    def list_products(self) -> List[Product]:
        return [Product.model_validate(doc) for doc in get_documents(self.db, PRODUCTS)]

    def get_product(self, product_id) -> Optional[Product]:
        oid = to_object_id(product_id)
        if oid is None:
            return None
        doc = self.products.find_one({"_id": oid})
        return Product.model_validate(with_id(doc)) if doc else None

    def get_products(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        """Products by id for the ids that still exist."""
        oids: List[ObjectId] = [oid for oid in map(to_object_id, set(product_ids)) if oid is not None]
        if not oids:
            return {}
        found = self.products.find({"_id": {"$in": oids}})
        return {str(doc["_id"]): Product.model_validate(with_id(doc)) for doc in found}
