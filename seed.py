"""
Sample catalog.

Run ``python seed.py`` (or the ``shop-seed`` script) to replace every product
in the configured database with the sample set.
"""
import logging
import sys
from typing import Dict, List

from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import Settings, configure_logging
from database import PRODUCTS, get_database, utcnow
from schemas import ProductIn

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://via.placeholder.com/300"

SAMPLE_PRODUCTS: List[ProductIn] = [
    ProductIn(name="Smartphone X", description="Latest smartphone with advanced features",
              price=699.99, category="Electronics", image=PLACEHOLDER_IMAGE, stock=50),
    ProductIn(name="Laptop Pro", description="High-performance laptop for professionals",
              price=1299.99, category="Electronics", image=PLACEHOLDER_IMAGE, stock=30),
    ProductIn(name="Wireless Headphones", description="Noise-cancelling wireless headphones",
              price=199.99, category="Electronics", image=PLACEHOLDER_IMAGE, stock=100),
    ProductIn(name="Running Shoes", description="Comfortable running shoes for athletes",
              price=89.99, category="Sports", image=PLACEHOLDER_IMAGE, stock=75),
    ProductIn(name="Coffee Maker", description="Automatic coffee maker with timer",
              price=149.99, category="Home", image=PLACEHOLDER_IMAGE, stock=40),
]


def seed_products(db: Database, products: List[ProductIn] = SAMPLE_PRODUCTS) -> int:
    """Clear the catalog and insert ``products``. Returns how many were inserted."""
    collection = db[PRODUCTS]
    removed = collection.delete_many({}).deleted_count
    logger.info("Cleared %d existing product(s)", removed)

    now = utcnow()
    docs: List[Dict] = [dict(p.model_dump(), created_at=now) for p in products]
    if docs:
        collection.insert_many(docs)
    logger.info("Inserted %d sample product(s)", len(docs))
    return len(docs)


def main():
    settings = Settings()
    configure_logging(settings.log_level)
    try:
        seed_products(get_database(settings))
    except PyMongoError:
        logger.exception("Error seeding database")
        sys.exit(1)


if __name__ == "__main__":
    main()
