# Overview: In-memory product catalog fetched from the Storefront API, with display buckets.

"""
Catalog Store

Holds the last successfully fetched catalog. A refresh builds a complete
new ``CatalogSnapshot`` (products plus every bucket) and swaps it in with a
single assignment, so readers always see either the old or the new state.
A failed refresh leaves the previous snapshot untouched.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..entities import Product
from ..errors import NetworkFailure
from ..time_utils import utcnow

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6

DOORBUSTER_KEYWORDS = ("doorbuster", "door buster", "deal")
BEST_SELLER_KEYWORDS = ("best seller", "bestseller", "best-seller", "popular", "top rated")
NEW_ARRIVAL_KEYWORDS = ("new", "new arrival", "new-arrival", "just in")


@dataclass(frozen=True)
class CatalogSnapshot:
    products: tuple[Product, ...] = ()
    featured: tuple[Product, ...] = ()
    doorbusters: tuple[Product, ...] = ()
    best_sellers: tuple[Product, ...] = ()
    new_arrivals: tuple[Product, ...] = ()
    refreshed_at: Optional[datetime] = None

    def bucket(self, name: str) -> tuple[Product, ...]:
        if name not in BUCKETS:
            raise KeyError(name)
        return getattr(self, name)


BUCKETS = ("products", "featured", "doorbusters", "best_sellers", "new_arrivals")


def classify(products, refreshed_at=None) -> CatalogSnapshot:
    products = tuple(products)
    doorbusters = tuple(p for p in products if p.has_tag_containing(DOORBUSTER_KEYWORDS))
    best_sellers = tuple(p for p in products if p.has_tag_containing(BEST_SELLER_KEYWORDS))
    new_arrivals = tuple(p for p in products if p.has_tag_containing(NEW_ARRIVAL_KEYWORDS))

    if doorbusters or best_sellers:
        featured = (doorbusters + best_sellers)[:FEATURED_LIMIT]
    else:
        featured = products[:FEATURED_LIMIT]

    return CatalogSnapshot(
        products=products,
        featured=featured,
        doorbusters=doorbusters,
        best_sellers=best_sellers,
        new_arrivals=new_arrivals,
        refreshed_at=refreshed_at,
    )


class CatalogStore:
    def __init__(self, client, page_size: int = 20):
        self.client = client
        self.page_size = page_size
        self.is_loading = False
        self.last_error: Optional[str] = None
        self._snapshot = CatalogSnapshot()
        self._lock = threading.RLock()

    @property
    def products(self) -> tuple[Product, ...]:
        return self._snapshot.products

    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def refresh(self) -> CatalogSnapshot:
        """
        Fetch every product page and replace the catalog.

        Raises NetworkFailure (after logging it) when the backend call
        fails; the previous snapshot stays in place.
        """
        self.is_loading = True
        self.last_error = None
        try:
            products = self.client.fetch_all_products(page_size=self.page_size)
        except NetworkFailure as e:
            self.last_error = e.message
            logger.warning("[Catalog] Refresh failed, keeping %d products: %s", len(self.products), e.message)
            raise
        finally:
            self.is_loading = False

        return self.replace(products)

    def replace(self, products) -> CatalogSnapshot:
        snapshot = classify(products, refreshed_at=utcnow())
        with self._lock:
            self._snapshot = snapshot
        logger.info(
            "[Catalog] Loaded %d products (%d featured, %d doorbusters, %d best sellers, %d new)",
            len(snapshot.products), len(snapshot.featured), len(snapshot.doorbusters),
            len(snapshot.best_sellers), len(snapshot.new_arrivals),
        )
        return snapshot

    # --- lookups --------------------------------------------------------

    def get(self, product_id: str) -> Optional[Product]:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def find_variant(self, product_id: str, variant_id: str):
        product = self.get(product_id)
        if not product:
            return None
        for variant in product.variants:
            if variant.id == variant_id:
                return variant
        return None

    def search(self, text: str) -> list[Product]:
        query = (text or "").lower()
        return [
            p for p in self.products
            if query in p.title.lower()
            or query in p.description.lower()
            or query in p.product_type.lower()
            or any(query in tag.lower() for tag in p.tags)
        ]

    def by_category(self, handle: str) -> list[Product]:
        """Products whose type or any tag contains the category handle."""
        handle = (handle or "").lower()
        return [
            p for p in self.products
            if handle in p.product_type.lower() or p.has_tag_containing((handle,))
        ]

    def by_tag(self, tag: str) -> list[Product]:
        tag = (tag or "").lower()
        return [
            p for p in self.products
            if p.has_tag_containing((tag,))
            or tag in p.product_type.lower()
            or tag in p.title.lower()
        ]
