"""Resolve recommended product titles to real catalog products."""

from dataclasses import dataclass
from typing import Optional

from storefront.entities import Product, RecommendedProduct


@dataclass(frozen=True)
class ResolvedRecommendation:
    recommended: RecommendedProduct
    product: Optional[Product] = None

    @property
    def available(self) -> bool:
        # Unmatched recommendations are still shown, just not addable to the cart
        return self.product is not None

    def to_dict(self) -> dict:
        return {
            "product_title": self.recommended.product_title,
            "priority": self.recommended.priority,
            "priority_label": self.recommended.priority_label,
            "reason": self.recommended.reason,
            "available": self.available,
            "product": self.product.to_dict() if self.product else None,
        }


def match_product(title, products) -> Optional[Product]:
    search_title = (title or "").lower()
    if not search_title:
        return None

    for product in products:
        if product.title.lower() == search_title:
            return product

    for product in products:
        catalog_title = product.title.lower()
        if not catalog_title:
            continue
        if search_title in catalog_title or catalog_title in search_title:
            return product
    return None


def match_all(recommendation, products) -> dict:
    """Map lowercased recommended title -> catalog product, matched ones only."""
    matches = {}
    for recommended in recommendation.recommended_products:
        product = match_product(recommended.product_title, products)
        if product is not None:
            matches[recommended.product_title.lower()] = product
    return matches


def resolve(recommendation, products) -> list:
    matches = match_all(recommendation, products)
    return [
        ResolvedRecommendation(recommended=recommended, product=matches.get(recommended.product_title.lower()))
        for recommended in recommendation.sorted_products()
    ]
