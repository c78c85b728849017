"""
Plain domain objects for the storefront.

Products and customers are built from Storefront API nodes by the builders
in ``storefront.utils.helper``; cart lines and chat messages are created by
the services that own them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from .time_utils import parse_iso_datetime, utcnow


DEFAULT_VARIANT_TITLE = "Default Title"
DEFAULT_REASON = "Recommended for your needs"
UNKNOWN_PRODUCT = "Unknown Product"

PRIORITY_LABELS = {
    1: "Essential",
    2: "Recommended",
    3: "Optional",
}


def to_decimal(value, default: Decimal | None = None) -> Decimal | None:
    if value is None:
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProductVariant:
    id: str
    title: str
    price: str
    compare_at_price: Optional[str] = None
    sku: Optional[str] = None
    available_for_sale: bool = True
    quantity_available: Optional[int] = None


@dataclass(frozen=True)
class ProductImage:
    id: str
    src: str
    alt_text: Optional[str] = None

    @property
    def url(self) -> str:
        # Some Shopify URLs are protocol-relative
        if self.src.startswith("//"):
            return "https:" + self.src
        return self.src


@dataclass(frozen=True)
class Product:
    id: str
    title: str
    description: str = ""
    description_html: str = ""
    vendor: str = ""
    product_type: str = ""
    tags: tuple[str, ...] = ()
    variants: tuple[ProductVariant, ...] = ()
    images: tuple[ProductImage, ...] = ()

    @property
    def default_variant(self) -> Optional[ProductVariant]:
        return self.variants[0] if self.variants else None

    @property
    def price(self) -> str:
        variant = self.default_variant
        return variant.price if variant else "0.00"

    @property
    def compare_at_price(self) -> Optional[str]:
        variant = self.default_variant
        return variant.compare_at_price if variant else None

    @property
    def featured_image(self) -> Optional[str]:
        return self.images[0].url if self.images else None

    @property
    def is_on_sale(self) -> bool:
        compare = to_decimal(self.compare_at_price)
        price = to_decimal(self.price)
        if compare is None or price is None:
            return False
        return compare > price

    def has_tag_containing(self, keywords) -> bool:
        for tag in self.tags:
            lowered = tag.lower()
            if any(keyword in lowered for keyword in keywords):
                return True
        return False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "vendor": self.vendor,
            "product_type": self.product_type,
            "tags": list(self.tags),
            "price": self.price,
            "compare_at_price": self.compare_at_price,
            "is_on_sale": self.is_on_sale,
            "featured_image": self.featured_image,
            "variants": [
                {
                    "id": v.id,
                    "title": v.title,
                    "price": v.price,
                    "compare_at_price": v.compare_at_price,
                    "sku": v.sku,
                    "available_for_sale": v.available_for_sale,
                    "quantity_available": v.quantity_available,
                }
                for v in self.variants
            ],
        }


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------

@dataclass
class CartLineItem:
    product_id: str
    variant_id: str
    title: str
    price: Decimal
    quantity: int = 1
    variant_title: Optional[str] = None
    compare_at_price: Optional[Decimal] = None
    image_url: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def from_product(cls, product: Product, variant: ProductVariant) -> "CartLineItem":
        return cls(
            product_id=product.id,
            variant_id=variant.id,
            title=product.title,
            variant_title=variant.title if variant.title != DEFAULT_VARIANT_TITLE else None,
            price=to_decimal(variant.price, Decimal("0")),
            compare_at_price=to_decimal(variant.compare_at_price),
            image_url=product.featured_image,
            quantity=1,
        )

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    @property
    def savings(self) -> Decimal:
        if self.compare_at_price is None or self.compare_at_price <= self.price:
            return Decimal("0")
        return (self.compare_at_price - self.price) * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "title": self.title,
            "variant_title": self.variant_title,
            "price": str(self.price),
            "compare_at_price": str(self.compare_at_price) if self.compare_at_price is not None else None,
            "image_url": self.image_url,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLineItem":
        quantity = int(data["quantity"])
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        return cls(
            id=data["id"],
            product_id=data["product_id"],
            variant_id=data["variant_id"],
            title=data["title"],
            variant_title=data.get("variant_title"),
            price=Decimal(str(data["price"])),
            compare_at_price=to_decimal(data.get("compare_at_price")),
            image_url=data.get("image_url"),
            quantity=quantity,
        )


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------

@dataclass
class MoneyV2:
    amount: str
    currency_code: str

    @property
    def formatted(self) -> str:
        value = to_decimal(self.amount)
        if value is None:
            return f"${self.amount}"
        return f"${value:.2f}"


@dataclass
class CustomerAddress:
    id: str
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def formatted(self) -> str:
        parts = []
        if self.address1:
            parts.append(self.address1)
        if self.address2:
            parts.append(self.address2)

        city_state_zip = ""
        if self.city:
            city_state_zip += self.city
        if self.province:
            city_state_zip += f", {self.province}"
        if self.zip:
            city_state_zip += f" {self.zip}"
        if city_state_zip:
            parts.append(city_state_zip)

        if self.country:
            parts.append(self.country)
        return "\n".join(parts)


@dataclass
class OrderLineItem:
    title: str
    quantity: int


@dataclass
class CustomerOrder:
    id: str
    order_number: int
    processed_at: Optional[str] = None
    financial_status: Optional[str] = None
    fulfillment_status: Optional[str] = None
    total_price: Optional[MoneyV2] = None
    line_items: list[OrderLineItem] = field(default_factory=list)

    @property
    def formatted_order_number(self) -> str:
        return f"#AP-{self.order_number}"

    @property
    def processed_date(self) -> Optional[datetime]:
        return parse_iso_datetime(self.processed_at)

    @property
    def status_display(self) -> str:
        status = self.fulfillment_status or self.financial_status
        return status.capitalize() if status else "Processing"

    @property
    def item_count(self) -> int:
        return len(self.line_items)


@dataclass
class Customer:
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    accepts_marketing: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    default_address: Optional[CustomerAddress] = None
    addresses: list[CustomerAddress] = field(default_factory=list)
    orders: list[CustomerOrder] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        if self.first_name:
            return self.first_name
        if self.last_name:
            return self.last_name
        return self.email

    @property
    def initials(self) -> str:
        result = ""
        if self.first_name:
            result += self.first_name[0].upper()
        if self.last_name:
            result += self.last_name[0].upper()
        if not result:
            result = self.email[:2].upper()
        return result

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "display_name": self.display_name,
            "initials": self.initials,
            "phone": self.phone,
            "accepts_marketing": self.accepts_marketing,
            "default_address": self.default_address.formatted if self.default_address else None,
            "addresses": [a.formatted for a in self.addresses],
            "orders": [
                {
                    "id": o.id,
                    "number": o.formatted_order_number,
                    "processed_at": o.processed_at,
                    "status": o.status_display,
                    "total": o.total_price.formatted if o.total_price else None,
                    "item_count": o.item_count,
                }
                for o in self.orders
            ],
        }


@dataclass
class CustomerAccessToken:
    access_token: str
    expires_at: str

    def is_expired(self, now: datetime | None = None) -> bool:
        expiry = parse_iso_datetime(self.expires_at)
        if expiry is None:
            # Unparseable expiry: let the backend reject the token
            return False
        return expiry < (now or utcnow())


# ---------------------------------------------------------------------------
# Advisor
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RecommendedProduct:
    product_title: str = UNKNOWN_PRODUCT
    priority: int = 1
    reason: str = DEFAULT_REASON

    @property
    def priority_label(self) -> str:
        return PRIORITY_LABELS.get(self.priority, PRIORITY_LABELS[1])


@dataclass(frozen=True)
class ProductRecommendation:
    recommended_products: tuple[RecommendedProduct, ...] = ()
    reasoning: Optional[str] = None
    customer_goal: Optional[str] = None

    def sorted_products(self) -> list[RecommendedProduct]:
        return sorted(self.recommended_products, key=lambda p: p.priority)


MESSAGE_ROLES = ("user", "assistant", "system")


@dataclass
class ChatMessage:
    role: str
    content: str
    timestamp: datetime = field(default_factory=utcnow)
    recommendation: Optional[ProductRecommendation] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        if self.role not in MESSAGE_ROLES:
            raise ValueError(f"Unknown message role: {self.role}")
