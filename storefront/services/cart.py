# Overview: Local shopping cart state, totals and persistence.

"""
Cart Engine

Invariants:
- at most one line per variant id (adding an existing variant bumps its quantity)
- every stored line has quantity >= 1; driving a line to zero removes it
- lines are saved to device storage after every mutation and loaded once
  at construction; promo state is not persisted

The promo discount is computed from the subtotal at the moment the code is
applied and is not re-derived when the cart later changes.
"""

from __future__ import annotations

import json
import logging
import threading
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from ..entities import CartLineItem, Product, ProductVariant
from ..errors import PreconditionViolation

logger = logging.getLogger(__name__)

CART_KEY = "cart"
CENTS = Decimal("0.01")

DEFAULT_TAX_RATE = Decimal("0.0825")
DEFAULT_SHIPPING_FEE = Decimal("7.99")
DEFAULT_FREE_SHIPPING_THRESHOLD = Decimal("75")
DEFAULT_PROMO_CODES = {
    "SHINE10": Decimal("0.10"),
    "GARAGE20": Decimal("0.20"),
    "FIRST15": Decimal("0.15"),
}
DEFAULT_CHECKOUT_URL = "https://your-store.myshopify.com/checkout"


def to_money(value: Decimal) -> str:
    """Amount rounded half-up to cents, as a string."""
    return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


class CartEngine:
    def __init__(
        self,
        storage,
        tax_rate=DEFAULT_TAX_RATE,
        shipping_fee=DEFAULT_SHIPPING_FEE,
        free_shipping_threshold=DEFAULT_FREE_SHIPPING_THRESHOLD,
        promo_codes=None,
        checkout_url=DEFAULT_CHECKOUT_URL,
    ):
        self.storage = storage
        self.tax_rate = Decimal(str(tax_rate))
        self.shipping_fee = Decimal(str(shipping_fee))
        self.free_shipping_threshold = Decimal(str(free_shipping_threshold))
        if promo_codes is None:
            promo_codes = DEFAULT_PROMO_CODES
        self.promo_codes = {code.upper(): Decimal(str(rate)) for code, rate in promo_codes.items()}
        self.checkout_url = checkout_url

        self.items: list[CartLineItem] = []
        self.promo_code = ""
        self.promo_discount = Decimal("0")
        self.is_checking_out = False
        self._lock = threading.RLock()

        self._load()

    @classmethod
    def from_config(cls, storage, config):
        return cls(
            storage,
            tax_rate=config["TAX_RATE"],
            shipping_fee=config["SHIPPING_FEE"],
            free_shipping_threshold=config["FREE_SHIPPING_THRESHOLD"],
            promo_codes=config["PROMO_CODES"],
            checkout_url=config["CHECKOUT_URL"],
        )

    # --- derived values ---------------------------------------------------

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal("0"))

    @property
    def total_savings(self) -> Decimal:
        return sum((item.savings for item in self.items), Decimal("0")) + self.promo_discount

    @property
    def estimated_tax(self) -> Decimal:
        return self.subtotal * self.tax_rate

    @property
    def estimated_shipping(self) -> Decimal:
        return Decimal("0") if self.subtotal >= self.free_shipping_threshold else self.shipping_fee

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.estimated_tax + self.estimated_shipping - self.promo_discount

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def free_shipping_progress(self) -> Decimal:
        if self.free_shipping_threshold <= 0:
            return Decimal("1")
        return min(self.subtotal / self.free_shipping_threshold, Decimal("1"))

    @property
    def amount_to_free_shipping(self) -> Decimal:
        return max(self.free_shipping_threshold - self.subtotal, Decimal("0"))

    def get_line(self, line_id: str) -> Optional[CartLineItem]:
        for item in self.items:
            if item.id == line_id:
                return item
        return None

    # --- mutations --------------------------------------------------------

    def add_to_cart(self, product: Product, variant: Optional[ProductVariant] = None) -> CartLineItem:
        selected = variant or product.default_variant
        if selected is None:
            raise PreconditionViolation(
                "Cannot add a product without variants",
                details={"product_id": product.id},
            )

        with self._lock:
            line = next((item for item in self.items if item.variant_id == selected.id), None)
            if line:
                line.quantity += 1
            else:
                line = CartLineItem.from_product(product, selected)
                self.items.append(line)
            self._save()
        logger.debug("[Cart] %s x%d", line.variant_id, line.quantity)
        return line

    def update_quantity(self, line_id: str, quantity: int) -> Optional[CartLineItem]:
        """Set a line's quantity; zero or less removes the line."""
        with self._lock:
            line = self.get_line(line_id)
            if line is None:
                return None
            if quantity <= 0:
                self.items.remove(line)
                line = None
            else:
                line.quantity = quantity
            self._save()
            return line

    def increment_quantity(self, line_id: str) -> Optional[CartLineItem]:
        with self._lock:
            line = self.get_line(line_id)
            if line is None:
                return None
            return self.update_quantity(line_id, line.quantity + 1)

    def decrement_quantity(self, line_id: str) -> Optional[CartLineItem]:
        with self._lock:
            line = self.get_line(line_id)
            if line is None:
                return None
            return self.update_quantity(line_id, line.quantity - 1)

    def remove_line(self, line_id: str) -> bool:
        with self._lock:
            before = len(self.items)
            self.items = [item for item in self.items if item.id != line_id]
            self._save()
            return len(self.items) != before

    def clear(self) -> None:
        with self._lock:
            self.items = []
            self.promo_code = ""
            self.promo_discount = Decimal("0")
            self._save()

    def apply_promo_code(self, code: str) -> Decimal:
        # TODO: validate codes against the Storefront discount API once checkout is wired up
        with self._lock:
            self.promo_code = (code or "").upper()
            rate = self.promo_codes.get(self.promo_code)
            self.promo_discount = self.subtotal * rate if rate is not None else Decimal("0")
            return self.promo_discount

    def initiate_checkout(self) -> str:
        """Returns the checkout redirect URL; order creation happens on the web checkout."""
        self.is_checking_out = True
        try:
            return self.checkout_url
        finally:
            self.is_checking_out = False

    # --- persistence ------------------------------------------------------

    def _save(self) -> None:
        payload = json.dumps([item.to_dict() for item in self.items])
        self.storage.set(CART_KEY, payload)

    def _load(self) -> None:
        raw = self.storage.get(CART_KEY)
        if not raw:
            return
        try:
            self.items = [CartLineItem.from_dict(entry) for entry in json.loads(raw)]
        except (ValueError, KeyError, TypeError, InvalidOperation) as e:
            logger.warning("[Cart] Discarding unreadable saved cart: %s", e)
            self.items = []

    def to_dict(self) -> dict:
        return {
            "items": [
                dict(item.to_dict(), subtotal=to_money(item.subtotal), savings=to_money(item.savings))
                for item in self.items
            ],
            "item_count": self.item_count,
            "promo_code": self.promo_code,
            "promo_discount": to_money(self.promo_discount),
            "subtotal": to_money(self.subtotal),
            "estimated_tax": to_money(self.estimated_tax),
            "estimated_shipping": to_money(self.estimated_shipping),
            "total": to_money(self.total),
            "total_savings": to_money(self.total_savings),
            "free_shipping_progress": str(self.free_shipping_progress),
            "amount_to_free_shipping": to_money(self.amount_to_free_shipping),
            "is_checking_out": self.is_checking_out,
        }
