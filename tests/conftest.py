"""
Pytest fixtures for the storefront tests.

Provides catalog product factories, fake HTTP transports for the
Storefront and chat-completions clients, fake backend clients for the
stores, and a Flask app wired to in-memory SQLite.
"""

import json

import pytest

from storefront import create_app
from storefront.entities import CustomerAccessToken, Product, ProductImage, ProductVariant
from storefront.errors import NetworkFailure
from storefront.storage import MemoryStorage


# =============================================================================
# PRODUCTS
# =============================================================================

def make_variant(variant_id, price="10.00", compare_at_price=None, title="Default Title"):
    return ProductVariant(
        id=variant_id,
        title=title,
        price=price,
        compare_at_price=compare_at_price,
        sku=f"SKU-{variant_id}",
        available_for_sale=True,
        quantity_available=10,
    )


def make_product(product_id, title, price="10.00", compare_at_price=None, tags=(), product_type="",
                 description="", variants=None):
    if variants is None:
        variants = (make_variant(f"{product_id}-v1", price=price, compare_at_price=compare_at_price),)
    return Product(
        id=product_id,
        title=title,
        description=description,
        description_html=f"<p>{description}</p>",
        vendor="Adam's Polishes",
        product_type=product_type,
        tags=tuple(tags),
        variants=tuple(variants),
        images=(ProductImage(id=f"{product_id}-img", src=f"//cdn.example.com/{product_id}.jpg"),),
    )


@pytest.fixture
def car_wax():
    return make_product(
        "gid://shopify/Product/1", "Premium Car Wax",
        price="29.99", compare_at_price="39.99",
        tags=("best-seller", "paint"), product_type="spray-wax",
        description="Deep <b>gloss</b> &amp; protection.",
    )


@pytest.fixture
def wheel_cleaner():
    return make_product(
        "gid://shopify/Product/2", "Wheel Cleaner",
        price="19.99", tags=("Doorbuster Deal", "wheels"), product_type="wheel-cleaner",
    )


@pytest.fixture
def tire_shine():
    return make_product(
        "gid://shopify/Product/3", "Tire Shine",
        price="14.99", tags=("New Arrival", "tires"), product_type="tire-shine",
    )


@pytest.fixture
def catalog_products(car_wax, wheel_cleaner, tire_shine):
    return [car_wax, wheel_cleaner, tire_shine]


# =============================================================================
# FAKE TRANSPORTS
# =============================================================================

class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text if text is not None else json.dumps(json_data)

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


class FakeHttp:
    """Stands in for requests.Session: replays queued responses, records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, response):
        self.responses.append(response)

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


# =============================================================================
# FAKE BACKEND CLIENTS
# =============================================================================

class FakeStorefrontClient:
    def __init__(self, products=None):
        self.products = list(products or [])
        self.fail_with = None
        self.customer = None
        self.token = CustomerAccessToken("token-123", "2999-01-01T00:00:00Z")
        self.token_errors = []
        self.create_errors = []
        self.create_returns_customer = True
        self.recover_errors = []
        self.calls = []

    def _maybe_fail(self):
        if self.fail_with:
            raise self.fail_with

    def fetch_all_products(self, page_size=20, search=None):
        self.calls.append(("fetch_all_products", page_size))
        self._maybe_fail()
        return list(self.products)

    def create_access_token(self, email, password):
        self.calls.append(("create_access_token", email))
        self._maybe_fail()
        if self.token_errors:
            return {"customerAccessToken": None,
                    "customerUserErrors": [{"field": ["email"], "message": m} for m in self.token_errors]}
        return {"customerAccessToken": self.token, "customerUserErrors": []}

    def create_customer(self, email, password, first_name=None, last_name=None, accepts_marketing=False):
        self.calls.append(("create_customer", email))
        self._maybe_fail()
        if self.create_errors:
            return {"customer": None,
                    "customerUserErrors": [{"field": ["email"], "message": m} for m in self.create_errors]}
        customer = {"id": "gid://shopify/Customer/9", "email": email} if self.create_returns_customer else None
        return {"customer": customer, "customerUserErrors": []}

    def recover_customer(self, email):
        self.calls.append(("recover_customer", email))
        self._maybe_fail()
        return {"customerUserErrors": [{"field": ["email"], "message": m} for m in self.recover_errors]}

    def fetch_customer(self, customer_access_token):
        self.calls.append(("fetch_customer", customer_access_token))
        self._maybe_fail()
        return self.customer


class FakeChatClient:
    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests = []

    def complete(self, messages):
        self.requests.append(messages)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def storefront_client(catalog_products):
    return FakeStorefrontClient(catalog_products)


@pytest.fixture
def chat_client():
    return FakeChatClient()


@pytest.fixture
def network_failure():
    return NetworkFailure("connection refused")


# =============================================================================
# FLASK APP
# =============================================================================

@pytest.fixture
def app(storefront_client, chat_client):
    app = create_app("testing", storefront_client=storefront_client, chat_client=chat_client)
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storefront(app):
    return app.extensions["storefront"]
