import logging

import requests

from storefront.entities import (
    Customer,
    CustomerAccessToken,
    CustomerAddress,
    CustomerOrder,
    MoneyV2,
    OrderLineItem,
    Product,
    ProductImage,
    ProductVariant,
)
from storefront.errors import NetworkFailure
from storefront.graphql_queries.query_builders.query_builders import (
    CustomerAccessTokenCreateMutationBuilder,
    CustomerCreateMutationBuilder,
    CustomerQueryBuilder,
    CustomerRecoverMutationBuilder,
    ProductsQueryBuilder,
)

logger = logging.getLogger(__name__)


def storefront_headers(access_token):
    return {
        "Content-Type": "application/json",
        "X-Shopify-Storefront-Access-Token": access_token,
    }


def storefront_graphql_url(shop_domain, api_version):
    return f"https://{shop_domain}/api/{api_version}/graphql.json"


def storefront_request(query, shop_domain, access_token, api_version, variables=None, http=None, timeout=None):
    payload = {"query": query}
    if variables:
        payload["variables"] = variables
    headers = storefront_headers(access_token=access_token)
    http = http or requests
    try:
        response = http.post(
            storefront_graphql_url(shop_domain, api_version),
            json=payload,
            headers=headers,
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise NetworkFailure(f"Request to storefront failed: {e}") from e

    if not 200 <= response.status_code < 300:
        raise NetworkFailure(
            f"Storefront responded with HTTP {response.status_code}",
            status_code=response.status_code,
        )

    try:
        json_data = response.json()
    except ValueError as e:
        raise NetworkFailure(f"Storefront returned a non-JSON body: {e}") from e

    if json_data.get("errors"):
        raise NetworkFailure(
            "Storefront API error",
            status_code=response.status_code,
            details={"errors": json_data["errors"]},
        )
    return json_data.get("data") or {}


def _edges(connection):
    if not connection:
        return []
    return [edge.get("node") or {} for edge in connection.get("edges") or []]


def _amount(money):
    if not money:
        return None
    return money.get("amount")


class ShopifyProductBuilder:
    """Maps a Storefront API product node onto a ``Product``."""

    def __init__(self, product_data):
        self.product_data = product_data or {}

    def get_variants(self):
        variants = []
        for node in _edges(self.product_data.get("variants")):
            variants.append(ProductVariant(
                id=node.get("id"),
                title=node.get("title") or "",
                price=_amount(node.get("priceV2")) or "0.00",
                compare_at_price=_amount(node.get("compareAtPriceV2")),
                sku=node.get("sku"),
                available_for_sale=bool(node.get("availableForSale", True)),
                quantity_available=node.get("quantityAvailable"),
            ))
        return tuple(variants)

    def get_images(self):
        return tuple(
            ProductImage(id=node.get("id"), src=node.get("url") or "", alt_text=node.get("altText"))
            for node in _edges(self.product_data.get("images"))
        )

    def build(self):
        data = self.product_data
        return Product(
            id=data.get("id"),
            title=data.get("title") or "",
            description=data.get("description") or "",
            description_html=data.get("descriptionHtml") or "",
            vendor=data.get("vendor") or "",
            product_type=data.get("productType") or "",
            tags=tuple(data.get("tags") or ()),
            variants=self.get_variants(),
            images=self.get_images(),
        )


class ShopifyCustomerBuilder:
    """Maps a Storefront API customer node onto a ``Customer``."""

    def __init__(self, customer_data):
        self.customer_data = customer_data or {}

    @staticmethod
    def build_address(node):
        if not node:
            return None
        return CustomerAddress(
            id=node.get("id"),
            address1=node.get("address1"),
            address2=node.get("address2"),
            city=node.get("city"),
            province=node.get("province"),
            country=node.get("country"),
            zip=node.get("zip"),
            phone=node.get("phone"),
            first_name=node.get("firstName"),
            last_name=node.get("lastName"),
        )

    @staticmethod
    def build_order(node):
        total = node.get("totalPrice")
        return CustomerOrder(
            id=node.get("id"),
            order_number=node.get("orderNumber"),
            processed_at=node.get("processedAt"),
            financial_status=node.get("financialStatus"),
            fulfillment_status=node.get("fulfillmentStatus"),
            total_price=MoneyV2(amount=total.get("amount"), currency_code=total.get("currencyCode")) if total else None,
            line_items=[
                OrderLineItem(title=item.get("title"), quantity=item.get("quantity") or 0)
                for item in _edges(node.get("lineItems"))
            ],
        )

    def build(self):
        data = self.customer_data
        return Customer(
            id=data.get("id"),
            email=data.get("email") or "",
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            phone=data.get("phone"),
            accepts_marketing=bool(data.get("acceptsMarketing")),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            default_address=self.build_address(data.get("defaultAddress")),
            addresses=[self.build_address(node) for node in _edges(data.get("addresses"))],
            orders=[self.build_order(node) for node in _edges(data.get("orders"))],
        )


def user_error_messages(result):
    return [error.get("message", "") for error in (result or {}).get("customerUserErrors") or []]


class StorefrontClient:
    """
    Request/response collaborator for the Shopify Storefront API.

    Every call either returns decoded data or raises ``NetworkFailure``.
    Customer mutations return the raw mutation result so callers can read
    ``customerUserErrors`` themselves.
    """

    def __init__(self, shop_domain, access_token, api_version="2024-01", http=None, timeout=None):
        self.shop_domain = shop_domain
        self.access_token = access_token
        self.api_version = api_version
        self.http = http or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_config(cls, config, http=None):
        return cls(
            shop_domain=config["SHOPIFY_SHOP_DOMAIN"],
            access_token=config["SHOPIFY_STOREFRONT_TOKEN"],
            api_version=config["SHOPIFY_API_VERSION"],
            http=http,
            timeout=config.get("HTTP_TIMEOUT"),
        )

    def execute(self, query, variables=None):
        return storefront_request(
            query=query,
            shop_domain=self.shop_domain,
            access_token=self.access_token,
            api_version=self.api_version,
            variables=variables,
            http=self.http,
            timeout=self.timeout,
        )

    def fetch_products_page(self, first=20, after=None, search=None):
        """Returns (products, end_cursor, has_next_page) for one page."""
        query = ProductsQueryBuilder().build(include_images=True, variants_limit=10, images_limit=5)
        variables = {"first": first, "after": after, "query": search}
        data = self.execute(query, variables)

        connection = data.get("products") or {}
        products = [ShopifyProductBuilder(node).build() for node in _edges(connection)]
        page_info = connection.get("pageInfo") or {}
        return products, page_info.get("endCursor"), bool(page_info.get("hasNextPage"))

    def fetch_all_products(self, page_size=20, search=None):
        products = []
        after_cursor = None
        has_next_page = True

        while has_next_page:
            page, after_cursor, has_next_page = self.fetch_products_page(
                first=page_size, after=after_cursor, search=search
            )
            products.extend(page)
            if not after_cursor:
                break

        logger.info("[Storefront] Fetched %d products", len(products))
        return products

    def create_customer(self, email, password, first_name=None, last_name=None, accepts_marketing=False):
        customer_input = {
            "email": email,
            "password": password,
            "acceptsMarketing": accepts_marketing,
        }
        if first_name is not None:
            customer_input["firstName"] = first_name
        if last_name is not None:
            customer_input["lastName"] = last_name

        data = self.execute(CustomerCreateMutationBuilder().build(), {"input": customer_input})
        return data.get("customerCreate") or {}

    def create_access_token(self, email, password):
        data = self.execute(
            CustomerAccessTokenCreateMutationBuilder().build(),
            {"input": {"email": email, "password": password}},
        )
        result = data.get("customerAccessTokenCreate") or {}
        token = result.get("customerAccessToken")
        if token:
            result = dict(result)
            result["customerAccessToken"] = CustomerAccessToken(
                access_token=token.get("accessToken"),
                expires_at=token.get("expiresAt"),
            )
        return result

    def recover_customer(self, email):
        data = self.execute(CustomerRecoverMutationBuilder().build(), {"email": email})
        return data.get("customerRecover") or {}

    def fetch_customer(self, customer_access_token):
        """Returns the ``Customer`` or None when the backend rejects the token."""
        data = self.execute(
            CustomerQueryBuilder().build(),
            {"customerAccessToken": customer_access_token},
        )
        node = data.get("customer")
        if not node:
            return None
        return ShopifyCustomerBuilder(node).build()
