"""
Grounding document for the advisor's system prompt.

The catalog summary is a pure function of the products passed in, so the
same snapshot always renders the same text.
"""

import os
import re

from jinja2 import Environment, FileSystemLoader

EMPTY_CATALOG_TEXT = (
    "No products currently loaded. Please ask the customer to refresh the app "
    "or check back later."
)
CATALOG_HEADER = "AVAILABLE PRODUCTS IN OUR CATALOG:"
SEPARATOR = "━" * 30
MAX_DESCRIPTION_LENGTH = 500
ELLIPSIS = "..."

HTML_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
)

_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")


def clean_description(description):
    """Strip markup, decode common entities, collapse whitespace, cap length."""
    cleaned = _TAG_RE.sub(" ", description or "")
    for entity, replacement in HTML_ENTITIES:
        cleaned = cleaned.replace(entity, replacement)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()

    if len(cleaned) > MAX_DESCRIPTION_LENGTH:
        cleaned = cleaned[:MAX_DESCRIPTION_LENGTH] + ELLIPSIS
    return cleaned


def describe_product(product):
    lines = [SEPARATOR, f"PRODUCT: {product.title}"]

    price_line = f"Price: ${product.price}"
    if product.is_on_sale:
        price_line += f" (Was: ${product.compare_at_price} - ON SALE)"
    lines.append(price_line)

    if product.product_type:
        lines.append(f"Type: {product.product_type}")
    if product.tags:
        lines.append(f"Tags: {', '.join(product.tags)}")

    description = clean_description(product.description)
    if description:
        lines.append(f"Description: {description}")
    return "\n".join(lines) + "\n"


def build_grounding_document(products):
    if not products:
        return EMPTY_CATALOG_TEXT

    sections = [CATALOG_HEADER + "\n"]
    for product in products:
        sections.append(describe_product(product))
    return "\n".join(sections)


def build_system_prompt(products, store_name="Adam's Polishes"):
    env = Environment(loader=FileSystemLoader(TEMPLATE_DIR), keep_trailing_newline=False)
    template = env.get_template("advisor_system_prompt.txt.j2")
    return template.render(store_name=store_name, catalog=build_grounding_document(products))
