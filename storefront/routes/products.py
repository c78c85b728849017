from flask import Blueprint, request

from . import get_storefront
from ..services.catalog import BUCKETS
from ..utils.response import error_response, success_response

products_bp = Blueprint('products', __name__, url_prefix='/api/products')


@products_bp.get('')
def list_products():
    catalog = get_storefront().catalog
    query = request.args.get('q', '').strip()
    category = request.args.get('category', '').strip()
    tag = request.args.get('tag', '').strip()
    bucket = request.args.get('bucket', 'products').strip()

    if bucket not in BUCKETS:
        return error_response(f"Unknown bucket '{bucket}'", 400, data={"buckets": list(BUCKETS)})

    if query:
        products = catalog.search(query)
    elif category:
        products = catalog.by_category(category)
    elif tag:
        products = catalog.by_tag(tag)
    else:
        products = catalog.snapshot().bucket(bucket)

    return success_response(data={
        "count": len(products),
        "products": [p.to_dict() for p in products],
        "is_loading": catalog.is_loading,
        "last_error": catalog.last_error,
    })


@products_bp.get('/detail')
def product_detail():
    product_id = request.args.get('id')
    if not product_id:
        return error_response("Missing id query parameter", 400)

    product = get_storefront().catalog.get(product_id)
    if not product:
        return error_response("Product not found", 404)
    return success_response(data=product.to_dict())


@products_bp.post('/refresh')
def refresh_products():
    # NetworkFailure is answered by the app-wide StorefrontError handler
    snapshot = get_storefront().catalog.refresh()

    return success_response(
        message="Catalog refreshed",
        data={bucket: len(snapshot.bucket(bucket)) for bucket in BUCKETS},
    )
