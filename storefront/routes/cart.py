from flask import Blueprint, request

from . import get_storefront
from ..utils.response import error_response, success_response

cart_bp = Blueprint('cart', __name__, url_prefix='/api/cart')


@cart_bp.get('')
def view_cart():
    return success_response(data=get_storefront().cart.to_dict())


@cart_bp.post('/items')
def add_item():
    data = request.get_json(silent=True) or {}
    if 'product_id' not in data:
        return error_response("Missing product_id in request body", 400)

    storefront = get_storefront()
    product = storefront.catalog.get(data['product_id'])
    if not product:
        return error_response("Product not found", 404)

    variant = None
    if data.get('variant_id'):
        variant = storefront.catalog.find_variant(product.id, data['variant_id'])
        if not variant:
            return error_response("Variant not found", 404)

    if not product.variants:
        return error_response("Product has no purchasable variants", 409)

    line = storefront.cart.add_to_cart(product, variant)
    return success_response(
        message="Added to cart",
        code=201,
        data={"line": line.to_dict(), "cart": storefront.cart.to_dict()},
    )


@cart_bp.patch('/items/<line_id>')
def update_item(line_id):
    data = request.get_json(silent=True) or {}
    quantity = data.get('quantity')
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        return error_response("quantity must be an integer", 400)

    cart = get_storefront().cart
    if cart.get_line(line_id) is None:
        return error_response("Cart line not found", 404)

    cart.update_quantity(line_id, quantity)
    return success_response(data=cart.to_dict())


@cart_bp.delete('/items/<line_id>')
def remove_item(line_id):
    cart = get_storefront().cart
    if not cart.remove_line(line_id):
        return error_response("Cart line not found", 404)
    return success_response(message="Removed from cart", data=cart.to_dict())


@cart_bp.post('/clear')
def clear_cart():
    cart = get_storefront().cart
    cart.clear()
    return success_response(message="Cart cleared", data=cart.to_dict())


@cart_bp.post('/promo')
def apply_promo():
    data = request.get_json(silent=True) or {}
    code = (data.get('code') or '').strip()
    if not code:
        return error_response("Missing code in request body", 400)

    cart = get_storefront().cart
    cart.apply_promo_code(code)
    return success_response(data=cart.to_dict())


@cart_bp.post('/checkout')
def checkout():
    cart = get_storefront().cart
    if cart.is_empty:
        return error_response("Cart is empty", 409)
    return success_response(data={"checkout_url": cart.initiate_checkout()})
