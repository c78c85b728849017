from dataclasses import asdict

from flask import Blueprint, request

from . import get_storefront
from ..utils.response import error_response, success_response

advisor_bp = Blueprint('advisor', __name__, url_prefix='/api/advisor')


@advisor_bp.get('/messages')
def list_messages():
    advisor = get_storefront().advisor
    return success_response(data={
        "messages": [advisor.message_to_dict(m) for m in advisor.messages],
        "is_loading": advisor.is_loading,
    })


@advisor_bp.post('/messages')
def send_message():
    data = request.get_json(silent=True) or {}
    text = (data.get('text') or '').strip()
    if not text:
        return error_response("Missing text in request body", 400)

    advisor = get_storefront().advisor
    reply = advisor.send_message(text)
    return success_response(data=advisor.message_to_dict(reply))


@advisor_bp.post('/reset')
def reset():
    advisor = get_storefront().advisor
    advisor.reset()
    return success_response(
        message="Conversation reset",
        data={"messages": [advisor.message_to_dict(m) for m in advisor.messages]},
    )


@advisor_bp.get('/quick-questions')
def quick_questions():
    from ..services.advisor import QUICK_QUESTIONS
    return success_response(data=[asdict(q) for q in QUICK_QUESTIONS])


@advisor_bp.post('/messages/<message_id>/add-to-cart')
def add_recommendation_to_cart(message_id):
    data = request.get_json(silent=True) or {}
    title = (data.get('product_title') or '').strip()
    if not title:
        return error_response("Missing product_title in request body", 400)

    storefront = get_storefront()
    message = next((m for m in storefront.advisor.messages if m.id == message_id), None)
    if message is None:
        return error_response("Message not found", 404)

    resolved = next(
        (r for r in storefront.advisor.resolve(message) if r.recommended.product_title.lower() == title.lower()),
        None,
    )
    if resolved is None:
        return error_response("Recommendation not found on this message", 404)
    if not resolved.available:
        return error_response("Recommended product is not available to add to cart", 409, data=resolved.to_dict())
    if not resolved.product.variants:
        return error_response("Product has no purchasable variants", 409)

    line = storefront.cart.add_to_cart(resolved.product)
    return success_response(
        message="Added to cart",
        code=201,
        data={"line": line.to_dict(), "cart": storefront.cart.to_dict()},
    )
