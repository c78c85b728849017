from . import main, get_storefront
from ..utils.response import success_response

@main.route('/')
def index():
    storefront = get_storefront()
    snapshot = storefront.catalog.snapshot()
    return success_response(data={
        "products_loaded": len(snapshot.products),
        "catalog_refreshed_at": snapshot.refreshed_at.isoformat() if snapshot.refreshed_at else None,
        "cart_item_count": storefront.cart.item_count,
        "customer_state": storefront.session.state.value,
    })
