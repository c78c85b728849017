from flask import Blueprint, current_app

from ..errors import NetworkFailure, PreconditionViolation, StorefrontError
from ..utils.response import storefront_error_response

main = Blueprint('main', __name__)

ERROR_STATUS = {
    NetworkFailure: 502,
    PreconditionViolation: 409,
}


def get_storefront():
    return current_app.extensions["storefront"]


@main.app_errorhandler(StorefrontError)
def handle_storefront_error(error):
    current_app.logger.warning("%s: %s", type(error).__name__, error.message)
    return storefront_error_response(error, code=ERROR_STATUS.get(type(error), 400))


from . import index  # noqa: E402,F401
