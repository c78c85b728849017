from flask import Blueprint, request

from . import get_storefront
from ..utils.response import error_response, success_response

auth_bp = Blueprint('auth', __name__, url_prefix='/api/customer')


def _credentials(data):
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''
    return email, password


def _session_result(ok, session, message):
    if ok:
        return success_response(message=message, data=session.to_dict())
    return error_response(session.error_message or "Request failed", 401, data=session.to_dict())


@auth_bp.get('')
def me():
    return success_response(data=get_storefront().session.to_dict())


@auth_bp.post('/sign-in')
def sign_in():
    email, password = _credentials(request.get_json(silent=True) or {})
    if not email or not password:
        return error_response("email and password required", 400)

    session = get_storefront().session
    return _session_result(session.sign_in(email, password), session, "Signed in")


@auth_bp.post('/sign-up')
def sign_up():
    data = request.get_json(silent=True) or {}
    email, password = _credentials(data)
    if not email or not password:
        return error_response("email and password required", 400)

    session = get_storefront().session
    ok = session.create_account(
        email,
        password,
        first_name=data.get('first_name'),
        last_name=data.get('last_name'),
        accepts_marketing=bool(data.get('accepts_marketing', False)),
    )
    return _session_result(ok, session, "Account created")


@auth_bp.post('/recover')
def recover():
    data = request.get_json(silent=True) or {}
    email = (data.get('email') or '').strip()
    if not email:
        return error_response("email required", 400)

    session = get_storefront().session
    if session.recover_password(email):
        return success_response(message="Password reset email sent")
    return error_response(session.error_message, 400)


@auth_bp.post('/refresh')
def refresh():
    session = get_storefront().session
    return _session_result(session.refresh_customer(), session, "Customer refreshed")


@auth_bp.post('/sign-out')
def sign_out():
    session = get_storefront().session
    session.sign_out()
    return success_response(message="Signed out", data=session.to_dict())
