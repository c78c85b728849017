# Overview: Customer authentication state and access-token lifecycle.

"""
Session/Identity Store

States: SIGNED_OUT -> AUTHENTICATING -> SIGNED_IN -> SIGNED_OUT (sign-out or
token rejection).

Invariant: ``customer`` is only set after a customer lookup succeeded with
an unexpired token. An expired stored token is discarded at restore time
without any network call.

Every public operation returns a bool; on failure ``error_message`` holds
the backend's user errors (newline-joined) or a network error message.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Optional

from ..entities import Customer, CustomerAccessToken
from ..errors import AuthRejected, NetworkFailure
from ..utils.helper import user_error_messages

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "customer_access_token"
TOKEN_EXPIRY_KEY = "customer_token_expiry"

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."
ACCOUNT_CREATION_FAILED_MESSAGE = "Failed to create account. Please try again."


class SessionState(str, enum.Enum):
    SIGNED_OUT = "signed_out"
    AUTHENTICATING = "authenticating"
    SIGNED_IN = "signed_in"


def network_error_message(error: NetworkFailure) -> str:
    return f"Network error: {error.message}"


class SessionStore:
    def __init__(self, client, storage):
        self.client = client
        self.storage = storage
        self.customer: Optional[Customer] = None
        self.state = SessionState.SIGNED_OUT
        self.is_loading = False
        self.error_message: Optional[str] = None
        self._lock = threading.RLock()

    @property
    def is_logged_in(self) -> bool:
        return self.state == SessionState.SIGNED_IN and self.customer is not None

    # --- stored token -----------------------------------------------------

    def stored_token(self) -> Optional[CustomerAccessToken]:
        token = self.storage.get(ACCESS_TOKEN_KEY)
        expiry = self.storage.get(TOKEN_EXPIRY_KEY)
        if not token or not expiry:
            return None
        return CustomerAccessToken(access_token=token, expires_at=expiry)

    def _save_token(self, token: CustomerAccessToken) -> None:
        self.storage.set(ACCESS_TOKEN_KEY, token.access_token)
        self.storage.set(TOKEN_EXPIRY_KEY, token.expires_at)

    def _clear_token(self) -> None:
        self.storage.delete(ACCESS_TOKEN_KEY)
        self.storage.delete(TOKEN_EXPIRY_KEY)

    # --- lifecycle --------------------------------------------------------

    def restore(self, now=None) -> bool:
        """Resume a stored session at startup if its token has not expired."""
        token = self.stored_token()
        if token is None:
            return False

        if token.is_expired(now):
            logger.info("[Customer] Stored token expired, signing out")
            self.sign_out()
            return False

        with self._lock:
            self.state = SessionState.AUTHENTICATING
        return self._fetch_customer(token.access_token)

    def sign_in(self, email: str, password: str) -> bool:
        with self._lock:
            self.is_loading = True
            self.error_message = None
            self.state = SessionState.AUTHENTICATING
        try:
            try:
                result = self.client.create_access_token(email, password)
            except NetworkFailure as e:
                return self._fail(network_error_message(e))

            errors = user_error_messages(result)
            if errors:
                return self._fail("\n".join(errors))

            token = result.get("customerAccessToken")
            if token is None:
                return self._fail(INVALID_CREDENTIALS_MESSAGE)

            self._save_token(token)
            return self._fetch_customer(token.access_token)
        finally:
            self.is_loading = False

    def create_account(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        accepts_marketing: bool = False,
    ) -> bool:
        """Create the account, then sign in; creation alone is not a session."""
        with self._lock:
            self.is_loading = True
            self.error_message = None
        try:
            try:
                result = self.client.create_customer(
                    email, password,
                    first_name=first_name,
                    last_name=last_name,
                    accepts_marketing=accepts_marketing,
                )
            except NetworkFailure as e:
                return self._fail(network_error_message(e))

            errors = user_error_messages(result)
            if errors:
                return self._fail("\n".join(errors))

            if not result.get("customer"):
                return self._fail(ACCOUNT_CREATION_FAILED_MESSAGE)
        finally:
            self.is_loading = False

        logger.info("[Customer] Account created for %s", email)
        return self.sign_in(email, password)

    def recover_password(self, email: str) -> bool:
        with self._lock:
            self.is_loading = True
            self.error_message = None
        try:
            try:
                result = self.client.recover_customer(email)
            except NetworkFailure as e:
                self.error_message = network_error_message(e)
                return False

            errors = user_error_messages(result)
            if errors:
                self.error_message = "\n".join(errors)
                return False
            return True
        finally:
            self.is_loading = False

    def refresh_customer(self) -> bool:
        token = self.stored_token()
        if token is None:
            return False
        return self._fetch_customer(token.access_token)

    def sign_out(self) -> None:
        with self._lock:
            self._clear_token()
            self.customer = None
            self.state = SessionState.SIGNED_OUT
            self.error_message = None

    # --- internals --------------------------------------------------------

    def _fail(self, message: str) -> bool:
        with self._lock:
            self.error_message = message
            if self.customer is None:
                self.state = SessionState.SIGNED_OUT
            else:
                self.state = SessionState.SIGNED_IN
        return False

    def _load_customer(self, access_token: str) -> Customer:
        customer = self.client.fetch_customer(access_token)
        if customer is None:
            raise AuthRejected("Customer access token was rejected")
        return customer

    def _fetch_customer(self, access_token: str) -> bool:
        try:
            customer = self._load_customer(access_token)
        except NetworkFailure as e:
            logger.warning("[Customer] Error fetching customer: %s", e.message)
            return self._fail(network_error_message(e))
        except AuthRejected as e:
            logger.info("[Customer] %s, signing out", e.message)
            self.sign_out()
            return False

        with self._lock:
            self.customer = customer
            self.state = SessionState.SIGNED_IN
        return True

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "is_logged_in": self.is_logged_in,
            "error_message": self.error_message,
            "customer": self.customer.to_dict() if self.customer else None,
        }
