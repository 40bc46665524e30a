"""Caller identity for API routes.

Customers identify themselves with ``X-Customer-Id``; administrative routes
require ``X-Api-Key`` to match ``STORE_ADMIN_API_KEY``.
"""

import hmac
import os

from fastapi import Header


class AuthorizationError(Exception):
    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def current_customer_id(x_customer_id: str | None = Header(default=None)) -> str:
    if not x_customer_id or not x_customer_id.strip():
        raise AuthorizationError("Authentication required", status_code=401)
    return x_customer_id.strip()


def require_admin(x_api_key: str | None = Header(default=None)) -> None:
    expected = os.environ.get("STORE_ADMIN_API_KEY")
    if not expected or not x_api_key or not hmac.compare_digest(x_api_key, expected):
        raise AuthorizationError("Admin access required", status_code=403)
