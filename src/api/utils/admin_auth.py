"""
Admin API Key Authentication

Guards the operator endpoints: founding slot assignment, outbox dispatch
and the email delivery queue.
"""

import hmac

from fastapi import Header, status
from libs.result import Error
from src.api.error import ClientError
from config import ApplicationConfig


async def verify_admin_api_key(x_admin_api_key: str = Header(None)):
    """
    Verify the X-Admin-API-Key header against ADMIN_API_KEY.

    Raises:
        ClientError: 401 if key is missing or invalid
    """
    if not x_admin_api_key:
        raise ClientError(
            Error("UNAUTHORIZED", "Admin API key required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    if not hmac.compare_digest(x_admin_api_key, ApplicationConfig.ADMIN_API_KEY):
        raise ClientError(
            Error("INVALID_API_KEY", "Invalid admin API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True
