"""
API errors raised by routes and rendered by the handlers in app.py.

For the webhook endpoint the status code is the retry signal to Stripe:
ClientError (4xx) means do not redeliver, ServerError (500) means redeliver.
"""

from fastapi import status
from libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    """Retryable failure; the message is logged but not returned to the caller"""

    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)
