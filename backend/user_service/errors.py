"""Error taxonomy shared by the upstream client, services and routes.

Every failure a caller can see is a ``ServiceError``: ``ClientError`` for
bad input or a 4xx rejection from Supabase Auth, ``ServerError`` for
everything else. Routes never build error responses themselves; the
exception handler registered in ``main.create_app`` renders them as
plain-text bodies.
"""
from __future__ import annotations

from typing import Optional

from fastapi import status


class ServiceError(Exception):
    """Base class for caller-visible failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, step: Optional[str] = None):
        self.message = message
        self.step = step
        super().__init__(message)


class ClientError(ServiceError):
    """Bad caller input, or the upstream rejected the request."""

    status_code = status.HTTP_400_BAD_REQUEST


class ServerError(ServiceError):
    """Transport failure, unparseable upstream response or database failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UpstreamTransportError(Exception):
    """Raised when a request never produced an HTTP response."""

    def __init__(self, resource: str, method: str, path: str, cause: BaseException):
        self.resource = resource
        self.method = method
        self.path = path
        self.cause = cause
        super().__init__(str(cause) or cause.__class__.__name__)
