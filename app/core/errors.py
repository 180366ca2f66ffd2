"""API error taxonomy.

Every failure a client can see is one of these. Each carries an HTTP status,
a short machine-readable category and a human-readable message; main.py
renders them as ``{"error": category, "message": message}``.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    category = "server_error"
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.category, "message": self.message}


class ValidationFailed(ApiError):
    status_code = 400
    category = "validation_error"
    default_message = "Invalid request"


class NotFound(ApiError):
    status_code = 404
    category = "not_found"
    default_message = "Not found"


class Unauthorized(ApiError):
    status_code = 401
    category = "unauthorized"
    default_message = "Unauthorized"


class ServerMisconfigured(ApiError):
    status_code = 500
    category = "server_misconfigured"
    default_message = "Server configuration error: Admin password not configured"


class UploadRejected(ApiError):
    status_code = 400
    category = "upload_rejected"
    default_message = "Upload rejected"


class PayloadTooLarge(UploadRejected):
    status_code = 413
    default_message = "Payload too large"


class RateLimited(ApiError):
    status_code = 429
    category = "rate_limited"
    default_message = "Too many requests"


class StorageFailure(ApiError):
    status_code = 500
    category = "storage_error"
    default_message = "Storage operation failed"


@contextmanager
def storage_errors(message: str) -> Iterator[None]:
    """Turn database/filesystem faults into a generic StorageFailure.

    The original exception is logged with its traceback; the client only
    sees ``message``.
    """
    try:
        yield
    except (SQLAlchemyError, OSError) as exc:
        logger.exception("storage.failure", extra={"error_message": message})
        raise StorageFailure(message) from exc
