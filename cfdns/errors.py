from enum import StrEnum

from .client import CloudflareError

__all__ = (
    "OperationErrorCode",
    "InvalidRequestError",
    "classify_error",
    "is_not_found",
    "is_rate_limited",
)


class OperationErrorCode(StrEnum):
    """Error codes reported to the orchestrator, which decides retries from them."""

    INVALID_REQUEST = "InvalidRequest"
    INVALID_CREDENTIALS = "InvalidCredentials"
    ACCESS_DENIED = "AccessDenied"
    NOT_FOUND = "NotFound"
    THROTTLING = "Throttling"
    SERVICE_INTERNAL_ERROR = "ServiceInternalError"
    INTERNAL_FAILURE = "InternalFailure"


class InvalidRequestError(ValueError):
    """Raised when a request payload is malformed or violates a record constraint."""


_STATUS_CODES: dict[int, OperationErrorCode] = {
    400: OperationErrorCode.INVALID_REQUEST,
    401: OperationErrorCode.INVALID_CREDENTIALS,
    403: OperationErrorCode.ACCESS_DENIED,
    404: OperationErrorCode.NOT_FOUND,
    429: OperationErrorCode.THROTTLING,
}


def classify_error(error: BaseException) -> OperationErrorCode:
    """
    Map an exception raised while serving a request to an operation error code.

    Anything that is not a Cloudflare API error with a known status
    (transport errors, timeouts, unexpected bugs) is an InternalFailure.
    """
    if isinstance(error, InvalidRequestError):
        return OperationErrorCode.INVALID_REQUEST
    if not isinstance(error, CloudflareError) or error.status_code is None:
        return OperationErrorCode.INTERNAL_FAILURE
    if error.status_code in _STATUS_CODES:
        return _STATUS_CODES[error.status_code]
    if 500 <= error.status_code < 600:
        return OperationErrorCode.SERVICE_INTERNAL_ERROR
    return OperationErrorCode.INTERNAL_FAILURE


def is_not_found(error: BaseException) -> bool:
    return isinstance(error, CloudflareError) and error.status_code == 404


def is_rate_limited(error: BaseException) -> bool:
    return isinstance(error, CloudflareError) and error.status_code == 429
