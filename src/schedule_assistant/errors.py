"""Error taxonomy for the API.

Every failure that crosses a service boundary is mapped onto one of these
classes. The API layer renders them with a single exception handler, so no
raw upstream error object ever reaches the client.

| Class                        | Status | Retry? |
|------------------------------|--------|--------|
| ConfigurationError           | 500    | no     |
| RequestValidationError       | 400    | no     |
| NotAuthenticatedError        | 401    | no     |
| TokenExpiredError            | 401    | no     |
| AccessDeniedError            | 403    | no     |
| UpstreamUnavailableError     | 503    | yes    |
| UpstreamFailure              | 503    | maybe  |
"""

from __future__ import annotations

from typing import Any

from schedule_assistant.normalizers import normalize_error


class ServiceError(Exception):
    """Base exception for failures reported to API clients."""

    status_code: int = 500
    error_code: str = "internal_server_error"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> dict[str, Any]:
        """JSON body returned to the client."""
        return {"error": self.error_code, "message": self.message}


class ConfigurationError(ServiceError):
    """A required secret or setting is missing."""

    status_code = 500
    error_code = "configuration_error"


class RequestValidationError(ServiceError):
    """Caller supplied bad input."""

    status_code = 400
    error_code = "bad_request"


class NotAuthenticatedError(ServiceError):
    """No usable credential set is stored."""

    status_code = 401
    error_code = "not_authenticated"


class TokenExpiredError(ServiceError):
    """Upstream rejected the stored credential."""

    status_code = 401
    error_code = "token_expired"


class AccessDeniedError(ServiceError):
    """Upstream refused access with the current grant."""

    status_code = 403
    error_code = "access_denied"


class UpstreamUnavailableError(ServiceError):
    """Transient upstream problem (rate limit, timeout); caller may retry."""

    status_code = 503
    error_code = "upstream_unavailable"


class TokenExchangeError(ServiceError):
    """Authorization code could not be exchanged for tokens."""

    status_code = 500
    error_code = "token_exchange_failed"


class StorageError(Exception):
    """Durable token storage could not be read."""


class UpstreamFailure(ServiceError):
    """Unanticipated upstream failure, rendered as a normalized error.

    Args:
        cause: The underlying exception
        context: Tag naming the operation that failed
    """

    status_code = 503

    def __init__(self, cause: BaseException, context: str, status_code: int | None = None):
        super().__init__(str(cause), error_code=context, status_code=status_code)
        self.cause = cause
        self.context = context

    def to_body(self) -> dict[str, Any]:
        return normalize_error(self.cause, self.context)
