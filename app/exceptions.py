from typing import Any, Mapping, Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    Attributes:
        code: machine-readable error code (e.g. ``missing_name``)
        message: human-readable message
        details: optional mapping with extra context
        http_status: suggested HTTP status code for handlers
    """

    http_status = 400
    default_code = "error"

    def __init__(
        self,
        code: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        self.code = code or self.default_code
        self.message = message or self.code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(ServiceError):
    """Raised when input data is invalid or a precondition for a service call is not met.

    Raised before any mutation; http_status is 422.
    """

    http_status = 422
    default_code = "invalid_input"


class NotFoundError(ServiceError):
    """Raised when a requested resource was not found. http_status is 404."""

    http_status = 404
    default_code = "not_found"


class ConflictError(ServiceError):
    """Raised when a shared resource is already claimed or a unique value is taken.

    Raised inside a unit of work, which is rolled back. http_status is 409.
    """

    http_status = 409
    default_code = "conflict"
