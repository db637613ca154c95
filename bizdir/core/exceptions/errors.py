from fastapi import status


class ServiceError(Exception):
    """Base class for errors that map onto a JSON error response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, detail: str | None = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request parameters"


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    message = "Resource already exists"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class UpstreamError(ServiceError):
    """The places provider call failed (network, timeout or non-2xx)."""

    message = "Places provider request failed"


class DetailsFetchError(UpstreamError):
    message = "Failed to fetch place details"


class StoreError(ServiceError):
    message = "Database operation failed"


class CacheError(ServiceError):
    message = "Cache operation failed"
