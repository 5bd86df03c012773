class ApiError(Exception):
    """Base exception for all backend communication errors."""


class NetworkError(ApiError):
    """Raised when the backend could not be reached or returned no usable response."""


class FormNotFoundError(ApiError):
    """Raised when the requested form does not exist or is inactive."""


class FormDescriptionError(ApiError):
    """Raised when a form description payload is malformed."""


class BackendError(ApiError):
    """Raised when the backend reports a structured failure."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code
