"""Application exceptions."""


class FormUploadError(Exception):
    """Base exception for form parsing and upload handling."""

    status_code: int = 400

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnsupportedContentTypeError(FormUploadError):
    """Request body content type cannot be parsed as a form."""

    status_code = 415


class LimitExceededError(FormUploadError):
    """A field, file or count limit was exceeded."""

    status_code = 413


class MalformedBodyError(FormUploadError):
    """Request body does not match its declared encoding."""


class RequestAbortedError(FormUploadError):
    """Client went away before the body was complete."""


class ValidationError(FormUploadError):
    """Validation error."""

    status_code = 422
