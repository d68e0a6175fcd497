"""Error taxonomy for the upload workflow.

Every failure that reaches the user is converted into exactly one
``UploadError`` subclass before it is attached to an upload session. The
``kind`` attribute is stable and meant for client-side handling, ``message``
is what gets shown in the error banner.
"""

from typing import Optional


class UploadError(Exception):
    """Base class for all classified upload failures

    Attributes:
        message: Human-readable error message
        kind: Error kind (e.g., "validation", "transport")
    """

    kind = "unknown"
    default_message = "Something went wrong while processing your image."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(UploadError):
    """The selected file was rejected before any remote call was made."""

    kind = "validation"
    default_message = "The selected file cannot be used."


class FileTooLargeError(ValidationError):
    default_message = "File is too large. Maximum size is 10MB."


class InvalidFileTypeError(ValidationError):
    default_message = "Invalid file type. Please upload a JPG or PNG image."


class ConfigurationError(UploadError):
    """The transform service credential is missing or was rejected."""

    kind = "configuration"
    default_message = (
        "Image service is not configured. "
        "Please add GEMINI_API_KEY to your environment variables."
    )


class ContentPolicyError(UploadError):
    kind = "content_policy"
    default_message = (
        "The image was flagged by safety filters. Please try a different image."
    )


class TransportError(UploadError):
    kind = "transport"
    default_message = (
        "Network error. Please check your internet connection and try again."
    )


class EmptyResultError(UploadError):
    kind = "empty_result"
    default_message = "No image was generated. Please try again."


class UnknownError(UploadError):
    """Anything the transform adapter could not classify.

    The raw message is surfaced as-is so the user sees something actionable.
    """

    kind = "unknown"


class InvalidStateError(Exception):
    """A workflow action was requested in a status that does not allow it.

    Examples:
        - Processing with nothing selected
        - Downloading before a result exists
    """

    def __init__(self, message: str, status: Optional[str] = None):
        self.message = message
        self.status = status
        super().__init__(message)
