"""Error taxonomy for the receipt scanning pipeline.

Every error raised by a pipeline stage derives from ScanError, and ``str(exc)``
is the message shown to the user. The workflow controller is the only place
that turns these into presentation.
"""


class ScanError(Exception):
    """Base exception for a failed scan attempt."""

    message = "An unknown error occurred"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class ImageError(ScanError):
    """The supplied image could not be used."""


class InvalidImageError(ImageError):
    """Raised when the image bytes cannot be decoded."""

    message = "Invalid image provided"


class ExtractionError(ScanError):
    """Text could not be recovered from the image."""


class NoTextFoundError(ExtractionError):
    """Raised when OCR finishes without recognizing any text."""

    message = "No text found in the image"


class RecognitionFailedError(ExtractionError):
    """Raised when the OCR engine itself fails."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"OCR failed: {detail}")


class InterpretationError(ScanError):
    """The extracted text could not be turned into receipt fields."""


class NoCredentialError(InterpretationError):
    """Raised when no provider has an API key configured."""

    message = "No API key configured. Please add your API key in Settings."


class NetworkError(InterpretationError):
    """Raised on a transport failure talking to a provider."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Network error: {detail}")


class ApiError(InterpretationError):
    """Raised when a provider answers with a non-2xx status."""

    def __init__(self, api_message: str) -> None:
        self.api_message = api_message
        super().__init__(f"API error: {api_message}")


class InvalidResponseError(InterpretationError):
    """Raised when a 2xx response does not have the expected shape."""

    message = "Invalid response from AI service."


class ParsingError(InterpretationError):
    """Raised when the model's text cannot be decoded into receipt fields."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to parse response: {reason}")
