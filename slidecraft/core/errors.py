"""
Error taxonomy for SlideCraft.

Every error raised across a component boundary derives from SlideCraftError
and carries the HTTP status the API layer answers with.
"""

from typing import Any, Dict, Optional


class SlideCraftError(Exception):
    """Base exception for SlideCraft errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> Dict[str, Any]:
        """Body returned to API callers."""
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(SlideCraftError):
    """Raised when user input is unusable (bad URL, empty content, bad upload)."""

    status_code = 400


class DocumentParseError(ValidationError):
    """Raised when an uploaded document cannot be read."""

    status_code = 422


class UpstreamError(SlideCraftError):
    """Raised when a remote page or the generation service fails."""

    status_code = 502

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.upstream_status = upstream_status
        # Surface client errors from the remote page as-is (404, 403, ...)
        if upstream_status is not None and 400 <= upstream_status < 500:
            self.status_code = upstream_status


class CredentialError(SlideCraftError):
    """Raised when the Gemini API key is missing or rejected."""

    status_code = 401


class GenerationFormatError(SlideCraftError):
    """Raised when the model output is not a valid presentation document."""

    status_code = 502

    def __init__(self, message: str, raw_output: Optional[str] = None):
        super().__init__(message)
        self.raw_output = raw_output


# Short name used throughout the API docs
FormatError = GenerationFormatError


class SlideIndexError(SlideCraftError, IndexError):
    """Raised internally when an editor operation targets a missing slide."""

    status_code = 400

    def __init__(self, index: int, slide_count: int):
        self.index = index
        self.slide_count = slide_count
        super().__init__(
            f"Slide index {index} out of range for deck of {slide_count} slides"
        )
