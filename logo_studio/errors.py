"""
Error types raised by the generation layer.

Every failure the Workflow Controller may show to the user derives from
StudioError, so the UI can catch one type and print the message as-is.
"""

from __future__ import annotations

from typing import Optional


class StudioError(Exception):
    """Base class for all Logo Animation Studio errors."""


class ConfigurationError(StudioError):
    """Credential missing or unusable. Raised before any network call."""


class SubmissionError(StudioError):
    """The hosted API rejected a request synchronously."""


class JobFailedError(StudioError):
    """A video job reached the failed terminal state."""


class JobTimeoutError(JobFailedError):
    """A video job stayed pending longer than the configured wait bound."""


class MissingResultError(StudioError):
    """A job reported success without a downloadable result reference."""


class DownloadError(StudioError):
    """Fetching a finished result returned a non-success HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @classmethod
    def for_status(cls, status_code: int, reason: Optional[str] = None) -> "DownloadError":
        detail = f"{status_code} {reason or ''}".strip()
        return cls(f"Failed to download video. Status: {detail}", status_code=status_code)


class PartialArtifactError(StudioError):
    """The logo pipeline produced only one of the raster and vector parts."""


class InvalidImageError(StudioError):
    """An uploaded file could not be decoded as an image."""
