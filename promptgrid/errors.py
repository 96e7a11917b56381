"""Error taxonomy shared by the translator, normalizer and HTTP routes."""

from __future__ import annotations

from fastapi import status


class PromptGridError(Exception):
    """Base class for failures that are reported to the caller as ``{"error": ...}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(PromptGridError):
    """A required input field is missing or a parameter has the wrong shape."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(PromptGridError):
    """The provider answered with a non-2xx status."""


class MalformedResponseError(PromptGridError):
    """The provider body could not be parsed as JSON."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ExtractionError(PromptGridError):
    """The provider body parsed but carried no recognisable image data."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnexpectedError(PromptGridError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
