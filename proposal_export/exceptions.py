"""
Errors raised by the proposal exporter.

Each error carries a stable ``error_code`` so the HTTP layer can map it to a
status code without inspecting messages.
"""

from __future__ import annotations

from typing import Any, Optional


class ExportError(Exception):
    """Base class for every exporter failure."""

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_EXPORT",
        details: Optional[Any] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class UnsupportedFormat(ExportError):
    """Requested export kind is neither PDF nor DOCX."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_EXPORT_FORMAT", details=details)


class RenderingFailure(ExportError):
    """Measuring, drawing or serializing the document failed."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_EXPORT_RENDER", details=details)


class UpstreamUnavailable(ExportError):
    """The backend for a format is switched off."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_EXPORT_DISABLED", details=details)


class ConfigurationError(ExportError):
    """``settings.PROPOSAL_EXPORT`` holds a value the exporter cannot use."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_EXPORT_CONFIG", details=details)
