"""Application-level exception types for the concierge call core."""

from __future__ import annotations


class ConciergeError(Exception):
    """Base exception for the call core."""


class ConfigurationError(ConciergeError):
    """Raised when settings fail validation at startup."""


class CaptureUnavailableError(ConciergeError):
    """Raised when the capture device cannot be acquired (missing or denied)."""


class StreamingInputError(ConciergeError):
    """Raised by a streaming input source that fails while the call is live."""


class EmptyTurnError(ConciergeError, ValueError):
    """Raised when a turn would be appended with blank text."""


class OrderDataError(ConciergeError):
    """Raised when the order dataset cannot be loaded or parsed."""
