"""
Error Taxonomy for the Factory Digital Twin

Polling can fail in two ways, and neither is fatal:
- NetworkFailure: the request was rejected, refused, or timed out
- ParseFailure: the body was not JSON or did not match the envelope schema

Callers catch DashboardError at the tick boundary, log it, and keep
showing the last successfully computed state.
"""

from typing import Optional


class DashboardError(Exception):
    """Base class for recoverable dashboard errors."""

    kind = "error"

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url

    def to_dict(self) -> dict:
        """Convert to dictionary for display and logging."""
        return {
            "kind": self.kind,
            "message": self.message,
            "url": self.url,
        }


class NetworkFailure(DashboardError):
    """The prediction service could not be reached."""

    kind = "network"


class ParseFailure(DashboardError):
    """The prediction service answered with an unusable body."""

    kind = "parse"
