"""Bridge error types.

Formatting and content commands never raise to the caller; only queries
(which can time out or lose their renderer) and structural misconfiguration
surface errors.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for all bridge failures."""


class BridgeTimeoutError(BridgeError):
    """A query got no response from the renderer within ``query_timeout``."""

    def __init__(self, kind: str, request_id: str, timeout: float) -> None:
        super().__init__(
            f"No '{kind}' response for request {request_id} after {timeout}s"
        )
        self.kind = kind
        self.request_id = request_id
        self.timeout = timeout


class RendererDetachedError(BridgeError):
    """The renderer is not attached, or went away while a query was pending."""


class ToolbarConfigurationError(BridgeError):
    """A toolbar was attached without an editor to drive."""


class UnknownActionError(BridgeError, ValueError):
    """Raised for a command outside the ``Action`` vocabulary."""
