"""Exception types raised by atlas-command-client."""

from __future__ import annotations


class AtlasClientError(RuntimeError):
    """Raised when a request to Atlas Command cannot be completed."""


class AtlasHTTPError(AtlasClientError):
    """Raised when Atlas Command answers with a non-2xx status."""

    def __init__(self, status: int, detail: str) -> None:
        super().__init__(f"HTTP {status}: {detail}")
        self.status = status
        self.detail = detail


class ComponentValidationError(ValueError):
    """Raised when a component payload is rejected before it is sent."""


class UnknownComponentKeyError(ComponentValidationError):
    """Raised for a component name that is neither known nor custom_-prefixed."""

    def __init__(self, key: str, prefix: str) -> None:
        super().__init__(
            f"Unknown component '{key}' in entity components. "
            f"Custom components must be prefixed with '{prefix}'"
        )
        self.key = key
