"""Exception types raised by the harvester."""

from __future__ import annotations

from typing import Optional


class HarvestError(Exception):
    """Base class for all harvester failures."""


class ConfigError(HarvestError):
    """Configuration is missing or malformed."""


class AuthenticationError(HarvestError):
    """Login could not be completed."""


class StructuralNotFound(HarvestError):
    """A required element of the picker UI is absent."""

    def __init__(self, element: str, detail: Optional[str] = None) -> None:
        message = f"{element} not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.element = element


class FetchFailed(HarvestError):
    """The emoji could not be downloaded."""

    def __init__(self, status: Optional[int], reason: str = "") -> None:
        if status is None:
            message = f"Failed to fetch emoji: {reason or 'transport error'}"
        else:
            message = f"Failed to fetch emoji: HTTP {status} {reason}".rstrip()
        super().__init__(message)
        self.status = status


class EmptyPayload(HarvestError):
    """Downloaded buffer is empty."""

    def __init__(self) -> None:
        super().__init__("Downloaded buffer is empty")


class EmptyOutput(HarvestError):
    """Encoded buffer is empty."""

    def __init__(self) -> None:
        super().__init__("Resized buffer is empty")


class DecodeFailed(HarvestError):
    """Downloaded bytes are not a decodable image."""


class WriteVerificationMismatch(UserWarning):
    """Size on disk differs from the encoded buffer; reported, never raised."""
