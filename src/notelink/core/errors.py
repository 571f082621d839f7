"""Exceptions raised by notelink.

Only operations whose caller must decide what happens next raise; anything
that can be handled locally (a broken link, a cyclic reference) is turned
into data or a marker instead.
"""

from typing import Any


class NotelinkError(Exception):
    """Base exception for all notelink errors.

    Attributes:
        message: Human-readable error message
        details: Additional context about the error
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(NotelinkError):
    """Invalid or unreadable notelink.toml."""


class NoteLoadError(NotelinkError):
    """A note file could not be decoded."""

    def __init__(self, fname: str, reason: str):
        super().__init__(f"Cannot load note '{fname}': {reason}", {"fname": fname})
        self.fname = fname


class AnchorNotFoundError(NotelinkError):
    """A reference names an anchor the target note does not have."""

    def __init__(self, fname: str, anchor: str):
        super().__init__(
            f"Anchor '{anchor}' not found in note '{fname}'",
            {"fname": fname, "anchor": anchor},
        )
        self.fname = fname
        self.anchor = anchor


class AmbiguousLinkError(NotelinkError):
    """A location matches notes in several vaults and policy forbids guessing."""

    def __init__(self, fname: str, candidates: list[Any]):
        vaults = [c.vault_name for c in candidates]
        super().__init__(
            f"'{fname}' is ambiguous, found in vaults: {', '.join(vaults)}",
            {"fname": fname, "vaults": vaults},
        )
        self.fname = fname
        self.candidates = candidates


class StaleLinkError(NotelinkError):
    """The stored span of a link no longer matches the note body."""

    def __init__(self, raw: str, start: int, end: int):
        super().__init__(
            f"Link {raw!r} is no longer at [{start}, {end})",
            {"raw": raw, "start": start, "end": end},
        )
