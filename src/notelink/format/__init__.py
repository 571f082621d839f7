"""Text-to-text transforms over note bodies."""

from .links import normalize_note_refs
from .title import h1_to_title

__all__ = [
    "normalize_note_refs",
    "h1_to_title",
]
