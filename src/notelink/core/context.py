"""Explicit context threaded through every walk over a note."""

from dataclasses import dataclass, field, replace
from typing import Callable

from .model import DisambiguationPolicy, Location, Note, NoteKey, note_key
from .ports import CorpusIndex, ParserStrategy

Chooser = Callable[[Location, list[Note]], Note | None]


@dataclass(frozen=True)
class RefOptions:
    max_depth: int = 3
    normalize_legacy: bool = True
    policy: DisambiguationPolicy = DisambiguationPolicy.SAME_VAULT


@dataclass(frozen=True)
class LinkContext:
    """
    Everything a traversal needs, passed as a value rather than kept on a
    shared processor. ``depth`` and ``path`` describe the current reference
    expansion chain; ``descend`` returns a new context one level deeper, so
    sibling branches and notes processed in parallel never share state.
    """

    index: CorpusIndex
    parser: ParserStrategy
    options: RefOptions = field(default_factory=RefOptions)
    chooser: Chooser | None = None
    depth: int = 0
    path: frozenset[NoteKey] = frozenset()

    def visiting(self, note: Note) -> bool:
        return note_key(note) in self.path

    def enter(self, note: Note) -> "LinkContext":
        """Mark ``note`` as being on the expansion path without going deeper."""
        return replace(self, path=self.path | {note_key(note)})

    def descend(self, note: Note) -> "LinkContext":
        return replace(self, depth=self.depth + 1, path=self.path | {note_key(note)})
