from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

NoteId = str
NoteKey = tuple[str, str]  # (vault_name, fname)


class NodeKind(str, Enum):
    # block level
    ROOT = "root"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    LIST_ITEM = "listItem"
    TABLE = "table"
    CODE = "code"
    BLOCKQUOTE = "blockquote"
    THEMATIC_BREAK = "thematicBreak"
    HTML = "html"
    OTHER = "other"
    # inline
    CODE_SPAN = "inlineCode"
    WIKI_LINK = "wikiLink"
    NOTE_REF = "refLinkV2"
    BLOCK_ANCHOR = "blockAnchor"
    # produced by the expander
    REF_EXPANSION = "refExpansion"
    MARKER = "marker"


class BlockKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    LIST_ITEM = "listItem"
    TABLE = "table"
    CODE = "code"
    QUOTE = "quote"


class AnchorType(str, Enum):
    HEADER = "header"
    BLOCK_ANCHOR = "block"


class LinkType(str, Enum):
    WIKI = "wiki"
    REF = "ref"


class MarkerReason(str, Enum):
    NOT_FOUND = "not_found"
    MISSING_ANCHOR = "missing_anchor"
    CIRCULAR = "circular"
    TOO_DEEP = "too_deep"
    AMBIGUOUS = "ambiguous"


class DisambiguationPolicy(str, Enum):
    FIRST_MATCH = "first"
    SAME_VAULT = "same_vault"
    ERROR = "error"
    PROMPT = "prompt"


@dataclass(frozen=True)
class Range:
    start: int  # char offsets into the raw body
    end: int


@dataclass
class Node:
    """
    One node of a parsed note. ``start``/``end`` index into ``source``;
    children are ordered by position and lie inside their parent's range.
    """

    kind: NodeKind
    start: int
    end: int
    source: str = field(default="", repr=False)
    children: list["Node"] = field(default_factory=list)
    depth: int | None = None  # heading level
    value: str | None = None  # heading text, anchor token, marker text
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.source[self.start : self.end]


@dataclass(frozen=True)
class Location:
    fname: str
    vault_name: str | None = None
    anchor: str | None = None
    id: NoteId | None = None

    def loc_equal(self, other: "Location") -> bool:
        """True when every field present in both locations matches."""
        for name in ("fname", "vault_name", "anchor", "id"):
            mine, theirs = getattr(self, name), getattr(other, name)
            if mine is not None and theirs is not None and mine != theirs:
                return False
        return True

    def matches(self, pattern: "Location") -> bool:
        """True when every field set on ``pattern`` equals ours."""
        for name in ("fname", "vault_name", "anchor", "id"):
            wanted = getattr(pattern, name)
            if wanted is not None and getattr(self, name) != wanted:
                return False
        return True


@dataclass(frozen=True)
class ReferenceTarget:
    anchor_start: str | None = None
    offset: int | None = None  # extra blocks after the start block
    anchor_end: str | None = None

    @property
    def is_whole_note(self) -> bool:
        return self.anchor_start in (None, "*")


@dataclass(frozen=True)
class Anchor:
    type: AnchorType
    value: str  # slug for headers, token (without "^") for block anchors
    range: Range
    depth: int | None = None
    text: str | None = None
    generated: bool = False


@dataclass(frozen=True)
class Block:
    kind: BlockKind
    node: Node = field(repr=False, compare=False)
    anchor: Anchor
    range: Range
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class Link:
    type: LinkType
    from_: Location
    to: Location
    position: Range
    raw: str
    alias: str | None = None
    ref: ReferenceTarget | None = None
    legacy: bool = False  # ((ref: [[...]])) syntax
    vault_syntax: str | None = None  # "xvault" (dendron://v/f) or "path" (v/f)


@dataclass(frozen=True)
class LinkFilter:
    loc: Location | None = None  # matched against Link.to
    from_loc: Location | None = None  # matched against Link.from_
    type: LinkType | None = None

    def accepts(self, link: Link) -> bool:
        if self.type is not None and link.type != self.type:
            return False
        if self.loc is not None and not link.to.matches(self.loc):
            return False
        if self.from_loc is not None and not link.from_.matches(self.from_loc):
            return False
        return True


@dataclass
class Note:
    id: NoteId
    fname: str
    vault_name: str
    body: str
    title: str = ""
    custom: dict[str, Any] = field(default_factory=dict)

    @property
    def location(self) -> Location:
        return Location(fname=self.fname, vault_name=self.vault_name, id=self.id)


def note_key(note: Note) -> NoteKey:
    return (note.vault_name, note.fname)
