"""Anchor Finder: header and block anchors of one note, in document order."""

from typing import Iterator

from .context import LinkContext
from .model import Anchor, AnchorType, Node, NodeKind, Range
from .utils import Slugger


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal, children in document order."""
    yield node
    for child in node.children:
        yield from walk(child)


def header_anchor(node: Node, slugger: Slugger) -> Anchor:
    return Anchor(
        type=AnchorType.HEADER,
        value=slugger.slug(node.value or ""),
        range=Range(node.start, node.end),
        depth=node.depth,
        text=node.value,
    )


def block_anchor(node: Node) -> Anchor:
    return Anchor(
        type=AnchorType.BLOCK_ANCHOR,
        value=node.value or "",
        range=Range(node.start, node.end),
    )


def find_anchors(body: str, ctx: LinkContext, root: Node | None = None) -> list[Anchor]:
    """
    Find every addressable anchor in ``body``.

    Headings give header anchors (slugified text, duplicates suffixed);
    ``^token`` at the end of a line gives a block anchor. The parser never
    emits block anchor nodes inside code or link brackets, so walking the
    tree is enough to honour those scopes.

    Args:
        body: Raw note body (no frontmatter)
        ctx: Context supplying the parser
        root: Already parsed tree of ``body``, if the caller has one

    Returns:
        Anchors ordered by position
    """
    if root is None:
        root = ctx.parser.parse(body)
    slugger = Slugger()
    out: list[Anchor] = []
    for node in walk(root):
        if node.kind is NodeKind.HEADING:
            out.append(header_anchor(node, slugger))
        elif node.kind is NodeKind.BLOCK_ANCHOR:
            out.append(block_anchor(node))
    return out
