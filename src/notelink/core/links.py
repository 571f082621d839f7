"""Link Finder: wikilinks and note references of one note."""

from .anchors import walk
from .context import LinkContext
from .model import Link, LinkFilter, Location, Node, NodeKind, Note, Range
from .syntax import ParsedLink

LINK_NODE_KINDS = (NodeKind.WIKI_LINK, NodeKind.NOTE_REF)


def link_from_node(node: Node, note: Note) -> Link:
    """Build the ``Link`` for a WIKI_LINK or NOTE_REF node of ``note``."""
    parsed: ParsedLink = node.data["link"]
    return Link(
        type=parsed.type,
        from_=note.location,
        to=Location(
            fname=parsed.fname,
            vault_name=parsed.vault_name,
            anchor=parsed.anchor,
        ),
        position=Range(node.start, node.end),
        raw=node.text,
        alias=parsed.alias,
        ref=parsed.ref,
        legacy=parsed.legacy,
        vault_syntax=parsed.vault_syntax,
    )


def find_links(
    note: Note,
    ctx: LinkContext,
    filter: LinkFilter | None = None,
    root: Node | None = None,
) -> list[Link]:
    """
    Find every wikilink and note reference in ``note``.

    Code spans, code blocks and raw HTML are skipped by the parser; the
    ``[[...]]`` inside a legacy ``((ref: ...))`` belongs to the reference and
    is not reported separately.

    Args:
        note: Note to scan
        ctx: Context supplying the parser
        filter: Partial-match predicate on ``to``/``from_``/``type``
        root: Already parsed tree of ``note.body``, if the caller has one

    Returns:
        Links in source order, each with its exact text span
    """
    if root is None:
        root = ctx.parser.parse(note.body)
    links = [link_from_node(n, note) for n in walk(root) if n.kind in LINK_NODE_KINDS]
    if filter is not None:
        links = [link for link in links if filter.accepts(link)]
    return links
