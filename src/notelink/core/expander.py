"""Reference Expander: replace note references with the content they point at."""

import logging
from dataclasses import replace

from .blocks import extract_blocks
from .context import LinkContext
from .errors import AmbiguousLinkError, AnchorNotFoundError
from .links import link_from_node
from .model import Link, MarkerReason, Node, NodeKind, Note
from .resolver import resolve_one
from .rewriter import normalize_legacy_refs
from .slicer import slice_by_reference
from .syntax import format_target

logger = logging.getLogger(__name__)

MARKERS = {
    MarkerReason.NOT_FOUND: "> **notelink:** no note found for `{target}`",
    MarkerReason.MISSING_ANCHOR: "> **notelink:** anchor `{anchor}` not found in `{target}`",
    MarkerReason.CIRCULAR: "> **notelink:** circular reference to `{target}`",
    MarkerReason.TOO_DEEP: "> **notelink:** too many nested note references at `{target}`",
    MarkerReason.AMBIGUOUS: "> **notelink:** `{target}` is ambiguous, found in vaults: {vaults}",
}


def _marker(node: Node, link: Link, reason: MarkerReason, **extra: str) -> Node:
    target = format_target(link.to.fname, link.to.vault_name, link.vault_syntax)
    text = MARKERS[reason].format(
        target=target,
        anchor=extra.get("anchor", ""),
        vaults=extra.get("vaults", ""),
    )
    logger.debug("reference %s not expanded: %s", link.raw, reason.value)
    return Node(
        NodeKind.MARKER,
        node.start,
        node.end,
        source=node.source,
        value=text,
        data={"reason": reason, "link": link},
    )


def _dedent(text: str) -> str:
    """Shift a slice left by the indentation of its first line."""
    width = len(text) - len(text.lstrip(" "))
    if not width:
        return text
    lines = []
    for line in text.split("\n"):
        lead = len(line) - len(line.lstrip(" "))
        lines.append(line[min(width, lead) :])
    return "\n".join(lines)


def _expand_ref(node: Node, note: Note, ctx: LinkContext) -> Node:
    link = link_from_node(node, note)
    try:
        target = resolve_one(
            link.to, ctx.index, link.from_, ctx.options.policy, ctx.chooser
        )
    except AmbiguousLinkError as exc:
        vaults = ", ".join(exc.details["vaults"])
        return _marker(node, link, MarkerReason.AMBIGUOUS, vaults=vaults)
    if target is None:
        return _marker(node, link, MarkerReason.NOT_FOUND)
    if ctx.visiting(target):
        return _marker(node, link, MarkerReason.CIRCULAR)
    if ctx.depth >= ctx.options.max_depth:
        return _marker(node, link, MarkerReason.TOO_DEEP)

    body = target.body
    if ctx.options.normalize_legacy:
        body = normalize_legacy_refs(body, ctx.parser)
        target = replace(target, body=body)
    root = ctx.parser.parse(body)
    try:
        start, end = slice_by_reference(target, extract_blocks(target, ctx, root=root), link.ref)
    except AnchorNotFoundError as exc:
        return _marker(node, link, MarkerReason.MISSING_ANCHOR, anchor=exc.anchor)

    inner_ctx = ctx.descend(target)
    # A nested list item would otherwise re-parse as indented code
    sub_root = ctx.parser.parse(_dedent(body[start:end]))
    expanded = _expand_node(sub_root, target, inner_ctx)
    return Node(
        NodeKind.REF_EXPANSION,
        node.start,
        node.end,
        source=node.source,
        children=[expanded],
        data={"link": link, "note": target, "range": (start, end)},
    )


def _expand_node(node: Node, note: Note, ctx: LinkContext) -> Node:
    if node.kind is NodeKind.NOTE_REF:
        return _expand_ref(node, note, ctx)
    if not node.children:
        return node
    children = [_expand_node(c, note, ctx) for c in node.children]
    if all(new is old for new, old in zip(children, node.children)):
        return node
    return replace(node, children=children)


def expand_refs(note: Note, ctx: LinkContext, root: Node | None = None) -> Node:
    """
    Expand every note reference of ``note``, recursively.

    Each NOTE_REF node becomes a REF_EXPANSION node holding the parsed slice
    of the target note, or a MARKER node when the target is missing, the
    anchor is unknown, the reference is circular, nesting is deeper than
    ``ctx.options.max_depth`` or the target is ambiguous under the ERROR
    policy. A bad reference never stops the rest of the note from expanding.

    The tree passed in (or parsed from ``note.body``) is not modified; a new
    tree sharing the untouched subtrees is returned.
    """
    if root is None:
        body = note.body
        if ctx.options.normalize_legacy:
            body = normalize_legacy_refs(body, ctx.parser)
            note = replace(note, body=body)
        root = ctx.parser.parse(body)
    return _expand_node(root, note, ctx.enter(note))


def render_markdown(node: Node) -> str:
    """
    Markdown text of a (possibly expanded) tree.

    Untouched text between children is copied from the node's source, so
    everything outside expanded references comes out byte for byte.
    """
    if node.kind is NodeKind.MARKER:
        return node.value or ""
    if node.kind is NodeKind.REF_EXPANSION:
        return "".join(render_markdown(c) for c in node.children)
    if not node.children:
        return node.text
    parts = []
    pos = node.start
    for child in node.children:
        parts.append(node.source[pos : child.start])
        parts.append(render_markdown(child))
        pos = child.end
    parts.append(node.source[pos : node.end])
    return "".join(parts)


def expand_to_markdown(note: Note, ctx: LinkContext) -> str:
    return render_markdown(expand_refs(note, ctx))
