"""Block Extractor: split a note into addressable blocks."""

from dataclasses import dataclass

from .anchors import block_anchor, find_anchors, walk
from .context import LinkContext
from .model import Anchor, AnchorType, Block, BlockKind, Node, NodeKind, Note, Range
from .utils import Slugger

_SIMPLE_KINDS = {
    NodeKind.HEADING: BlockKind.HEADING,
    NodeKind.PARAGRAPH: BlockKind.PARAGRAPH,
    NodeKind.TABLE: BlockKind.TABLE,
    NodeKind.CODE: BlockKind.CODE,
    NodeKind.BLOCKQUOTE: BlockKind.QUOTE,
}
_GENERATED_NAMES = {
    BlockKind.HEADING: "heading",
    BlockKind.PARAGRAPH: "paragraph",
    BlockKind.LIST: "list",
    BlockKind.TABLE: "table",
    BlockKind.CODE: "code",
    BlockKind.QUOTE: "quote",
}


@dataclass
class _Pending:
    kind: BlockKind
    node: Node
    anchor: Anchor | None = None
    aliases: tuple[str, ...] = ()


def _split_explicit(anchor_nodes: list[Node]) -> tuple[Anchor | None, tuple[str, ...]]:
    """The last ``^token`` names the block, earlier ones become aliases."""
    if not anchor_nodes:
        return None, ()
    *rest, last = anchor_nodes
    return block_anchor(last), tuple(n.value or "" for n in rest)


def _own_anchor_nodes(node: Node) -> list[Node]:
    if node.kind is NodeKind.BLOCKQUOTE:
        return [n for n in walk(node) if n.kind is NodeKind.BLOCK_ANCHOR]
    return [c for c in node.children if c.kind is NodeKind.BLOCK_ANCHOR]


def _item_anchor_nodes(item: Node) -> list[Node]:
    # Only the item's own paragraphs; nested lists carry their own anchors
    out = []
    for child in item.children:
        if child.kind is NodeKind.PARAGRAPH:
            out.extend(c for c in child.children if c.kind is NodeKind.BLOCK_ANCHOR)
    return out


def _is_standalone_anchor(node: Node) -> bool:
    if node.kind is not NodeKind.PARAGRAPH or len(node.children) != 1:
        return False
    child = node.children[0]
    return child.kind is NodeKind.BLOCK_ANCHOR and node.text.strip() == f"^{child.value}"


def _list_items(list_node: Node, pending: list[_Pending]) -> None:
    for item in list_node.children:
        if item.kind is not NodeKind.LIST_ITEM:
            continue
        anchor, aliases = _split_explicit(_item_anchor_nodes(item))
        pending.append(_Pending(BlockKind.LIST_ITEM, item, anchor, aliases))
        for child in item.children:
            if child.kind is NodeKind.LIST:
                _list_items(child, pending)


def _collect(root: Node, headers: dict[int, Anchor]) -> list[_Pending]:
    pending: list[_Pending] = []
    prev: Node | None = None
    for node in root.children:
        if (
            _is_standalone_anchor(node)
            and prev is not None
            and prev.kind in (NodeKind.LIST, NodeKind.TABLE)
            and pending
            and pending[-1].node is prev
        ):
            # "^label" on its own line right after a list/table names it
            group = pending[-1]
            label = block_anchor(node.children[0])
            if group.anchor is None:
                group.anchor = label
            else:
                group.aliases += (label.value,)
            prev = node
            continue

        if node.kind is NodeKind.LIST:
            _list_items(node, pending)
            pending.append(_Pending(BlockKind.LIST, node))
        elif node.kind is NodeKind.HEADING:
            aliases = tuple(n.value or "" for n in _own_anchor_nodes(node))
            pending.append(_Pending(BlockKind.HEADING, node, headers.get(node.start), aliases))
        elif node.kind in _SIMPLE_KINDS:
            anchor, aliases = _split_explicit(_own_anchor_nodes(node))
            pending.append(_Pending(_SIMPLE_KINDS[node.kind], node, anchor, aliases))
        prev = node
    return pending


def extract_blocks(note: Note, ctx: LinkContext, root: Node | None = None) -> list[Block]:
    """
    Return the blocks of ``note`` in document order.

    A top-level list contributes one block per item (nested items included,
    depth first) followed by one block for the whole list. Offsets in
    ``#anchor,N`` references count through exactly this sequence.

    Args:
        note: Note whose body is split
        ctx: Context supplying the parser
        root: Already parsed tree of ``note.body``, if the caller has one

    Returns:
        Blocks, each with an explicit, header or generated anchor
    """
    if root is None:
        root = ctx.parser.parse(note.body)
    anchors = find_anchors(note.body, ctx, root=root)
    headers = {a.range.start: a for a in anchors if a.type is AnchorType.HEADER}
    pending = _collect(root, headers)

    # Generated names must not collide with anything written in the note
    slugger = Slugger({a.value for a in anchors})
    item_no = 0
    blocks = []
    for p in pending:
        anchor = p.anchor
        if anchor is None:
            if p.kind is BlockKind.LIST_ITEM:
                item_no += 1
                while slugger.taken(f"item{item_no}"):
                    item_no += 1
                value = slugger.unique(f"item{item_no}")
            else:
                value = slugger.unique(_GENERATED_NAMES[p.kind])
            anchor = Anchor(
                type=AnchorType.BLOCK_ANCHOR,
                value=value,
                range=Range(p.node.start, p.node.end),
                generated=True,
            )
        blocks.append(
            Block(
                kind=p.kind,
                node=p.node,
                anchor=anchor,
                range=Range(p.node.start, p.node.end),
                aliases=p.aliases,
            )
        )
    return blocks
