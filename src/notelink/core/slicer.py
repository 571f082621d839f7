"""Slicing engine: turn a reference target into a range of the target note."""

from .errors import AnchorNotFoundError
from .model import AnchorType, Block, Note, ReferenceTarget
from .utils import slugify


def _trim_end(text: str, start: int, end: int) -> int:
    while end > start and text[end - 1] in " \t\r\n":
        end -= 1
    return end


def find_block(blocks: list[Block], anchor: str) -> int | None:
    """
    Index of the block an anchor points at.

    - ``^label``: block anchor (explicit, generated, or attached as alias)
    - anything else: header slug, compared after slugifying; falls back to
      block anchors so ``#item1`` works as well as ``#^item1``
    """
    if anchor.startswith("^"):
        label = anchor[1:]
        for i, block in enumerate(blocks):
            if block.anchor.type is AnchorType.BLOCK_ANCHOR and block.anchor.value == label:
                return i
        for i, block in enumerate(blocks):
            if label in block.aliases:
                return i
        return None

    slug = slugify(anchor)
    for i, block in enumerate(blocks):
        if block.anchor.type is AnchorType.HEADER and block.anchor.value in (anchor, slug):
            return i
    for i, block in enumerate(blocks):
        if block.anchor.type is AnchorType.BLOCK_ANCHOR and block.anchor.value == anchor:
            return i
    return None


def slice_by_reference(
    note: Note, blocks: list[Block], ref: ReferenceTarget | None
) -> tuple[int, int]:
    """
    Get the range of ``note.body`` selected by a reference target.

    - No anchor or ``*``: entire body
    - ``start``: from the start block to the end of the note
    - ``start,N``: the start block and the N blocks after it
    - ``start:#end``: the start block through the end block (``*`` = end
      of note); with an offset too, whichever bound is later wins

    Returns (start, end) character offsets, trailing whitespace excluded.

    Raises:
        AnchorNotFoundError: if the start or end anchor does not exist
    """
    text = note.body
    if ref is None or ref.is_whole_note:
        return (0, _trim_end(text, 0, len(text)))

    first = find_block(blocks, ref.anchor_start)
    if first is None:
        raise AnchorNotFoundError(note.fname, ref.anchor_start)
    start = blocks[first].range.start

    if ref.offset is None and ref.anchor_end is None:
        return (start, _trim_end(text, start, len(text)))

    last = first
    if ref.anchor_end is not None:
        if ref.anchor_end == "*":
            return (start, _trim_end(text, start, len(text)))
        end_idx = find_block(blocks, ref.anchor_end)
        if end_idx is None:
            raise AnchorNotFoundError(note.fname, ref.anchor_end)
        last = max(last, end_idx)
    if ref.offset is not None:
        last = max(last, min(first + ref.offset, len(blocks) - 1))

    end = max(b.range.end for b in blocks[first : last + 1])
    return (start, _trim_end(text, start, end))
