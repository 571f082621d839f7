"""Title extraction from a leading H1."""

from dataclasses import replace

from ..adapters.markdown_parser import MarkdownParser
from ..core.model import NodeKind, Note
from ..core.ports import ParserStrategy


def h1_to_title(note: Note, parser: ParserStrategy | None = None) -> Note:
    """Move a leading level-1 heading into the note's title.

    Only a heading that is the first block of the body counts. The heading
    line and the blank lines after it are removed from the body. A note
    without one is returned unchanged.
    """
    root = (parser or MarkdownParser()).parse(note.body)
    if not root.children:
        return note
    first = root.children[0]
    if first.kind is not NodeKind.HEADING or first.depth != 1:
        return note

    body = note.body
    end = first.end
    while end < len(body) and body[end] in " \t\r\n":
        end += 1
    return replace(
        note,
        title=(first.value or "").strip(),
        body=body[: first.start] + body[end:],
    )
