import logging
import re

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from ..core.model import Node, NodeKind
from ..core.ports import ParserStrategy
from ..core.syntax import (
    BLOCK_ANCHOR_RE,
    LEGACY_REF_RE,
    parse_legacy_ref,
    parse_note_ref,
    parse_wikilink,
)
from ..core.utils import line_starts

logger = logging.getLogger(__name__)

TRAILING_ANCHOR_RE = re.compile(r"\s*\^[A-Za-z0-9-]+\s*$")

_BLOCK_KINDS = {
    "heading": NodeKind.HEADING,
    "paragraph": NodeKind.PARAGRAPH,
    "bullet_list": NodeKind.LIST,
    "ordered_list": NodeKind.LIST,
    "list_item": NodeKind.LIST_ITEM,
    "table": NodeKind.TABLE,
    "fence": NodeKind.CODE,
    "code_block": NodeKind.CODE,
    "blockquote": NodeKind.BLOCKQUOTE,
    "hr": NodeKind.THEMATIC_BREAK,
    "html_block": NodeKind.HTML,
}
_CONTAINERS = {NodeKind.LIST, NodeKind.LIST_ITEM, NodeKind.BLOCKQUOTE}
_INLINE_HOLDERS = {NodeKind.HEADING, NodeKind.PARAGRAPH, NodeKind.TABLE}


def _plain_text(st: SyntaxTreeNode) -> str:
    """Rendered text of an inline subtree, without markup."""
    parts = []
    for child in st.children:
        if child.type in ("text", "code_inline", "html_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        else:
            parts.append(_plain_text(child))
    return "".join(parts)


class _InlineScanner:
    """
    Single left-to-right pass over the raw text of one block.

    Code spans and link brackets are consumed whole when they are entered,
    so nothing inside them is ever seen as a link or a block anchor.
    """

    def __init__(self, text: str):
        self.text = text

    def scan(self, start: int, end: int) -> list[Node]:
        text = self.text
        out: list[Node] = []
        i = start
        while i < end:
            ch = text[i]
            if ch == "\\":
                i += 2
                continue

            if ch == "`":
                run = self._run_length(i, end)
                close = self._code_close(i + run, end, run)
                if close is None:
                    i += run
                    continue
                out.append(Node(NodeKind.CODE_SPAN, i, close + run, source=text))
                i = close + run
                continue

            if ch == "(" and text.startswith("((", i):
                m = LEGACY_REF_RE.match(text, i, end)
                parsed = parse_legacy_ref(m) if m else None
                if m and parsed:
                    out.append(
                        Node(
                            NodeKind.NOTE_REF,
                            i,
                            m.end(),
                            source=text,
                            data={"link": parsed},
                        )
                    )
                    i = m.end()
                    continue

            if ch == "!" and text.startswith("![[", i):
                node = self._bracketed(i, i + 3, end, NodeKind.NOTE_REF)
                if node is not None:
                    out.append(node)
                    i = node.end
                    continue

            if ch == "[" and text.startswith("[[", i):
                node = self._bracketed(i, i + 2, end, NodeKind.WIKI_LINK)
                if node is not None:
                    out.append(node)
                    i = node.end
                    continue

            if ch == "^" and (i == start or text[i - 1] in " \t\n"):
                m = BLOCK_ANCHOR_RE.match(text, i, end)
                if m:
                    token = m.group("token")
                    out.append(
                        Node(
                            NodeKind.BLOCK_ANCHOR,
                            i,
                            i + 1 + len(token),
                            source=text,
                            value=token,
                        )
                    )
                    i = m.end()
                    continue

            i += 1
        return out

    def _run_length(self, i: int, end: int) -> int:
        j = i
        while j < end and self.text[j] == "`":
            j += 1
        return j - i

    def _code_close(self, i: int, end: int, run: int) -> int | None:
        # Closing run must have exactly the same number of backticks
        while i < end:
            if self.text[i] == "`":
                n = self._run_length(i, end)
                if n == run:
                    return i
                i += n
            else:
                i += 1
        return None

    def _bracketed(self, start: int, content_start: int, end: int, kind: NodeKind) -> Node | None:
        text = self.text
        line_end = text.find("\n", content_start, end)
        if line_end == -1:
            line_end = end
        close = text.find("]]", content_start, line_end)
        if close == -1:
            return None
        inner = text[content_start:close]
        if "[[" in inner:
            return None
        if kind is NodeKind.NOTE_REF:
            parsed = parse_note_ref(inner)
        else:
            parsed = parse_wikilink(inner)
        if parsed is None:
            # [[]] and friends are plain text
            return None
        return Node(kind, start, close + 2, source=text, data={"link": parsed})


class MarkdownParser(ParserStrategy):
    """
    markdown-it-py supplies the block structure; its line maps are turned
    into char offsets and the raw text of every inline-holding block is
    tokenized by ``_InlineScanner``.
    """

    def __init__(self, md: MarkdownIt | None = None):
        self.md = md or MarkdownIt("commonmark").enable(["table", "strikethrough"])

    def parse(self, text: str) -> Node:
        tree = SyntaxTreeNode(self.md.parse(text))
        builder = _TreeBuilder(text)
        root = Node(NodeKind.ROOT, 0, len(text), source=text)
        root.children = builder.blocks(tree.children)
        return root


class _TreeBuilder:
    def __init__(self, text: str):
        self.text = text
        self.starts = line_starts(text)
        self.scanner = _InlineScanner(text)

    def _span(self, line_map: list[int]) -> tuple[int, int]:
        first, last = line_map
        start = self.starts[first] if first < len(self.starts) else len(self.text)
        end = self.starts[last] if last < len(self.starts) else len(self.text)
        while end > start and self.text[end - 1] in " \t\r\n":
            end -= 1
        return start, end

    def blocks(self, children: list[SyntaxTreeNode]) -> list[Node]:
        out = []
        for st in children:
            if st.map is None:
                continue
            out.append(self.block(st))
        return out

    def block(self, st: SyntaxTreeNode) -> Node:
        kind = _BLOCK_KINDS.get(st.type, NodeKind.OTHER)
        start, end = self._span(st.map)
        node = Node(kind, start, end, source=self.text)

        if kind in _CONTAINERS:
            node.children = self.blocks(st.children)
        elif kind in _INLINE_HOLDERS:
            node.children = self.scanner.scan(start, end)

        if kind is NodeKind.HEADING:
            node.depth = int(st.tag[1:])
            heading_text = _plain_text(st.children[0]) if st.children else ""
            if any(c.kind is NodeKind.BLOCK_ANCHOR for c in node.children):
                heading_text = TRAILING_ANCHOR_RE.sub("", heading_text)
            node.value = heading_text.strip()
        elif kind is NodeKind.CODE:
            node.value = st.info.strip() if st.type == "fence" else ""
        elif kind is NodeKind.OTHER:
            logger.debug("unhandled block type %s at %d", st.type, start)
        return node
