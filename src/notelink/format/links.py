"""Note reference normalization."""

from ..adapters.markdown_parser import MarkdownParser
from ..core.ports import ParserStrategy
from ..core.rewriter import normalize_legacy_refs


def normalize_note_refs(text: str, parser: ParserStrategy | None = None) -> str:
    """Convert legacy note references to the modern syntax.

    Args:
        text: Note body text
        parser: Parser used to find the references; a ``MarkdownParser``
            by default

    Returns:
        Text where every ``((ref: [[target]]#anchor))`` outside code has
        become ``![[target#anchor]]``
    """
    return normalize_legacy_refs(text, parser or MarkdownParser())
