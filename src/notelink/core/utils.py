"""Utility functions for notelink."""

import bisect
import re
import unicodedata


def slugify(text: str) -> str:
    """
    Convert text to a URL-safe slug.

    - Lowercase
    - Unicode normalize (NFKD), drop combining marks
    - Remove punctuation except spaces and hyphens
    - Convert whitespace to single `-`
    - Collapse multiple `-` to single, strip leading/trailing `-`

    Every producer and consumer of heading anchors goes through this
    function, so a slug derived here always matches a slug derived elsewhere.

    Examples:
        >>> slugify("Parallel transport")
        'parallel-transport'
        >>> slugify("Et et quam culpa.")
        'et-et-quam-culpa'
    """
    text = text.lower()

    # En dash, em dash and minus sign become regular hyphens
    text = text.replace('–', '-').replace('—', '-').replace('−', '-')

    text = unicodedata.normalize('NFKD', text)
    text = ''.join(c for c in text if not unicodedata.combining(c))

    # Keep alphanumeric, spaces, and hyphens
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'\s+', '-', text)
    text = re.sub(r'-+', '-', text)

    return text.strip('-')


class Slugger:
    """Hand out unique slugs within one note.

    The first occurrence of a slug is returned as is, later ones get a
    numeric suffix: ``foo``, ``foo-1``, ``foo-2``.
    """

    def __init__(self, taken: set[str] | None = None):
        self._seen: dict[str, int] = {}
        self._taken = set(taken or ())

    def slug(self, text: str) -> str:
        return self.unique(slugify(text))

    def unique(self, value: str) -> str:
        candidate = value
        count = self._seen.get(value, 0)
        while candidate in self._taken:
            count += 1
            candidate = f"{value}-{count}"
        self._seen[value] = count
        self._taken.add(candidate)
        return candidate

    def taken(self, value: str) -> bool:
        return value in self._taken


def line_starts(text: str) -> list[int]:
    """Offsets at which each line of ``text`` begins."""
    return [0] + [m.end() for m in re.finditer(r"\n", text)]


def char_offset_to_line(text: str, offset: int, starts: list[int] | None = None) -> int:
    """
    Convert character offset to line number (1-based).

    Args:
        text: The full text
        offset: Character offset (0-based)
        starts: Precomputed ``line_starts(text)``

    Returns:
        Line number (1-based)
    """
    if starts is None:
        starts = line_starts(text)
    return bisect.bisect_right(starts, max(0, min(offset, len(text))))
