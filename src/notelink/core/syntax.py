"""Link grammar: parsing and serializing wikilinks and note references.

    wikilink        [[display text|vault/fname#anchor]]
    cross-vault     [[dendron://vault/fname]]
    note reference  ![[fname#anchorStart,offset:#anchorEnd]]
    legacy ref      ((ref: [[fname]]#anchorStart,offset:#anchorEnd))
    block anchor    a trailing ^token on a line
"""

import re
from dataclasses import dataclass

from .model import LinkType, ReferenceTarget
from .utils import slugify

XVAULT_PREFIX = "dendron://"

LEGACY_REF_RE = re.compile(
    r"\(\(\s*ref:\s*\[\[(?P<target>[^\]\n]*)\]\](?P<anchors>[^()\n]*)\)\)"
)
ANCHOR_RANGE_RE = re.compile(
    r"^(?P<start>[^,:]*)(?:,(?P<offset>\d+))?(?::#?(?P<end>.*))?$"
)
BLOCK_ANCHOR_RE = re.compile(r"\^(?P<token>[A-Za-z0-9-]+)[ \t]*\r?$", re.MULTILINE)


@dataclass(frozen=True)
class ParsedLink:
    type: LinkType
    fname: str
    vault_name: str | None = None
    vault_syntax: str | None = None
    alias: str | None = None
    anchor: str | None = None
    ref: ReferenceTarget | None = None
    legacy: bool = False


def _split_vault(target: str) -> tuple[str | None, str | None, str]:
    """Return (vault_name, vault_syntax, fname)."""
    if target.startswith(XVAULT_PREFIX):
        vault, sep, fname = target[len(XVAULT_PREFIX):].partition("/")
        if sep and vault.strip():
            return vault.strip(), "xvault", fname.strip()
        return None, None, target
    vault, sep, fname = target.partition("/")
    if sep and vault.strip() and fname.strip():
        return vault.strip(), "path", fname.strip()
    return None, None, target


def _split_target(inner: str) -> tuple[str | None, str | None, str | None, str, str | None]:
    """Split ``alias|target#anchor`` into its parts."""
    alias = None
    if "|" in inner:
        alias, inner = inner.split("|", 1)
        alias = alias.strip()
    target, sep, anchor = inner.partition("#")
    vault_name, vault_syntax, fname = _split_vault(target.strip())
    anchor = anchor.strip() if sep else None
    return alias, vault_name, vault_syntax, fname.strip(), anchor or None


def parse_anchor_range(text: str | None) -> ReferenceTarget:
    """
    Parse ``anchorStart,offset:#anchorEnd`` (the part after the first ``#``).

    Text that does not fit the grammar is kept whole as the start anchor.
    """
    if not text:
        return ReferenceTarget()
    m = ANCHOR_RANGE_RE.match(text.strip())
    if m is None:
        return ReferenceTarget(anchor_start=text.strip())
    start = m.group("start").strip() or None
    offset = int(m.group("offset")) if m.group("offset") is not None else None
    end = m.group("end")
    end = end.strip() or None if end is not None else None
    return ReferenceTarget(anchor_start=start, offset=offset, anchor_end=end)


def parse_wikilink(inner: str) -> ParsedLink | None:
    """
    Parse the text between ``[[`` and ``]]``.

    Returns None for an empty target (``[[]]``, ``[[alias|]]``).
    """
    alias, vault_name, vault_syntax, fname, anchor = _split_target(inner)
    if not fname and not anchor:
        return None
    return ParsedLink(
        type=LinkType.WIKI,
        fname=fname,
        vault_name=vault_name,
        vault_syntax=vault_syntax,
        alias=alias,
        anchor=anchor,
    )


def parse_note_ref(inner: str) -> ParsedLink | None:
    """Parse the text between ``![[`` and ``]]``."""
    alias, vault_name, vault_syntax, fname, anchor = _split_target(inner)
    if not fname and not anchor:
        return None
    ref = parse_anchor_range(anchor)
    return ParsedLink(
        type=LinkType.REF,
        fname=fname,
        vault_name=vault_name,
        vault_syntax=vault_syntax,
        alias=alias,
        anchor=ref.anchor_start,
        ref=ref,
    )


def parse_legacy_ref(match: re.Match[str]) -> ParsedLink | None:
    """Parse a ``LEGACY_REF_RE`` match."""
    target = parse_wikilink(match.group("target"))
    if target is None or not target.fname:
        return None
    ref = parse_anchor_range(match.group("anchors").strip().lstrip("#"))
    return ParsedLink(
        type=LinkType.REF,
        fname=target.fname,
        vault_name=target.vault_name,
        vault_syntax=target.vault_syntax,
        alias=target.alias,
        anchor=ref.anchor_start,
        ref=ref,
        legacy=True,
    )


def format_target(
    fname: str,
    vault_name: str | None = None,
    vault_syntax: str | None = None,
    anchor: str | None = None,
) -> str:
    out = fname
    if vault_name:
        if vault_syntax == "path":
            out = f"{vault_name}/{fname}"
        else:
            out = f"{XVAULT_PREFIX}{vault_name}/{fname}"
    if anchor:
        out += f"#{anchor}"
    return out


def format_anchor_range(ref: ReferenceTarget | None) -> str:
    """Inverse of ``parse_anchor_range``, including the leading ``#``."""
    if ref is None or ref.anchor_start is None:
        return ""
    out = f"#{ref.anchor_start}"
    if ref.offset is not None:
        out += f",{ref.offset}"
    if ref.anchor_end is not None:
        out += f":#{ref.anchor_end}"
    return out


def format_wikilink(
    fname: str,
    vault_name: str | None = None,
    vault_syntax: str | None = None,
    anchor: str | None = None,
    alias: str | None = None,
) -> str:
    target = format_target(fname, vault_name, vault_syntax, anchor)
    if alias is not None:
        return f"[[{alias}|{target}]]"
    return f"[[{target}]]"


def format_note_ref(
    fname: str,
    ref: ReferenceTarget | None = None,
    vault_name: str | None = None,
    vault_syntax: str | None = None,
    alias: str | None = None,
    legacy: bool = False,
) -> str:
    target = format_target(fname, vault_name, vault_syntax)
    if legacy:
        inner = f"{alias}|{target}" if alias is not None else target
        return f"((ref: [[{inner}]]{format_anchor_range(ref)}))"
    if alias is not None:
        target = f"{alias}|{target}"
    return f"![[{target}{format_anchor_range(ref)}]]"


def normalize_anchor(anchor: str | None) -> str | None:
    """Slugify a header anchor; block anchors and the ``*`` wildcard pass through."""
    if anchor is None or anchor == "*" or anchor.startswith("^"):
        return anchor
    return slugify(anchor) or anchor
