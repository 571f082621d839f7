"""Link Rewriter: splice new link text into a note body."""

import logging
from dataclasses import dataclass, replace

from .anchors import walk
from .context import LinkContext
from .errors import AmbiguousLinkError, StaleLinkError
from .links import find_links
from .model import Link, LinkType, Location, NodeKind, Note, ReferenceTarget, note_key
from .ports import ParserStrategy
from .resolver import choose, resolve_one
from .syntax import format_note_ref, format_wikilink, normalize_anchor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkChange:
    """New body of one note after rewriting some of its links."""

    note: Note
    body: str
    links: tuple[tuple[Link, Link], ...]


def render_link(old_link: Link, new_link: Link) -> str:
    """
    Serialize ``new_link``'s target in ``old_link``'s flavor.

    Syntax (wiki, modern ref, legacy ref), presence of display text and the
    vault prefix style all come from the old link; only the target fields
    come from the new one.
    """
    alias = None
    if old_link.alias is not None:
        alias = new_link.alias if new_link.alias is not None else old_link.alias

    to = new_link.to
    vault_name = to.vault_name
    if (
        vault_name is not None
        and old_link.vault_syntax is None
        and vault_name == new_link.from_.vault_name
    ):
        # The referring note's own vault stays implicit
        vault_name = None
    vault_syntax = old_link.vault_syntax or new_link.vault_syntax or "xvault"

    if old_link.type is LinkType.WIKI:
        return format_wikilink(to.fname, vault_name, vault_syntax, to.anchor, alias)

    ref = replace(new_link.ref or ReferenceTarget(), anchor_start=to.anchor)
    return format_note_ref(
        to.fname, ref, vault_name, vault_syntax, alias, legacy=old_link.legacy
    )


def update_link(note: Note, old_link: Link, new_link: Link) -> str:
    """
    Replace one link of ``note`` and return the new body.

    The link is located by its stored span, never by searching for its
    text, so one of several identical links can be rewritten alone.

    Raises:
        StaleLinkError: if the body changed since ``old_link`` was found
    """
    return update_links(note, [(old_link, new_link)])


def update_links(note: Note, pairs: list[tuple[Link, Link]]) -> str:
    """Apply several ``(old_link, new_link)`` rewrites, back to front."""
    body = note.body
    for old_link, new_link in sorted(pairs, key=lambda p: p[0].position.start, reverse=True):
        start, end = old_link.position.start, old_link.position.end
        if body[start:end] != old_link.raw:
            raise StaleLinkError(old_link.raw, start, end)
        body = body[:start] + render_link(old_link, new_link) + body[end:]
    return body


def rename_links(old: Location, new: Location, ctx: LinkContext) -> list[LinkChange]:
    """
    Rewrite every link in the corpus that points at the note at ``old`` so
    it points at ``new`` instead.

    Links are matched by resolving them with the context's disambiguation
    policy; ambiguous links are left alone. Nothing is persisted.

    Raises:
        AmbiguousLinkError: ``old`` names notes in several vaults under
            ``DisambiguationPolicy.ERROR``
    """
    matches = ctx.index.lookup(old.fname, old.vault_name)
    if not matches:
        logger.warning("rename: no note %s to rename", old.fname)
        return []
    old_note = choose(old, matches, None, ctx.options.policy, ctx.chooser)
    if old_note is None:
        return []
    new_vault = new.vault_name or old_note.vault_name

    changes = []
    for note in ctx.index.notes():
        pairs = []
        for link in find_links(note, ctx):
            if not link.to.fname:
                continue
            try:
                target = resolve_one(
                    link.to, ctx.index, link.from_, ctx.options.policy, ctx.chooser
                )
            except AmbiguousLinkError as exc:
                logger.warning("rename: skipping %s in %s: %s", link.raw, note.fname, exc)
                continue
            if target is None or note_key(target) != note_key(old_note):
                continue
            keep_vault = link.to.vault_name is not None or new_vault != link.from_.vault_name
            new_to = replace(
                link.to, fname=new.fname, vault_name=new_vault if keep_vault else None
            )
            pairs.append((link, replace(link, to=new_to)))
        if pairs:
            changes.append(LinkChange(note, update_links(note, pairs), tuple(pairs)))
    logger.debug("rename %s -> %s touched %d notes", old.fname, new.fname, len(changes))
    return changes


def normalize_legacy_refs(text: str, parser: ParserStrategy) -> str:
    """
    Rewrite ``((ref: [[target]]#start,N:#end))`` as ``![[target#start,N:#end]]``.

    Header anchors are slugified on the way (``#foo bar`` -> ``#foo-bar``).
    Modern references are left untouched, so running this twice is the
    same as running it once.
    """
    root = parser.parse(text)
    legacy = [
        n for n in walk(root)
        if n.kind is NodeKind.NOTE_REF and n.data["link"].legacy
    ]
    for node in reversed(legacy):
        parsed = node.data["link"]
        ref = parsed.ref or ReferenceTarget()
        ref = ReferenceTarget(
            anchor_start=normalize_anchor(ref.anchor_start),
            offset=ref.offset,
            anchor_end=normalize_anchor(ref.anchor_end),
        )
        new = format_note_ref(
            parsed.fname, ref, parsed.vault_name, parsed.vault_syntax, parsed.alias
        )
        text = text[: node.start] + new + text[node.end :]
    return text
