import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from ..core.context import LinkContext
from ..core.errors import AmbiguousLinkError
from ..core.links import find_links
from ..core.model import Link, Note, NoteKey, note_key
from ..core.ports import CorpusIndex
from ..core.resolver import resolve_one

logger = logging.getLogger(__name__)


class InMemoryIndex(CorpusIndex):
    """
    Snapshot of every note of every vault, kept in vault order.

    ``lookup`` answers in the order vaults were configured, then in the
    order notes were added. The link graph (``links_out``/``links_in``) is
    only filled by ``rebuild_links``.
    """

    def __init__(self, notes: Iterable[Note] = (), vault_order: Iterable[str] = ()):
        self._vaults: list[str] = list(vault_order)
        self._by_fname: dict[str, list[Note]] = defaultdict(list)
        self._by_key: dict[NoteKey, Note] = {}
        self._links_out: dict[NoteKey, list[Link]] = defaultdict(list)
        self._links_in: dict[NoteKey, list[Link]] = defaultdict(list)
        for note in notes:
            self.add(note)

    def add(self, note: Note) -> None:
        key = note_key(note)
        if note.vault_name not in self._vaults:
            self._vaults.append(note.vault_name)
        old = self._by_key.get(key)
        if old is not None:
            self._by_fname[note.fname].remove(old)
        self._by_key[key] = note
        bucket = self._by_fname[note.fname]
        bucket.append(note)
        bucket.sort(key=lambda n: self._vaults.index(n.vault_name))

    def get(self, fname: str, vault_name: str) -> Note | None:
        return self._by_key.get((vault_name, fname))

    def lookup(self, fname: str, vault_name: str | None = None) -> list[Note]:
        hits = self._by_fname.get(fname, [])
        if vault_name is not None:
            return [n for n in hits if n.vault_name == vault_name]
        return list(hits)

    def notes(self) -> list[Note]:
        out = list(self._by_key.values())
        out.sort(key=lambda n: (self._vaults.index(n.vault_name), n.fname))
        return out

    def vault_names(self) -> list[str]:
        return list(self._vaults)

    def rebuild_links(self, ctx: LinkContext, max_workers: int = 1) -> None:
        """Recompute the link graph; notes are scanned in parallel when ``max_workers > 1``."""
        self._links_out.clear()
        self._links_in.clear()
        notes = self.notes()

        def scan(note: Note) -> tuple[Note, list[Link]]:
            return note, find_links(note, ctx)

        if max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                results = list(pool.map(scan, notes))
        else:
            results = [scan(n) for n in notes]

        for note, links in results:
            self._links_out[note_key(note)] = links
            for link in links:
                try:
                    target = resolve_one(
                        link.to, self, link.from_, ctx.options.policy, ctx.chooser
                    )
                except AmbiguousLinkError:
                    logger.warning("ambiguous link %s in %s", link.raw, note.fname)
                    continue
                if target is not None:
                    self._links_in[note_key(target)].append(link)
        logger.debug("link graph rebuilt over %d notes", len(notes))

    def links_out(self, note: Note) -> list[Link]:
        return self._links_out.get(note_key(note), [])

    def links_in(self, note: Note) -> list[Link]:
        return self._links_in.get(note_key(note), [])
