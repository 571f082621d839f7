"""Runtime wiring helper for applications embedding notelink."""

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from .adapters.fs_storage import FsStorage
from .adapters.markdown_parser import MarkdownParser
from .adapters.resolver_index import InMemoryIndex
from .adapters.yaml_codec import MarkdownNoteCodec, YamlFrontmatter
from .config import NotelinkConfig, load_config
from .core.context import Chooser, LinkContext, RefOptions
from .core.model import Location
from .core.rewriter import LinkChange, rename_links
from .core.vault import Vault

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Container for all wired components."""
    config: NotelinkConfig
    vaults: dict[str, Vault]
    index: InMemoryIndex
    ctx: LinkContext

    def rename(self, old: Location, new: Location, save: bool = False) -> list[LinkChange]:
        """
        Rewrite links to ``old`` so they point at ``new``.

        The rewritten bodies replace the notes in the index; with ``save``
        they are also written back to their vaults. Moving the note's own
        file is left to the caller.
        """
        changes = rename_links(old, new, self.ctx)
        for change in changes:
            note = replace(change.note, body=change.body)
            self.index.add(note)
            if save:
                self.vaults[note.vault_name].put(note)
        return changes


def build_runtime(
    workspace_path: Path | None = None,
    config_path: Path | None = None,
    chooser: Chooser | None = None,
) -> Runtime:
    """Load every configured vault into an index and build the link context."""
    config = load_config(config_path=config_path, workspace_path=workspace_path)

    codec = MarkdownNoteCodec(YamlFrontmatter())
    vaults = {
        vc.name: Vault(vc.name, FsStorage(vc.path), codec) for vc in config.vaults
    }

    index = InMemoryIndex(vault_order=vaults.keys())
    for vault in vaults.values():
        for note in vault.notes():
            index.add(note)
    logger.debug("loaded %d notes from %d vaults", len(index.notes()), len(vaults))

    options = RefOptions(
        max_depth=config.refs.max_depth,
        normalize_legacy=config.refs.normalize_legacy,
        policy=config.links.disambiguation,
    )
    ctx = LinkContext(index=index, parser=MarkdownParser(), options=options, chooser=chooser)
    return Runtime(config=config, vaults=vaults, index=index, ctx=ctx)
