"""notelink - wikilinks, anchors and note references for markdown vaults."""

__version__ = "0.3.0"
