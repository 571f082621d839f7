"""Shared builders for notes and link contexts."""

import pytest

from notelink.adapters.markdown_parser import MarkdownParser
from notelink.adapters.resolver_index import InMemoryIndex
from notelink.core.context import LinkContext, RefOptions
from notelink.core.model import Note


def _make_note(fname: str, body: str, vault: str = "vault1", **kw) -> Note:
    return Note(
        id=kw.pop("id", fname),
        fname=fname,
        vault_name=vault,
        body=body,
        title=kw.pop("title", fname.split(".")[-1]),
        **kw,
    )


def _make_ctx(*notes: Note, vaults=("vault1", "vault2"), chooser=None, **options) -> LinkContext:
    index = InMemoryIndex(notes, vault_order=vaults)
    return LinkContext(
        index=index,
        parser=MarkdownParser(),
        options=RefOptions(**options),
        chooser=chooser,
    )


@pytest.fixture
def parser():
    return MarkdownParser()


@pytest.fixture
def make_note():
    return _make_note


@pytest.fixture
def make_ctx():
    return _make_ctx
