from typing import Protocol, Iterable, Any
from .model import Node, Note


class StorageStrategy(Protocol):
    """
    One directory per vault, files named <fname>.md
    """

    def read_raw(self, fname: str) -> str | None:
        pass

    def write_raw(self, fname: str, contents: str) -> None:
        pass

    def list_fnames(self) -> Iterable[str]:
        pass


class ParserStrategy(Protocol):
    """
    Parse Markdown into a Node tree whose offsets are exact positions in the
    raw text. Links, note references, code spans and block anchors appear as
    inline nodes of the blocks that contain them.
    """

    def parse(self, text: str) -> Node:
        pass


class FrontmatterCodec(Protocol):
    """
    Round-trip optional frontmatter without enforcing schema.
    """

    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        pass

    def encode(self, meta: dict[str, Any]) -> str:
        pass


class NoteCodec(Protocol):
    """
    Compose FrontmatterCodec with raw body.
    """

    def decode_file(self, text: str, fname: str, vault_name: str) -> Note:
        pass

    def encode_file(self, note: Note) -> str:
        pass


class CorpusIndex(Protocol):
    """
    Read-only snapshot of every note, in vault order.
    """

    def lookup(self, fname: str, vault_name: str | None = None) -> list[Note]:
        pass

    def notes(self) -> Iterable[Note]:
        pass

    def vault_names(self) -> list[str]:
        pass
