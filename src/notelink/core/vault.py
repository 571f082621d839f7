import logging
from collections.abc import Iterator

from .errors import NoteLoadError
from .model import Note
from .ports import NoteCodec, StorageStrategy

logger = logging.getLogger(__name__)


class Vault:
    """A named set of notes read through a storage strategy and a codec."""

    def __init__(self, name: str, storage: StorageStrategy, codec: NoteCodec):
        self.name = name
        self.storage = storage
        self.codec = codec

    def get(self, fname: str) -> Note | None:
        raw = self.storage.read_raw(fname)
        if raw is None:
            return None
        return self.codec.decode_file(raw, fname, self.name)

    def put(self, note: Note) -> None:
        self.storage.write_raw(note.fname, self.codec.encode_file(note))

    def notes(self) -> Iterator[Note]:
        """Every readable note; undecodable files are logged and skipped."""
        for fname in self.storage.list_fnames():
            try:
                note = self.get(fname)
            except NoteLoadError as exc:
                logger.warning("vault %s: %s", self.name, exc.message)
                continue
            if note is not None:
                yield note
