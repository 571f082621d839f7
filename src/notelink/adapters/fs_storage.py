from pathlib import Path
from typing import Iterable
from ..core.ports import StorageStrategy


class FsStorage(StorageStrategy):
    """Flat vault directory; the file stem is the note's fname (``foo.bar.md``)."""

    def __init__(self, root: Path):
        self.root = root

    def _path(self, fname: str) -> Path:
        return self.root / f"{fname}.md"

    def read_raw(self, fname: str) -> str | None:
        p = self._path(fname)
        return p.read_text(encoding="utf-8") if p.exists() else None

    def write_raw(self, fname: str, contents: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self._path(fname).write_text(contents, encoding="utf-8")

    def list_fnames(self) -> Iterable[str]:
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.md"))
