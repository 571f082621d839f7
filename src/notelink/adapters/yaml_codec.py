import re, io
import yaml
from typing import Any
from ..core.errors import NoteLoadError
from ..core.ports import FrontmatterCodec, NoteCodec
from ..core.model import Note

_FM = re.compile(r"^\s*---\s*\n(.*?)\n---\s*\n?", re.DOTALL)

# Frontmatter keys that map onto Note fields; everything else is custom
RESERVED_KEYS = ("id", "title")


class YamlFrontmatter(FrontmatterCodec):
    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        m = _FM.match(text)
        if not m:
            return {}, text
        fm = yaml.safe_load(io.StringIO(m.group(1))) or {}
        if not isinstance(fm, dict):
            raise yaml.YAMLError("frontmatter is not a mapping")
        body = text[m.end() :]
        return (fm, body)

    def encode(self, meta: dict[str, Any]) -> str:
        if not meta:
            return ""
        buf = io.StringIO()
        yaml.safe_dump(meta, buf, sort_keys=False, allow_unicode=True)
        return f"---\n{buf.getvalue()}---\n"


class MarkdownNoteCodec(NoteCodec):
    def __init__(self, fm: YamlFrontmatter):
        self.fm = fm

    def decode_file(self, text: str, fname: str, vault_name: str) -> Note:
        try:
            meta, body = self.fm.decode(text)
        except yaml.YAMLError as exc:
            raise NoteLoadError(fname, f"invalid frontmatter: {exc}") from exc
        custom = {k: v for k, v in meta.items() if k not in RESERVED_KEYS}
        return Note(
            id=str(meta.get("id") or fname),
            fname=fname,
            vault_name=vault_name,
            body=body,
            # Untitled notes take the last segment of their hierarchy
            title=str(meta.get("title") or fname.split(".")[-1]),
            custom=custom,
        )

    def encode_file(self, note: Note) -> str:
        meta: dict[str, Any] = {"id": note.id, "title": note.title}
        meta.update(note.custom)
        return self.fm.encode(meta) + note.body
