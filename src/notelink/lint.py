from dataclasses import dataclass, replace
from typing import Protocol
from .core.anchors import find_anchors
from .core.blocks import extract_blocks
from .core.context import LinkContext
from .core.errors import AmbiguousLinkError, AnchorNotFoundError
from .core.links import find_links
from .core.model import AnchorType, Link, LinkType, Note, Range
from .core.resolver import resolve, resolve_one
from .core.slicer import find_block, slice_by_reference
from .core.utils import char_offset_to_line, line_starts


@dataclass
class Finding:
    rule: str
    severity: str  # "info" | "warn" | "error"
    message: str
    range: Range | None = None
    line: int | None = None  # 1-based


class LintRule(Protocol):
    id: str

    def check(self, note: Note, links: list[Link], ctx: LinkContext) -> list[Finding]:
        pass


def _target(link: Link, ctx: LinkContext) -> Note | None:
    try:
        return resolve_one(link.to, ctx.index, link.from_, ctx.options.policy, ctx.chooser)
    except AmbiguousLinkError:
        return None


class DeadLinksRule:
    id = "dead-links"

    def check(self, note: Note, links: list[Link], ctx: LinkContext) -> list[Finding]:
        out: list[Finding] = []
        for link in links:
            if not resolve(link.to, ctx.index, link.from_):
                name = link.to.fname or note.fname
                out.append(Finding(self.id, "error", f"No note named {name}", link.position))
        return out


class AmbiguousLinksRule:
    id = "ambiguous-links"

    def check(self, note: Note, links: list[Link], ctx: LinkContext) -> list[Finding]:
        out: list[Finding] = []
        for link in links:
            if link.to.vault_name is not None or not link.to.fname:
                continue
            candidates = resolve(link.to, ctx.index, link.from_)
            if len(candidates) > 1:
                vaults = ", ".join(n.vault_name for n in candidates)
                out.append(
                    Finding(
                        self.id,
                        "warn",
                        f"{link.to.fname} exists in several vaults: {vaults}",
                        link.position,
                    )
                )
        return out


class MissingAnchorRule:
    id = "missing-anchor"

    def check(self, note: Note, links: list[Link], ctx: LinkContext) -> list[Finding]:
        out: list[Finding] = []
        for link in links:
            if link.to.anchor is None:
                continue
            target = _target(link, ctx)
            if target is None:
                continue
            blocks = extract_blocks(target, ctx)
            missing = None
            if link.type is LinkType.REF and link.ref is not None:
                try:
                    slice_by_reference(target, blocks, link.ref)
                except AnchorNotFoundError as exc:
                    missing = exc.anchor
            elif link.to.anchor != "*" and find_block(blocks, link.to.anchor) is None:
                missing = link.to.anchor
            if missing is not None:
                out.append(
                    Finding(
                        self.id,
                        "warn",
                        f"No anchor {missing} in {target.fname}",
                        link.position,
                    )
                )
        return out


class DuplicateAnchorsRule:
    id = "duplicate-anchors"

    def check(self, note: Note, links: list[Link], ctx: LinkContext) -> list[Finding]:
        # Only the first ^label can be reached by a reference
        out: list[Finding] = []
        seen: set[str] = set()
        for anchor in find_anchors(note.body, ctx):
            if anchor.type is not AnchorType.BLOCK_ANCHOR:
                continue
            if anchor.value in seen:
                out.append(
                    Finding(
                        self.id,
                        "warn",
                        f"Block anchor ^{anchor.value} is defined more than once",
                        anchor.range,
                    )
                )
            seen.add(anchor.value)
        return out


DEFAULT_RULES: tuple[LintRule, ...] = (
    DeadLinksRule(),
    AmbiguousLinksRule(),
    MissingAnchorRule(),
    DuplicateAnchorsRule(),
)


def lint_note(
    note: Note, ctx: LinkContext, rules: tuple[LintRule, ...] = DEFAULT_RULES
) -> list[Finding]:
    """Run lint rules over the links of one note, findings ordered by position."""
    links = find_links(note, ctx)
    findings = [f for rule in rules for f in rule.check(note, links, ctx)]
    starts = line_starts(note.body)
    findings = [
        replace(f, line=char_offset_to_line(note.body, f.range.start, starts))
        if f.range is not None
        else f
        for f in findings
    ]
    findings.sort(key=lambda f: (f.range.start if f.range else -1, f.rule))
    return findings
