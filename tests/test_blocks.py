"""Tests for block extraction."""

from notelink.core.blocks import extract_blocks
from notelink.core.model import AnchorType, BlockKind


def _blocks(make_note, make_ctx, lines):
    note = make_note("foo", "\n".join(lines))
    return extract_blocks(note, make_ctx(note))


def test_paragraphs(make_note, make_ctx):
    """Test each paragraph is one block."""
    blocks = _blocks(make_note, make_ctx, [
        "Et et quam culpa.",
        "",
        "Cumque molestiae qui deleniti.",
        "Eius odit commodi harum.",
        "",
        "Sequi ut non delectus tempore.",
    ])
    assert len(blocks) == 3
    assert [b.anchor.value for b in blocks] == ["paragraph", "paragraph-1", "paragraph-2"]
    assert all(b.anchor.generated for b in blocks)


def test_list(make_note, make_ctx):
    """Test a list gives one block per item plus one for the list."""
    blocks = _blocks(make_note, make_ctx, [
        "Et et quam culpa.",
        "",
        "* Cumque molestiae qui deleniti.",
        "* Eius odit commodi harum.",
        "",
        "Sequi ut non delectus tempore.",
    ])
    assert len(blocks) == 5
    assert [b.kind for b in blocks] == [
        BlockKind.PARAGRAPH,
        BlockKind.LIST_ITEM,
        BlockKind.LIST_ITEM,
        BlockKind.LIST,
        BlockKind.PARAGRAPH,
    ]
    assert [b.anchor.value for b in blocks[1:4]] == ["item1", "item2", "list"]


def test_nested_list(make_note, make_ctx):
    """Test nested items are blocks, nested lists are not."""
    blocks = _blocks(make_note, make_ctx, [
        "Et et quam culpa.",
        "",
        "* Cumque molestiae qui deleniti.",
        "* Eius odit commodi harum.",
        "  * Sequi ut non delectus tempore.",
        "  * In delectus quam sunt unde.",
        "* Quasi ex debitis aut sed.",
        "",
        "Perferendis officiis ut non.",
    ])
    assert len(blocks) == 8
    assert [b.anchor.value for b in blocks] == [
        "paragraph", "item1", "item2", "item3", "item4", "item5", "list", "paragraph-1",
    ]


def test_table(make_note, make_ctx):
    """Test a table is a single block."""
    blocks = _blocks(make_note, make_ctx, [
        "Et et quam culpa.",
        "",
        "| Sapiente | accusamus |",
        "|----------|-----------|",
        "| Laborum  | libero    |",
        "| Ullam    | optio     |",
        "",
        "Sequi ut non delectus tempore.",
    ])
    assert len(blocks) == 3
    assert blocks[1].kind is BlockKind.TABLE


def test_existing_anchors(make_note, make_ctx):
    """Test written anchors name their blocks."""
    blocks = _blocks(make_note, make_ctx, [
        "# Et et quam culpa. ^header",
        "",
        "Ullam vel eius reiciendis. ^paragraph",
        "",
        "* Cumque molestiae qui deleniti. ^item1",
        "* Eius odit commodi harum. ^item2",
        "  * Sequi ut non delectus tempore. ^item3",
        "",
        "^list",
        "",
        "| Sapiente | accusamus |",
        "|----------|-----------|",
        "| Laborum  | libero    |",
        "| Ullam    | optio     | ^table",
    ])
    assert len(blocks) == 7
    assert [b.anchor.value for b in blocks] == [
        "et-et-quam-culpa", "paragraph", "item1", "item2", "item3", "list", "table",
    ]
    assert blocks[0].anchor.type is AnchorType.HEADER
    assert blocks[0].aliases == ("header",)
    assert not any(b.anchor.generated for b in blocks)


def test_header(make_note, make_ctx):
    """Test headings use their slug even with a block anchor."""
    blocks = _blocks(make_note, make_ctx, [
        "# Et et quam culpa. ^anchor",
        "",
        "Cumque molestiae qui deleniti.",
        "",
        "# Eius odit commodi harum.",
        "",
        "Sequi ut non delectus tempore.",
    ])
    assert len(blocks) == 4
    assert blocks[0].anchor.value == "et-et-quam-culpa"
    assert blocks[2].anchor.value == "eius-odit-commodi-harum"


def test_generated_names_avoid_written_ones(make_note, make_ctx):
    """Test a generated name skips an anchor already used in the note."""
    blocks = _blocks(make_note, make_ctx, [
        "First. ^paragraph",
        "",
        "Second.",
        "",
        "- a ^item1",
        "- b",
    ])
    assert [b.anchor.value for b in blocks] == ["paragraph", "paragraph-1", "item1", "item2", "list"]


def test_block_ranges(make_note, make_ctx):
    """Test ranges cover exactly the block text."""
    note = make_note("foo", "Alpha.\n\n```py\ncode\n```\n\n> quoted ^q\n")
    blocks = extract_blocks(note, make_ctx(note))
    assert [b.kind for b in blocks] == [BlockKind.PARAGRAPH, BlockKind.CODE, BlockKind.QUOTE]
    assert [note.body[b.range.start : b.range.end] for b in blocks] == [
        "Alpha.",
        "```py\ncode\n```",
        "> quoted ^q",
    ]
    assert blocks[2].anchor.value == "q"
