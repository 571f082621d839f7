"""Tests for note reference expansion."""

from notelink.core.anchors import walk
from notelink.core.expander import expand_refs, expand_to_markdown
from notelink.core.model import DisambiguationPolicy, MarkerReason, NodeKind


def _markers(tree):
    return [n.data["reason"] for n in walk(tree) if n.kind is NodeKind.MARKER]


def test_expand_whole_note(make_note, make_ctx):
    """Test a reference is replaced by the target body."""
    foo = make_note("foo", "Hello\n\n![[bar]]\n")
    bar = make_note("bar", "Bar content\n")
    ctx = make_ctx(foo, bar)
    assert expand_to_markdown(foo, ctx) == "Hello\n\nBar content\n"


def test_expand_anchor_and_range(make_note, make_ctx):
    """Test anchors and offsets bound the inserted content."""
    bar = make_note("bar", "# A\n\na text\n\n# B\n\nb text\n\n# C\n\nc text\n")
    foo = make_note("foo", "![[bar#b]]\n\n![[bar#a,1]]\n")
    ctx = make_ctx(foo, bar)
    assert expand_to_markdown(foo, ctx) == (
        "# B\n\nb text\n\n# C\n\nc text\n\n# A\n\na text\n"
    )


def test_text_outside_refs_untouched(make_note, make_ctx):
    """Test a note without refs renders byte for byte."""
    body = "Some  *text*   \n\n\n- item\n  - nested [[link]]\n\n| a | b |\n|---|---|\n| 1 | 2 |\n"
    foo = make_note("foo", body)
    assert expand_to_markdown(foo, make_ctx(foo)) == body


def test_nested_refs(make_note, make_ctx):
    """Test references inside the inserted content are expanded too."""
    foo = make_note("foo", "![[bar]]")
    bar = make_note("bar", "bar says\n\n![[baz]]")
    baz = make_note("baz", "baz text")
    ctx = make_ctx(foo, bar, baz)
    assert expand_to_markdown(foo, ctx) == "bar says\n\nbaz text"


def test_circular_ref(make_note, make_ctx):
    """Test a reference back to a note being expanded becomes a marker."""
    foo = make_note("foo", "![[bar]]")
    bar = make_note("bar", "x ![[foo]]")
    ctx = make_ctx(foo, bar)

    tree = expand_refs(foo, ctx)
    assert _markers(tree) == [MarkerReason.CIRCULAR]
    assert expand_to_markdown(foo, ctx) == "x > **notelink:** circular reference to `foo`"


def test_self_ref(make_note, make_ctx):
    """Test a note referencing itself."""
    foo = make_note("foo", "before\n\n![[foo]]")
    ctx = make_ctx(foo)
    assert _markers(expand_refs(foo, ctx)) == [MarkerReason.CIRCULAR]


def test_depth_limit(make_note, make_ctx):
    """Test expansion stops at max_depth."""
    notes = [
        make_note("a", "a\n\n![[b]]"),
        make_note("b", "b\n\n![[c]]"),
        make_note("c", "c\n\n![[d]]"),
        make_note("d", "d"),
    ]
    ctx = make_ctx(*notes, max_depth=2)
    out = expand_to_markdown(notes[0], ctx)
    assert out == "a\n\nb\n\nc\n\n> **notelink:** too many nested note references at `d`"
    assert _markers(expand_refs(notes[0], ctx)) == [MarkerReason.TOO_DEEP]


def test_not_found_and_missing_anchor(make_note, make_ctx):
    """Test bad references become markers and the rest still expands."""
    foo = make_note("foo", "![[missing]]\n\n![[bar#nope]]\n\n![[bar]]")
    bar = make_note("bar", "# Intro\n\ntext")
    ctx = make_ctx(foo, bar)

    assert _markers(expand_refs(foo, ctx)) == [
        MarkerReason.NOT_FOUND,
        MarkerReason.MISSING_ANCHOR,
    ]
    assert expand_to_markdown(foo, ctx) == (
        "> **notelink:** no note found for `missing`\n\n"
        "> **notelink:** anchor `nope` not found in `bar`\n\n"
        "# Intro\n\ntext"
    )


def test_ambiguous_under_error_policy(make_note, make_ctx):
    """Test an ambiguous reference is a marker when guessing is not allowed."""
    foo = make_note("foo", "![[bar]]", vault="vault1")
    notes = [foo, make_note("bar", "one", vault="vault2"), make_note("bar", "two", vault="vault3")]
    ctx = make_ctx(*notes, vaults=("vault1", "vault2", "vault3"), policy=DisambiguationPolicy.ERROR)
    out = expand_to_markdown(foo, ctx)
    assert out == "> **notelink:** `bar` is ambiguous, found in vaults: vault2, vault3"


def test_same_vault_preferred(make_note, make_ctx):
    """Test the default policy picks the referring note's vault."""
    foo = make_note("foo", "![[bar]]", vault="vault2")
    ctx = make_ctx(foo, make_note("bar", "one", vault="vault1"), make_note("bar", "two", vault="vault2"))
    assert expand_to_markdown(foo, ctx) == "two"


def test_xvault_ref(make_note, make_ctx):
    """Test an explicit vault prefix."""
    foo = make_note("foo", "![[dendron://vault2/bar]]")
    ctx = make_ctx(foo, make_note("bar", "one", vault="vault1"), make_note("bar", "two", vault="vault2"))
    assert expand_to_markdown(foo, ctx) == "two"


def test_legacy_ref_expanded(make_note, make_ctx):
    """Test legacy references are normalized, then expanded."""
    foo = make_note("foo", "((ref: [[bar]]#foo bar))")
    bar = make_note("bar", "intro\n\n# Foo Bar\n\ncontent")
    ctx = make_ctx(foo, bar)
    assert expand_to_markdown(foo, ctx) == "# Foo Bar\n\ncontent"


def test_ref_in_code_not_expanded(make_note, make_ctx):
    """Test references in code stay as written."""
    foo = make_note("foo", "`![[bar]]`\n\n```\n![[bar]]\n```")
    ctx = make_ctx(foo, make_note("bar", "bar text"))
    assert expand_to_markdown(foo, ctx) == foo.body


def test_expansion_keeps_input_tree(make_note, make_ctx, parser):
    """Test the tree passed in is not modified."""
    foo = make_note("foo", "![[bar]]")
    ctx = make_ctx(foo, make_note("bar", "bar text"))
    root = parser.parse(foo.body)
    expanded = expand_refs(foo, ctx, root=root)
    assert expanded is not root
    assert root.children[0].children[0].kind is NodeKind.NOTE_REF
    ref = expanded.children[0].children[0]
    assert ref.kind is NodeKind.REF_EXPANSION
    assert ref.data["note"].fname == "bar"


def test_nested_item_ref(make_note, make_ctx):
    """Test a deeply nested list item is inserted as a list item, not code."""
    bar = make_note("bar", "- a\n  - b\n    - c ![[baz]] ^c")
    foo = make_note("foo", "![[bar#^c]]")
    ctx = make_ctx(foo, bar, make_note("baz", "baz text"))

    tree = expand_refs(foo, ctx)
    assert not any(n.kind is NodeKind.CODE for n in walk(tree))
    assert expand_to_markdown(foo, ctx) == "- c baz text ^c"
