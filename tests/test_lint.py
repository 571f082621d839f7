"""Tests for link linting."""

from notelink.core.model import DisambiguationPolicy
from notelink.lint import lint_note


def test_lint_findings(make_note, make_ctx):
    """Test dead, missing-anchor and ambiguous links are reported by line."""
    foo = make_note(
        "foo",
        "[[missing]]\n\n[[bar#nope]]\n\n[[bar#intro]]\n\n[[dup]]\n\n![[bar#intro:#gone]]\n",
    )
    notes = [
        foo,
        make_note("bar", "# Intro\n\ntext"),
        make_note("dup", "one", vault="vault1"),
        make_note("dup", "two", vault="vault2"),
    ]
    findings = lint_note(foo, make_ctx(*notes))

    assert [(f.rule, f.severity, f.line) for f in findings] == [
        ("dead-links", "error", 1),
        ("missing-anchor", "warn", 3),
        ("ambiguous-links", "warn", 7),
        ("missing-anchor", "warn", 9),
    ]
    assert "nope" in findings[1].message
    assert "vault1, vault2" in findings[2].message
    assert "gone" in findings[3].message


def test_lint_clean_note(make_note, make_ctx):
    """Test a note whose links all resolve."""
    foo = make_note("foo", "[[bar]] [[#top]]\n\n# Top\n")
    ctx = make_ctx(foo, make_note("bar", "x"))
    assert lint_note(foo, ctx) == []


def test_lint_ambiguous_under_error_policy(make_note, make_ctx):
    """Test anchors are not checked on a target that cannot be picked."""
    foo = make_note("foo", "[[dup#anything]]")
    notes = [foo, make_note("dup", "one", vault="vault1"), make_note("dup", "two", vault="vault2")]
    ctx = make_ctx(*notes, policy=DisambiguationPolicy.ERROR)
    assert [f.rule for f in lint_note(foo, ctx)] == ["ambiguous-links"]


def test_lint_duplicate_block_anchor(make_note, make_ctx):
    """Test a block anchor defined twice is reported at the second one."""
    foo = make_note("foo", "one ^a\n\ntwo ^a\n\nthree ^b\n")
    findings = lint_note(foo, make_ctx(foo))
    assert [(f.rule, f.severity, f.line) for f in findings] == [("duplicate-anchors", "warn", 3)]
    assert "^a" in findings[0].message
