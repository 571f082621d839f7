"""Tests for the link finder."""

from notelink.core.links import find_links
from notelink.core.model import LinkFilter, LinkType, Location, ReferenceTarget


def test_find_links(make_note, make_ctx):
    """Test wikilinks and refs are found with exact spans."""
    note = make_note("foo", "See [[bar]] and ![[baz#intro]] but not `[[code]]`.\n")
    links = find_links(note, make_ctx(note))

    assert [link.type for link in links] == [LinkType.WIKI, LinkType.REF]
    assert [link.raw for link in links] == ["[[bar]]", "![[baz#intro]]"]
    for link in links:
        assert note.body[link.position.start : link.position.end] == link.raw
        assert link.from_ == Location("foo", "vault1", id="foo")
    assert links[1].to == Location("baz", anchor="intro")
    assert links[1].ref == ReferenceTarget("intro")


def test_xvault_link(make_note, make_ctx):
    """Test a cross-vault link carries the vault name."""
    note = make_note("foo", "[[dendron://vault2/bar]]")
    (link,) = find_links(note, make_ctx(note))
    assert link.to == Location("bar", "vault2")
    assert link.vault_syntax == "xvault"


def test_alias(make_note, make_ctx):
    """Test display text is kept apart from the target."""
    note = make_note("foo", "[[The Bar|bar#sec]]")
    (link,) = find_links(note, make_ctx(note))
    assert link.alias == "The Bar"
    assert link.to == Location("bar", anchor="sec")


def test_legacy_ref(make_note, make_ctx):
    """Test a legacy ref is one REF link."""
    note = make_note("foo", "((ref: [[bar]]#start,1:#end))")
    (link,) = find_links(note, make_ctx(note))
    assert link.type is LinkType.REF
    assert link.legacy is True
    assert link.ref == ReferenceTarget("start", 1, "end")


def test_filter_by_location(make_note, make_ctx):
    """Test the filter matches the link target."""
    note = make_note("foo", "[[bar]] [[baz]] ![[bar#x]] [[dendron://vault2/bar]]")
    ctx = make_ctx(note)

    to_bar = find_links(note, ctx, LinkFilter(loc=Location("bar")))
    assert [link.raw for link in to_bar] == ["[[bar]]", "![[bar#x]]", "[[dendron://vault2/bar]]"]

    in_vault2 = find_links(note, ctx, LinkFilter(loc=Location("bar", "vault2")))
    assert [link.raw for link in in_vault2] == ["[[dendron://vault2/bar]]"]

    refs = find_links(note, ctx, LinkFilter(type=LinkType.REF))
    assert [link.raw for link in refs] == ["![[bar#x]]"]


def test_filter_by_source(make_note, make_ctx):
    """Test the filter matches the linking note."""
    note = make_note("foo", "[[bar]]")
    ctx = make_ctx(note)
    assert find_links(note, ctx, LinkFilter(from_loc=Location("foo"))) != []
    assert find_links(note, ctx, LinkFilter(from_loc=Location("other"))) == []


def test_no_links(make_note, make_ctx):
    """Test a note without links."""
    note = make_note("foo", "plain [text](http://example.com)")
    assert find_links(note, make_ctx(note)) == []
