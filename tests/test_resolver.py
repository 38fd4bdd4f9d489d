"""Tests for the link resolver."""

import pytest

from mdlinks.extractor import DocumentContext, ReferenceDefinition
from mdlinks.extractor.resolver import get_resolver, register_resolver, resolve
from mdlinks.models import LinkKind
from mdlinks.parser import Node, NodeKind, Position


@pytest.fixture
def context():
    ctx = DocumentContext(file_identifier="doc.md")
    ctx.reference_definitions["ref"] = ReferenceDefinition(url="https://ref.example", title="Ref")
    ctx.footnote_labels.add("1")
    ctx.enter_heading(1, "Intro")
    return ctx


def text(value: str) -> Node:
    return Node(NodeKind.TEXT, text=value)


class TestResolveLink:
    """Tests for inline and reference links."""

    def test_inline(self, context):
        node = Node(
            NodeKind.LINK,
            children=(text("site"),),
            destination="https://site.example",
            title="Site",
            position=Position(line=3, column=5),
        )
        [record] = resolve(node, context)
        assert record.kind is LinkKind.INLINE
        assert record.url == "https://site.example"
        assert record.title == "Site"
        assert record.text == "site"
        assert record.label is None
        assert record.resolved is True
        assert record.context_path == ("Intro",)
        assert (record.source.file_identifier, record.source.line, record.source.column) == ("doc.md", 3, 5)

    def test_empty_destination(self, context):
        node = Node(NodeKind.LINK, children=(text("empty"),), destination="")
        [record] = resolve(node, context)
        assert record.url == ""
        assert record.resolved is True

    def test_missing_destination(self, context):
        node = Node(NodeKind.LINK, children=(text("broken"),))
        [record] = resolve(node, context)
        assert record.kind is LinkKind.INLINE
        assert record.resolved is False
        assert record.url == ""

    def test_reference_resolved(self, context):
        node = Node(NodeKind.LINK, children=(text("foo"),), label="REF", reference=True)
        [record] = resolve(node, context)
        assert record.kind is LinkKind.REFERENCE
        assert record.url == "https://ref.example"
        assert record.title == "Ref"
        assert record.label == "REF"
        assert record.resolved is True

    def test_reference_unresolved(self, context):
        node = Node(NodeKind.LINK, children=(text("foo"),), label="missing", reference=True)
        [record] = resolve(node, context)
        assert record.kind is LinkKind.REFERENCE
        assert record.resolved is False
        assert record.url == ""
        assert record.title is None
        assert record.label == "missing"

    def test_reference_label_defaults_to_text(self, context):
        node = Node(NodeKind.LINK, children=(text("ref"),), reference=True)
        [record] = resolve(node, context)
        assert record.label == "ref"
        assert record.resolved is True


class TestResolveOtherKinds:
    """Tests for images, autolinks and footnote references."""

    def test_image(self, context):
        node = Node(NodeKind.IMAGE, children=(text("alt text"),), destination="img.png")
        [record] = resolve(node, context)
        assert record.kind is LinkKind.IMAGE
        assert record.url == "img.png"
        assert record.text == "alt text"

    def test_reference_image(self, context):
        node = Node(NodeKind.IMAGE, children=(text("logo"),), label="ref", reference=True)
        [record] = resolve(node, context)
        assert record.kind is LinkKind.IMAGE
        assert record.url == "https://ref.example"
        assert record.label == "ref"

    def test_autolink(self, context):
        node = Node(
            NodeKind.AUTOLINK,
            children=(text("https://auto.example"),),
            destination="https://auto.example",
        )
        [record] = resolve(node, context)
        assert record.kind is LinkKind.AUTOLINK
        assert record.url == record.text == "https://auto.example"
        assert record.title is None

    def test_footnote_resolved(self, context):
        [record] = resolve(Node(NodeKind.FOOTNOTE_REFERENCE, label="1"), context)
        assert record.kind is LinkKind.FOOTNOTE_REFERENCE
        assert record.url == "#fn-1"
        assert record.text == "^1"
        assert record.resolved is True

    def test_footnote_unresolved(self, context):
        [record] = resolve(Node(NodeKind.FOOTNOTE_REFERENCE, label="2"), context)
        assert record.resolved is False
        assert record.url == ""
        assert record.label == "2"

    @pytest.mark.parametrize("kind", [NodeKind.TEXT, NodeKind.HEADING, NodeKind.CODE, NodeKind.OTHER])
    def test_non_link_kinds_ignored(self, context, kind):
        assert resolve(Node(kind, text="https://not.a.link"), context) == []


class TestRegistry:
    """Tests for the resolver registry."""

    def test_register_resolver(self, context):
        original = get_resolver(NodeKind.CODE)
        calls = []

        def custom(node, ctx):
            calls.append(node)
            return []

        register_resolver(NodeKind.CODE, custom)
        try:
            node = Node(NodeKind.CODE, text="x")
            assert resolve(node, context) == []
            assert calls == [node]
        finally:
            register_resolver(NodeKind.CODE, original)

    def test_default_resolvers(self):
        assert get_resolver(NodeKind.LINK).__name__ == "resolve_link"
        assert get_resolver(NodeKind.FOOTNOTE_REFERENCE).__name__ == "resolve_footnote"
