"""Tests for the link walker."""

from mdlinks.extractor import DocumentContext, LinkWalker, walk
from mdlinks.models import LinkKind
from mdlinks.parser import Node, NodeKind, Position, parse_markdown


def links(markdown: str, file_identifier: str = "doc.md"):
    return list(walk(parse_markdown(markdown), file_identifier))


def text(value: str) -> Node:
    return Node(NodeKind.TEXT, text=value)


def heading(level: int, title: str) -> Node:
    return Node(NodeKind.HEADING, children=(text(title),), level=level)


def link(url: str, label: str = "x", **kwargs) -> Node:
    return Node(NodeKind.LINK, children=(text(label),), destination=url, **kwargs)


def document(*children: Node) -> Node:
    return Node(NodeKind.DOCUMENT, children=children)


class TestHeadingContext:
    """Tests for context_path tracking."""

    def test_nested_sections(self):
        records = links("# A\n\n## B\n\n[x](https://example.com)\n")
        assert len(records) == 1
        assert records[0].context_path == ("A", "B")

    def test_before_any_heading(self):
        records = links("[x](https://example.com)\n\n# A\n")
        assert records[0].context_path == ()

    def test_same_level_replaces(self):
        records = links("# A\n## B\n# C\n[x](u)\n")
        assert records[0].context_path == ("C",)

    def test_shallower_heading_pops(self):
        records = links("# A\n### C\n## B\n[x](u)\n")
        assert records[0].context_path == ("A", "B")

    def test_deeper_first_then_shallower(self):
        records = links("## B\n# A\n[x](u)\n")
        assert records[0].context_path == ("A",)

    def test_link_in_heading_includes_heading(self):
        records = links("# See [docs](https://docs.example)\n")
        assert len(records) == 1
        assert records[0].context_path == ("See docs",)

    def test_context_per_link(self):
        records = links("[a](1)\n# A\n[b](2)\n## B\n[c](3)\n# C\n[d](4)\n")
        assert [r.context_path for r in records] == [(), ("A",), ("A", "B"), ("C",)]

    def test_hand_built_tree(self):
        tree = document(heading(1, "A"), heading(2, "B"), link("u"))
        records = list(walk(tree, "f.md"))
        assert records[0].context_path == ("A", "B")


class TestReferenceResolution:
    """Tests for reference links across the whole document."""

    def test_forward_reference(self):
        records = links("[foo][ref]\n\nSome text.\n\n[ref]: https://late.example\n")
        assert records[0].resolved is True
        assert records[0].url == "https://late.example"

    def test_first_definition_wins(self):
        records = links("[foo][X]\n\n[x]: https://first.example\n[X]: https://second.example\n")
        assert records[0].url == "https://first.example"

    def test_first_definition_wins_hand_built(self):
        tree = document(
            Node(NodeKind.LINK, children=(text("foo"),), label="X", reference=True),
            Node(NodeKind.REFERENCE_DEFINITION, label="x", destination="https://first.example"),
            Node(NodeKind.REFERENCE_DEFINITION, label="X", destination="https://second.example"),
        )
        records = list(walk(tree, "f.md"))
        assert records[0].url == "https://first.example"

    def test_label_matching_normalizes(self):
        records = links("[foo][Some   Label]\n\n[some label]: /target\n")
        assert records[0].resolved is True
        assert records[0].url == "/target"

    def test_context_collects_footnotes(self):
        tree = parse_markdown("x[^1]\n\n[^1]: note\n")
        context = DocumentContext.collect(tree, "f.md")
        assert context.has_footnote("1")
        assert context.reference_definitions == {}


class TestNestedLinks:
    """Tests for links nested inside link content."""

    def test_inner_link_skipped(self):
        inner = link("https://inner.example", "inner")
        outer = Node(
            NodeKind.LINK,
            children=(text("a "), inner),
            destination="https://outer.example",
        )
        records = list(walk(document(outer), "f.md"))
        assert len(records) == 1
        assert records[0].url == "https://outer.example"
        assert records[0].text == "a inner"

    def test_link_wrapping_image(self):
        records = links("[![badge](https://img.example/b.svg)](https://project.example)")
        assert len(records) == 1
        assert records[0].kind is LinkKind.INLINE
        assert records[0].url == "https://project.example"
        assert records[0].text == "badge"


class TestWalkerBehaviour:
    """Tests for ordering, laziness and restartability."""

    def test_document_order(self):
        records = links(
            "Intro <https://auto.example> and ![img](pic.png).\n\n"
            "[inline](https://inline.example) then [ref][r][^n].\n\n"
            "[r]: https://ref.example\n[^n]: Footnote.\n"
        )
        assert [r.kind for r in records] == [
            LinkKind.AUTOLINK,
            LinkKind.IMAGE,
            LinkKind.INLINE,
            LinkKind.REFERENCE,
            LinkKind.FOOTNOTE_REFERENCE,
        ]

    def test_restartable(self):
        walker = walk(parse_markdown("# A\n[a](1) [b][x]\n\n[x]: 2\n"), "f.md")
        assert isinstance(walker, LinkWalker)
        first = list(walker)
        second = list(walker)
        assert first == second
        assert len(first) == 2

    def test_lazy(self):
        walker = iter(walk(document(link("1"), link("2")), "f.md"))
        assert next(walker).url == "1"
        assert next(walker).url == "2"

    def test_tree_unchanged(self):
        tree = parse_markdown("# A\n[a][x]\n\n[x]: 1\n")
        snapshot = repr(tree)
        list(walk(tree, "f.md"))
        assert repr(tree) == snapshot

    def test_file_identifier_and_position(self):
        records = links("# A\n\ntext [a](b)\n", "notes/a.md")
        assert records[0].source.file_identifier == "notes/a.md"
        assert (records[0].source.line, records[0].source.column) == (3, 6)

    def test_hand_built_position(self):
        tree = document(link("u", position=Position(line=4, column=2)))
        record = list(walk(tree, "f.md"))[0]
        assert (record.source.line, record.source.column) == (4, 2)

    def test_no_links(self):
        assert links("") == []
        assert links("# Only text\n\nNothing here.\n") == []


class TestFootnoteLabels:
    """Tests for footnote label matching."""

    def test_footnote_label_is_case_sensitive(self):
        [record] = links("x[^A]\n\n[^a]: note\n")
        assert record.kind is LinkKind.FOOTNOTE_REFERENCE
        assert record.label == "A"
        assert record.resolved is False
        assert record.url == ""

    def test_footnote_label_exact_match(self):
        [record] = links("x[^Note]\n\n[^Note]: note\n")
        assert record.resolved is True
        assert record.url == "#fn-Note"
