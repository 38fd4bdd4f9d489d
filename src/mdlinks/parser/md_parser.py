"""Markdown parser producing the link walker's node tree.

Parsing is delegated to markdown-it-py (CommonMark) with the footnote and
front matter plugins. markdown-it resolves reference links while parsing
and keeps neither the label nor the source offset, so the link, image,
autolink and footnote rules are wrapped to record both on the tokens they
emit. One extra rule turns full and collapsed references without a
definition into link tokens instead of plain text.
"""

import logging
import re
from typing import Callable, Optional

from markdown_it import MarkdownIt
from markdown_it.helpers import parseLinkLabel
from markdown_it.ruler import Ruler
from markdown_it.rules_inline import StateInline
from markdown_it.token import Token
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.front_matter import front_matter_plugin

from ..utils.text import normalize_label
from .nodes import Node, NodeKind, Position

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n?|\n")

# CommonMark caps link labels at 999 characters
MAX_LABEL_LENGTH = 999

InlineRule = Callable[[StateInline, bool], bool]


def _as_written(url: str) -> str:
    return url


def _accept_any(url: str) -> bool:
    return True


def _first_token(tokens: list[Token], start: int, token_type: str) -> Optional[Token]:
    # Pending text is flushed before the rule's own tokens
    for token in tokens[start:]:
        if token.type == token_type:
            return token
    return None


def _reference_label(state: StateInline, label_start: int, end: int, disable_nested: bool) -> Optional[str]:
    """Return the reference label of the link spanning ``src[label_start:end]``.

    Returns None for inline links. Collapsed and shortcut references use the
    link text as their label.
    """
    label_end = parseLinkLabel(state, label_start, disable_nested)
    if label_end < 0:
        return None
    src = state.src
    after = label_end + 1
    if after < end and src[after] == "(":
        return None
    if after < end and src[after] == "[":
        label = src[after + 1:end - 1]
        if label.strip():
            return label
    return src[label_start + 1:label_end]


def _track_link(image: bool) -> Callable[[InlineRule], InlineRule]:
    token_type = "image" if image else "link_open"

    def wrap(original: InlineRule) -> InlineRule:
        def rule(state: StateInline, silent: bool) -> bool:
            start = state.pos
            first = len(state.tokens)
            if not original(state, silent):
                return False
            if not silent:
                token = _first_token(state.tokens, first, token_type)
                if token is not None:
                    token.meta["offset"] = start
                    label_start = start + 1 if image else start
                    label = _reference_label(state, label_start, state.pos, not image)
                    if label is not None:
                        token.meta["reference"] = label
            return True

        return rule

    return wrap


def _track_offset(token_type: str) -> Callable[[InlineRule], InlineRule]:
    def wrap(original: InlineRule) -> InlineRule:
        def rule(state: StateInline, silent: bool) -> bool:
            start = state.pos
            first = len(state.tokens)
            if not original(state, silent):
                return False
            if not silent:
                token = _first_token(state.tokens, first, token_type)
                if token is not None:
                    token.meta["offset"] = start
            return True

        return rule

    return wrap


def _wrap_rule(ruler: Ruler, name: str, wrapper: Callable[[InlineRule], InlineRule]) -> bool:
    index = ruler.__find__(name)
    if index < 0:
        return False
    rule = ruler.__rules__[index]
    ruler.at(name, wrapper(rule.fn), {"alt": list(rule.alt)})
    return True


def _label_end(src: str, start: int, limit: int) -> int:
    """Find the ``]`` closing the link label opened at ``src[start]``."""
    pos = start + 1
    while pos < limit:
        char = src[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "[":
            return -1
        if char == "]":
            return pos if pos - start - 1 <= MAX_LABEL_LENGTH else -1
        pos += 1
    return -1


_DEFINED_LABELS_KEY = "_mdlinks_defined_labels"


def _defined_labels(env: dict) -> frozenset[str]:
    """Normalized labels of all reference definitions, built once per parse.

    Block parsing has collected every definition before inline rules run.
    """
    labels = env.get(_DEFINED_LABELS_KEY)
    if labels is None:
        labels = frozenset(normalize_label(name) for name in env.get("references", {}))
        env[_DEFINED_LABELS_KEY] = labels
    return labels


def _unresolved_footnote(state: StateInline) -> bool:
    src = state.src
    start = state.pos
    end = start + 2
    while end < state.posMax and src[end] not in " \t\n]":
        end += 1
    if end >= state.posMax or src[end] != "]" or end == start + 2:
        return False
    label = src[start + 2:end]
    refs = state.env.get("footnotes", {}).get("refs", {})
    if f":{label}" in refs:
        return False
    token = state.push("footnote_ref", "", 0)
    token.meta = {"label": label, "offset": start}
    state.pos = end + 1
    return True


def _unresolved_reference(state: StateInline, silent: bool) -> bool:
    """Emit full and collapsed references that have no definition.

    markdown-it renders these as literal text; keeping them as links lets
    broken references show up in the output. Never matches in silent mode
    so link label scanning is unaffected.
    """
    if silent:
        return False
    src = state.src
    start = state.pos
    image = src.startswith("![", start)
    label_start = start + 1 if image else start
    if not src.startswith("[", label_start):
        return False
    if not image and src.startswith("[^", start):
        return _unresolved_footnote(state)

    label_end = parseLinkLabel(state, label_start, not image)
    if label_end < 0:
        return False
    pos = label_end + 1
    if pos >= state.posMax or src[pos] != "[":
        return False
    ref_end = _label_end(src, pos, state.posMax)
    if ref_end < 0:
        return False
    label = src[pos + 1:ref_end]
    if label and not label.strip():
        return False
    label = label or src[label_start + 1:label_end]
    key = normalize_label(label)
    defined = _defined_labels(state.env)
    if not key or key in defined:
        return False

    if image:
        content = src[label_start + 1:label_end]
        children: list[Token] = []
        state.md.inline.parse(content, state.md, state.env, children)
        token = state.push("image", "img", 0)
        token.attrs = {"src": "", "alt": ""}
        token.children = children
        token.content = content
        token.meta = {"offset": start, "reference": label}
    else:
        old_max = state.posMax
        token = state.push("link_open", "a", 1)
        token.attrs = {"href": ""}
        token.meta = {"offset": start, "reference": label}
        state.pos = label_start + 1
        state.posMax = label_end
        state.linkLevel += 1
        state.md.inline.tokenize(state)
        state.linkLevel -= 1
        state.posMax = old_max
        state.push("link_close", "a", -1)

    state.pos = ref_end + 1
    return True


class _Locator:
    """Maps offsets in an inline token's content back to source positions."""

    def __init__(self, inline: Optional[Token], lines: list[str]):
        self.content = inline.content if inline is not None else ""
        self.first_line = inline.map[0] if inline is not None and inline.map else None
        self.lines = lines
        self.cursor = 0

    def position(self, offset: Optional[int], needle: str = "") -> Optional[Position]:
        if self.first_line is None:
            return None
        if offset is None:
            offset = self.content.find(needle, self.cursor) if needle else -1
            if offset < 0:
                return None
        self.cursor = max(self.cursor, offset + 1)

        line_start = self.content.rfind("\n", 0, offset) + 1
        line_end = self.content.find("\n", offset)
        if line_end < 0:
            line_end = len(self.content)
        index = self.first_line + self.content.count("\n", 0, offset)
        column = offset - line_start
        # Block markers and indentation are stripped from inline content
        if 0 <= index < len(self.lines):
            prefix = self.lines[index].find(self.content[line_start:line_end])
            if prefix > 0:
                column += prefix
        return Position(line=index + 1, column=column + 1)


class _TreeBuilder:
    """Folds a markdown-it token stream into a Node tree."""

    def __init__(self, text: str, env: dict):
        self.lines = _LINE_BREAK.split(text)
        self.env = env
        self.saw_definitions = False

    def document(self, tokens: list[Token]) -> Node:
        children = self._nest(tokens, self._block_container, self._block_leaves)
        if not self.saw_definitions:
            children.extend(self._env_definitions())
        return Node(NodeKind.DOCUMENT, children=tuple(children), position=Position(1, 1))

    def _nest(
        self,
        tokens: list[Token],
        container: Callable[[Token, list[Node]], Node],
        leaves: Callable[[Token], list[Node]],
    ) -> list[Node]:
        stack: list[tuple[Optional[Token], list[Node]]] = [(None, [])]
        for token in tokens:
            if token.nesting == 1:
                stack.append((token, []))
            elif token.nesting == -1:
                if len(stack) == 1:
                    continue
                opener, children = stack.pop()
                stack[-1][1].append(container(opener, children))
            else:
                stack[-1][1].extend(leaves(token))
        while len(stack) > 1:
            opener, children = stack.pop()
            stack[-1][1].append(container(opener, children))
        return stack[0][1]

    def _line_position(self, token: Token, marker: str = "") -> Optional[Position]:
        if not token.map:
            return None
        index = token.map[0]
        raw = self.lines[index] if index < len(self.lines) else ""
        column = raw.find(marker) if marker else -1
        if column < 0:
            column = len(raw) - len(raw.lstrip())
        return Position(line=index + 1, column=column + 1)

    # Block level

    def _block_container(self, token: Token, children: list[Node]) -> Node:
        if token.type == "heading_open":
            return Node(
                NodeKind.HEADING,
                children=tuple(children),
                level=int(token.tag[1:]),
                position=self._line_position(token),
            )
        if token.type == "footnote_reference_open":
            return Node(
                NodeKind.FOOTNOTE_DEFINITION,
                children=tuple(children),
                label=(token.meta or {}).get("label"),
                position=self._line_position(token, "[^"),
            )
        return Node(NodeKind.CONTAINER, children=tuple(children), position=self._line_position(token))

    def _block_leaves(self, token: Token) -> list[Node]:
        if token.type == "inline":
            return self._inline_nodes(token)
        if token.type == "definition":
            self.saw_definitions = True
            meta = token.meta or {}
            return [Node(
                NodeKind.REFERENCE_DEFINITION,
                label=meta.get("id") or meta.get("label"),
                destination=meta.get("url"),
                title=meta.get("title") or None,
                position=self._line_position(token, "["),
            )]
        if token.type in ("fence", "code_block"):
            return [Node(NodeKind.CODE, text=token.content, position=self._line_position(token))]
        if token.type in ("html_block", "front_matter", "hr"):
            return [Node(NodeKind.OTHER, text=token.content, position=self._line_position(token))]
        return []

    def _env_definitions(self) -> list[Node]:
        references = self.env.get("references", {})
        definitions = []
        for label, ref in references.items():
            ref_map = ref.get("map")
            position = Position(line=ref_map[0] + 1) if ref_map else None
            definitions.append(Node(
                NodeKind.REFERENCE_DEFINITION,
                label=label,
                destination=ref.get("href"),
                title=ref.get("title") or None,
                position=position,
            ))
        definitions.sort(key=lambda node: node.position.line if node.position else 0)
        return definitions

    # Inline level

    def _inline_nodes(self, inline: Optional[Token], tokens: Optional[list[Token]] = None) -> list[Node]:
        locator = _Locator(inline, self.lines)
        if tokens is None:
            tokens = (inline.children if inline is not None else None) or []
        return self._nest(
            tokens,
            lambda token, children: self._inline_container(token, children, locator),
            lambda token: self._inline_leaves(token, locator),
        )

    def _inline_container(self, token: Token, children: list[Node], locator: _Locator) -> Node:
        if token.type != "link_open":
            return Node(NodeKind.CONTAINER, children=tuple(children))
        meta = token.meta or {}
        href = token.attrGet("href")
        if token.markup in ("autolink", "linkify"):
            literal = "".join(child.text for child in children if child.kind is NodeKind.TEXT)
            return Node(
                NodeKind.AUTOLINK,
                children=tuple(children),
                destination=href,
                position=locator.position(meta.get("offset"), literal),
            )
        label = meta.get("reference")
        return Node(
            NodeKind.LINK,
            children=tuple(children),
            destination=href,
            title=token.attrGet("title") or None,
            label=label,
            reference=label is not None,
            position=locator.position(meta.get("offset")),
        )

    def _inline_leaves(self, token: Token, locator: _Locator) -> list[Node]:
        meta = token.meta or {}
        if token.type == "text":
            return [Node(NodeKind.TEXT, text=token.content)]
        if token.type == "code_inline":
            return [Node(NodeKind.CODE, text=token.content)]
        if token.type in ("softbreak", "hardbreak"):
            return [Node(NodeKind.BREAK)]
        if token.type == "image":
            label = meta.get("reference")
            # Alt text is parsed separately, so its offsets are not ours
            alt = self._inline_nodes(None, token.children or [])
            return [Node(
                NodeKind.IMAGE,
                children=tuple(alt),
                destination=token.attrGet("src"),
                title=token.attrGet("title") or None,
                label=label,
                reference=label is not None,
                position=locator.position(meta.get("offset")),
            )]
        if token.type == "footnote_ref":
            label = meta.get("label")
            if label is None and "id" in meta:
                label = str(meta["id"] + 1)
            return [Node(
                NodeKind.FOOTNOTE_REFERENCE,
                label=label,
                position=locator.position(meta.get("offset")),
            )]
        if token.type == "html_inline":
            return [Node(NodeKind.OTHER, text=token.content)]
        return []


class MarkdownParser:
    """CommonMark parser configured for link extraction."""

    def __init__(self, linkify: bool = True, front_matter: bool = True):
        md = MarkdownIt("commonmark", {"inline_definitions": True, "linkify": linkify})
        # Keep destinations exactly as written; nothing is rendered
        md.normalizeLink = _as_written
        md.normalizeLinkText = _as_written
        md.validateLink = _accept_any

        md.use(footnote_plugin)
        md.inline.ruler.disable("footnote_inline", True)
        md.core.ruler.disable("footnote_tail", True)
        if front_matter:
            md.use(front_matter_plugin)
        if linkify:
            md.enable("linkify")

        _wrap_rule(md.inline.ruler, "link", _track_link(image=False))
        _wrap_rule(md.inline.ruler, "image", _track_link(image=True))
        _wrap_rule(md.inline.ruler, "autolink", _track_offset("link_open"))
        anchor = "image"
        if _wrap_rule(md.inline.ruler, "footnote_ref", _track_offset("footnote_ref")):
            anchor = "footnote_ref"
        md.inline.ruler.after(anchor, "unresolved_reference", _unresolved_reference)

        self._md = md

    def parse(self, text: str) -> Node:
        """Parse Markdown text into a document node."""
        env: dict = {}
        tokens = self._md.parse(text, env)
        tree = _TreeBuilder(text, env).document(tokens)
        logger.debug("Parsed %d block tokens", len(tokens))
        return tree


def parse_markdown(text: str, linkify: bool = True, front_matter: bool = True) -> Node:
    """
    Parse Markdown text into a document tree.

    Args:
        text: Markdown source
        linkify: Detect bare URLs as autolinks
        front_matter: Skip a leading YAML front matter block

    Returns:
        Root DOCUMENT node
    """
    return MarkdownParser(linkify=linkify, front_matter=front_matter).parse(text)
