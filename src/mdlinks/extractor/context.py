"""Per-document traversal state."""

from dataclasses import dataclass, field
from typing import Optional

from ..parser.nodes import Node, NodeKind
from ..utils.text import normalize_label


@dataclass(frozen=True)
class ReferenceDefinition:
    """Target of a reference-style link."""

    url: str
    title: Optional[str] = None


@dataclass
class DocumentContext:
    """State of one walk over one document.

    Never shared between files or between walks of the same tree.
    """

    file_identifier: str
    heading_stack: list[tuple[int, str]] = field(default_factory=list)
    reference_definitions: dict[str, ReferenceDefinition] = field(default_factory=dict)
    footnote_labels: set[str] = field(default_factory=set)

    @classmethod
    def collect(cls, tree: Node, file_identifier: str) -> "DocumentContext":
        """Build a context holding every definition in the tree.

        If a label is defined more than once the first definition in
        document order wins.
        """
        context = cls(file_identifier=file_identifier)
        for node in tree.walk():
            if node.kind is NodeKind.REFERENCE_DEFINITION and node.label:
                key = normalize_label(node.label)
                if key and key not in context.reference_definitions:
                    context.reference_definitions[key] = ReferenceDefinition(
                        url=node.destination or "",
                        title=node.title,
                    )
            elif node.kind is NodeKind.FOOTNOTE_DEFINITION and node.label:
                context.footnote_labels.add(node.label)
        return context

    def enter_heading(self, level: int, text: str) -> None:
        """Close sections at the same or a deeper level, then open a new one."""
        while self.heading_stack and self.heading_stack[-1][0] >= level:
            self.heading_stack.pop()
        self.heading_stack.append((level, text))

    def context_path(self) -> tuple[str, ...]:
        return tuple(text for _, text in self.heading_stack)

    def lookup(self, label: str) -> Optional[ReferenceDefinition]:
        return self.reference_definitions.get(normalize_label(label))

    def has_footnote(self, label: str) -> bool:
        """Footnote labels match exactly, unlike reference labels."""
        return label in self.footnote_labels
