"""
Node - Immutable value of a document tree node.

Nodes are plain values: building or "changing" a node always produces a
new Node. A node gets its identity key when it is stored in a Document;
freshly built nodes carry key=None and the document allocates keys for
the whole subtree on insertion.

Usage:
    line = Node.block("code_line", [Node.text_leaf("print(1)")])
    container = Node.block("code_block", [line])
    container.text   # "print(1)"
"""

from __future__ import annotations
from typing import Any, Iterator, Literal, Sequence
from pydantic import BaseModel, Field


NodeObject = Literal["document", "block", "inline", "text"]


class Mark(BaseModel):
    """Formatting mark (bold, italic, ...) attached to a node."""
    model_config = {"frozen": True}

    type: str
    data: dict[str, Any] = Field(default_factory=dict)

    def __hash__(self) -> int:
        return hash((self.type, tuple(sorted(self.data.items()))))


class Node(BaseModel):
    """
    Immutable snapshot of a node and its subtree.

    Attributes:
        object: Structural category ("document", "block", "inline", "text")
        type: Kind identifier for blocks and inlines, None otherwise
        key: Identity key, None until the node is stored in a document
        nodes: Ordered children (empty for text nodes)
        leaf: Text payload of a text node
        marks: Formatting marks
        data: Arbitrary attributes
    """
    model_config = {"frozen": True}

    object: NodeObject = "block"
    type: str | None = None
    key: int | None = None
    nodes: tuple["Node", ...] = ()
    leaf: str = ""
    marks: tuple[Mark, ...] = ()
    data: dict[str, Any] = Field(default_factory=dict)

    # =========================================================================
    # Constructors
    # =========================================================================

    @classmethod
    def block(
        cls,
        type: str,
        nodes: Sequence[Node] | None = None,
        *,
        marks: Sequence[Mark | str] | None = None,
        data: dict[str, Any] | None = None,
    ) -> Node:
        return cls(object="block", type=type, nodes=tuple(nodes or ()), marks=_parse_marks(marks), data=data or {})

    @classmethod
    def inline(cls, type: str, nodes: Sequence[Node] | None = None, *, data: dict[str, Any] | None = None) -> Node:
        return cls(object="inline", type=type, nodes=tuple(nodes or ()), data=data or {})

    @classmethod
    def text_leaf(cls, text: str = "", *, marks: Sequence[Mark | str] | None = None) -> Node:
        return cls(object="text", leaf=text, marks=_parse_marks(marks))

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def text(self) -> str:
        """Text payload of this node and its descendants, depth-first."""
        return "".join(n.leaf for n in self.iter_depth_first() if n.object == "text")

    def has_marks(self, recursive: bool = True) -> bool:
        """True if this node (or, when recursive, any descendant) carries marks."""
        if not recursive:
            return bool(self.marks)
        return any(n.marks for n in self.iter_depth_first())

    # =========================================================================
    # Traversal
    # =========================================================================

    def iter_depth_first(self, children_only: bool = False) -> Iterator[Node]:
        """Iterate this subtree in depth-first order."""
        stack = list(reversed(self.nodes)) if children_only else [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.nodes))

    # =========================================================================
    # Copies
    # =========================================================================

    def without_keys(self) -> Node:
        """Copy of this subtree with every key cleared, ready for re-insertion."""
        copies: dict[int, Node] = {}
        for node in reversed(list(self.iter_depth_first())):
            copies[id(node)] = node.model_copy(update={
                "key": None,
                "nodes": tuple(copies[id(child)] for child in node.nodes),
            })
        return copies[id(self)]

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary. Recursive, bounded by the interpreter recursion limit."""
        result: dict[str, Any] = {"object": self.object}
        if self.key is not None:
            result["key"] = self.key
        if self.object == "text":
            result["text"] = self.leaf
        else:
            result["type"] = self.type
            result["nodes"] = [child.to_dict() for child in self.nodes]
        if self.marks:
            result["marks"] = [m.model_dump() for m in self.marks]
        if self.data:
            result["data"] = dict(self.data)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Node:
        """Deserialize from the output of to_dict(). Keys are kept if present."""
        obj = data.get("object", "block")
        return cls(
            object=obj,
            type=data.get("type") if obj != "text" else None,
            key=data.get("key"),
            nodes=tuple(cls.from_dict(child) for child in data.get("nodes", [])),
            leaf=data.get("text", "") if obj == "text" else "",
            marks=tuple(Mark.model_validate(m) for m in data.get("marks", [])),
            data=data.get("data", {}),
        )

    def __repr__(self) -> str:
        if self.object == "text":
            preview = self.leaf[:20] + ("..." if len(self.leaf) > 20 else "")
            marks = f", marks={[m.type for m in self.marks]}" if self.marks else ""
            return f"Text({preview!r}, key={self.key}{marks})"
        name = self.object.capitalize()
        return f"{name}({self.type!r}, key={self.key}, children={len(self.nodes)})"


def _parse_marks(marks: Sequence[Mark | str] | None) -> tuple[Mark, ...]:
    """Accept marks as Mark instances or bare type names."""
    if not marks:
        return ()
    return tuple(m if isinstance(m, Mark) else Mark(type=m) for m in marks)
