"""
Document - Arena of nodes indexed by monotonically issued keys.

Every stored node lives in one slot. A slot keeps the node's own fields,
its parent key and the ordered keys of its children; structural edits
only rewrite those key lists. Keys are never reused, so a key removed
from the document can safely be restored by a rollback.

Usage:
    doc = Document([Node.block("code_block", [Node.block("code_line", [Node.text_leaf("x")])])])
    block = doc.get_node(doc.child_keys(doc.root_key)[0])
    doc.insert_node(block.key, 1, Node.block("code_line", [Node.text_leaf("y")]))
"""

from __future__ import annotations
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Iterator, Sequence

from ..errors import DocumentError, NodeNotFoundError
from .node import Mark, Node, NodeObject
from .path import IndexPath


@dataclass
class _Slot:
    key: int
    object: NodeObject
    type: str | None = None
    leaf: str = ""
    marks: tuple[Mark, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)
    parent: int | None = None
    children: list[int] = field(default_factory=list)


class Document:
    """
    Rooted tree of nodes stored in an arena.

    The root slot is a node with object="document". Reads return
    immutable Node snapshots; writes go through insert_node, remove_node,
    move_node and set_marks.
    """

    def __init__(self, nodes: Sequence[Node] | None = None, *, data: dict[str, Any] | None = None):
        self._slots: dict[int, _Slot] = {}
        self._keys = count(1)
        self.root_key = self._allocate(Node(object="document", data=data or {}), parent=None, keep_keys=False)
        for index, node in enumerate(nodes or ()):
            self.insert_node(self.root_key, index, node)

    # =========================================================================
    # Arena
    # =========================================================================

    def _next_key(self) -> int:
        return next(self._keys)

    def _check_keys_free(self, node: Node) -> None:
        for descendant in node.iter_depth_first():
            if descendant.key is not None and descendant.key in self._slots:
                raise DocumentError(f"Key {descendant.key} is already in use")

    def _allocate(self, node: Node, parent: int | None, keep_keys: bool) -> int:
        # pre-order with an explicit stack, keys are issued in document order
        top: int | None = None
        stack: list[tuple[Node, int | None]] = [(node, None)]
        while stack:
            current, owner = stack.pop()
            if keep_keys and current.key is not None:
                key = current.key
            else:
                key = self._next_key()
            self._slots[key] = _Slot(
                key=key,
                object=current.object,
                type=current.type,
                leaf=current.leaf,
                marks=tuple(current.marks),
                data=dict(current.data),
                parent=parent if owner is None else owner,
            )
            if owner is None:
                top = key
            else:
                self._slots[owner].children.append(key)
            stack.extend((child, key) for child in reversed(current.nodes))
        return top

    def _free(self, key: int) -> None:
        for descendant in list(self.iter_keys(key)):
            del self._slots[descendant]

    def _slot(self, key: int) -> _Slot:
        try:
            return self._slots[key]
        except KeyError:
            raise NodeNotFoundError(key) from None

    def _is_descendant(self, key: int, ancestor: int) -> bool:
        current: int | None = key
        while current is not None:
            if current == ancestor:
                return True
            current = self._slots[current].parent
        return False

    # =========================================================================
    # Reads
    # =========================================================================

    def __len__(self) -> int:
        """Number of stored nodes, root included."""
        return len(self._slots)

    def __contains__(self, key: object) -> bool:
        return key in self._slots

    def has_node(self, key: int) -> bool:
        return key in self._slots

    @property
    def root(self) -> Node:
        return self.get_node(self.root_key)

    @property
    def nodes(self) -> tuple[Node, ...]:
        """Snapshots of the root's children."""
        return self.root.nodes

    def get_node(self, key: int) -> Node:
        """Immutable snapshot of the node and its subtree."""
        built: dict[int, Node] = {}
        # reversed pre-order visits every child before its parent
        for current in reversed(list(self.iter_keys(key))):
            slot = self._slots[current]
            built[current] = Node(
                object=slot.object,
                type=slot.type,
                key=slot.key,
                nodes=tuple(built.pop(child) for child in slot.children),
                leaf=slot.leaf,
                marks=slot.marks,
                data=dict(slot.data),
            )
        return built[key]

    def get_kind(self, key: int) -> tuple[NodeObject, str | None]:
        """(object, type) of a node, without building a snapshot."""
        slot = self._slot(key)
        return slot.object, slot.type

    def get_marks(self, key: int) -> tuple[Mark, ...]:
        return self._slot(key).marks

    def parent_key(self, key: int) -> int | None:
        return self._slot(key).parent

    def get_parent(self, key: int) -> Node | None:
        parent = self.parent_key(key)
        return None if parent is None else self.get_node(parent)

    def child_keys(self, key: int) -> tuple[int, ...]:
        return tuple(self._slot(key).children)

    def index_of(self, parent_key: int, key: int) -> int:
        """Current index of `key` among the children of `parent_key`."""
        children = self._slot(parent_key).children
        try:
            return children.index(key)
        except ValueError:
            self._slot(key)
            raise DocumentError(f"Node {key} is not a child of node {parent_key}") from None

    def iter_keys(self, key: int | None = None) -> Iterator[int]:
        """Keys of the subtree in depth-first document order."""
        stack = [self.root_key if key is None else key]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self._slot(current).children))

    def get_path(self, key: int) -> IndexPath:
        indices: list[int] = []
        current = self._slot(key)
        while current.parent is not None:
            parent = self._slots[current.parent]
            indices.append(parent.children.index(current.key))
            current = parent
        return IndexPath(list(reversed(indices)))

    def get_by_path(self, path: IndexPath | str) -> Node:
        if isinstance(path, str):
            path = IndexPath.from_string(path)
        key = self.root_key
        for index in path:
            children = self._slots[key].children
            if not 0 <= index < len(children):
                raise DocumentError(f"No node at path {path}")
            key = children[index]
        return self.get_node(key)

    # =========================================================================
    # Writes
    # =========================================================================

    def insert_node(self, parent_key: int, index: int, node: Node, keep_keys: bool = False) -> int:
        """
        Store `node` (and its subtree) as a child of `parent_key` at `index`.

        New slots are allocated for the whole subtree unless keep_keys is
        set, in which case the node's existing keys are restored.

        Returns:
            The key of the inserted node
        """
        parent = self._slot(parent_key)
        if parent.object == "text":
            raise DocumentError(f"Cannot insert into text node {parent_key}")
        if node.object == "document":
            raise DocumentError("Cannot insert a document node")
        if not 0 <= index <= len(parent.children):
            raise DocumentError(
                f"Index {index} out of range for node {parent_key} with {len(parent.children)} children"
            )
        if keep_keys:
            self._check_keys_free(node)
        key = self._allocate(node, parent_key, keep_keys)
        parent.children.insert(index, key)
        return key

    def remove_node(self, key: int) -> tuple[int, int, Node]:
        """
        Remove a node and its subtree.

        Returns:
            (parent key, former index, snapshot of the removed subtree)
        """
        slot = self._slot(key)
        if slot.parent is None:
            raise DocumentError("Cannot remove the document root")
        snapshot = self.get_node(key)
        parent = self._slots[slot.parent]
        index = parent.children.index(key)
        del parent.children[index]
        self._free(key)
        return slot.parent, index, snapshot

    def move_node(self, key: int, new_parent_key: int, index: int) -> tuple[int, int]:
        """
        Move a node under `new_parent_key` at `index`.

        The index is interpreted after the node has been detached from its
        old parent.

        Returns:
            (old parent key, old index)
        """
        slot = self._slot(key)
        new_parent = self._slot(new_parent_key)
        if slot.parent is None:
            raise DocumentError("Cannot move the document root")
        if new_parent.object == "text":
            raise DocumentError(f"Cannot move into text node {new_parent_key}")
        if self._is_descendant(new_parent_key, key):
            raise DocumentError(f"Cannot move node {key} into itself or its descendants")
        old_parent = self._slots[slot.parent]
        old_index = old_parent.children.index(key)
        size = len(new_parent.children) - (1 if old_parent is new_parent else 0)
        if not 0 <= index <= size:
            raise DocumentError(
                f"Index {index} out of range for node {new_parent_key} with {size} children"
            )
        del old_parent.children[old_index]
        new_parent.children.insert(index, key)
        slot.parent = new_parent_key
        return old_parent.key, old_index

    def set_marks(self, key: int, marks: Sequence[Mark]) -> tuple[Mark, ...]:
        """Replace the marks of a node. Returns the previous marks."""
        slot = self._slot(key)
        old = slot.marks
        slot.marks = tuple(marks)
        return old

    # =========================================================================
    # Serialization
    # =========================================================================

    def model_dump(self) -> dict[str, Any]:
        return self.root.to_dict()

    @classmethod
    def model_load(cls, data: dict[str, Any], keep_keys: bool = False) -> Document:
        """Build a document from model_dump() output."""
        root = Node.from_dict(data)
        doc = cls(data=root.data)
        if not keep_keys:
            for index, node in enumerate(root.nodes):
                doc.insert_node(doc.root_key, index, node.without_keys())
            return doc
        if root.key is not None and root.key != doc.root_key:
            slot = doc._slots.pop(doc.root_key)
            slot.key = root.key
            doc._slots[root.key] = slot
            doc.root_key = root.key
        max_key = max((n.key for n in root.iter_depth_first() if n.key is not None), default=0)
        doc._keys = count(max(max_key, doc.root_key) + 1)
        for index, node in enumerate(root.nodes):
            doc.insert_node(doc.root_key, index, node, keep_keys=True)
        return doc

    def debug_tree(self, key: int | None = None, indent: int = 0) -> str:
        """Readable dump of the subtree, one node per line."""
        lines = []
        stack = [(self.root_key if key is None else key, indent)]
        while stack:
            current, depth = stack.pop()
            slot = self._slot(current)
            prefix = "  " * depth
            if slot.object == "text":
                parts = [f"{prefix}text#{slot.key}({slot.leaf!r}"]
            else:
                parts = [f"{prefix}{slot.object}#{slot.key}("]
                if slot.type:
                    parts.append(f"{slot.type!r}")
            if slot.marks:
                parts.append(f", marks={[m.type for m in slot.marks]}")
            parts.append(")")
            lines.append("".join(parts))
            stack.extend((child, depth + 1) for child in reversed(slot.children))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Document(nodes={len(self._slots)}, children={len(self._slots[self.root_key].children)})"
