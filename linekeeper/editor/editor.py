"""
Editor - transaction handle over a Document.

All edits go through the editor so they can be recorded, rolled back
and followed by schema normalization.

Usage:
    editor = Editor(Document(nodes), schema=CodeSchema(Options()))
    editor.normalize()

    with editor.without_normalizing():
        editor.insert_node_by_key(parent_key, 0, Node.block("code_line"))
        editor.remove_node_by_key(other_key)
    # the document is normalized once, here
"""

from __future__ import annotations
import logging
import os
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Sequence

from ..block.document import Document
from ..block.node import Mark, Node, _parse_marks
from ..errors import NormalizationError
from .operations import (
    InsertNodeOperation,
    MoveNodeOperation,
    Operation,
    RemoveNodeOperation,
    SetMarksOperation,
)

if TYPE_CHECKING:
    from ..schema.rules import Schema
    from ..schema.violations import Violation


logger = logging.getLogger(__name__)


class Editor:
    """
    Applies edits to a document and keeps it valid against a schema.

    Edits are grouped into batches: a batch is everything done inside the
    outermost `without_normalizing()` scope. A primitive edit made outside
    any scope is a batch on its own. When a batch closes, the document is
    normalized; when it raises, every operation of the batch is undone.

    Attributes:
        value: The document being edited
        schema: Validator and normalize rules, or None for no normalization
        max_iterations: Repairs allowed per normalize() call
        operations: Every operation applied so far, oldest first
    """

    def __init__(
        self,
        document: Document | None = None,
        schema: "Schema | None" = None,
        max_iterations: int | None = None,
    ):
        self.value = document if document is not None else Document()
        self.schema = schema
        self.max_iterations = max_iterations if max_iterations is not None else int(
            os.getenv("LINEKEEPER_MAX_NORMALIZE_ITERATIONS", "1000")
        )
        self.operations: list[Operation] = []
        self._depth = 0
        self._is_normalizing = False

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def is_normalizing(self) -> bool:
        """True while normalization is suppressed or running."""
        return self._depth > 0 or self._is_normalizing

    def get_node(self, key: int) -> Node:
        return self.value.get_node(key)

    def get_parent(self, key: int) -> Node | None:
        return self.value.get_parent(key)

    def current_child_index(self, parent_key: int, key: int) -> int:
        return self.value.index_of(parent_key, key)

    # =========================================================================
    # Primitive operations
    # =========================================================================

    def insert_node_by_key(self, parent_key: int, index: int, node: Node) -> Node:
        """
        Insert a copy of `node` under `parent_key` at `index`.

        The document allocates fresh keys for the whole subtree, whatever
        keys `node` carries.

        Returns:
            The stored node, with its new keys
        """
        with self.without_normalizing():
            key = self.value.insert_node(parent_key, index, node)
            stored = self.value.get_node(key)
            self.operations.append(InsertNodeOperation(parent_key=parent_key, index=index, node=stored))
        return stored

    def remove_node_by_key(self, key: int) -> Node:
        """Remove a node and its subtree. Returns the removed subtree."""
        with self.without_normalizing():
            parent_key, index, removed = self.value.remove_node(key)
            self.operations.append(RemoveNodeOperation(parent_key=parent_key, index=index, node=removed))
        return removed

    def move_node_by_key(self, key: int, new_parent_key: int, index: int) -> None:
        with self.without_normalizing():
            old_parent_key, old_index = self.value.move_node(key, new_parent_key, index)
            self.operations.append(MoveNodeOperation(
                key=key,
                old_parent_key=old_parent_key,
                old_index=old_index,
                new_parent_key=new_parent_key,
                new_index=index,
            ))

    def set_marks_by_key(self, key: int, marks: Sequence[Mark | str]) -> None:
        new_marks = _parse_marks(marks)
        with self.without_normalizing():
            old_marks = self.value.set_marks(key, new_marks)
            self.operations.append(SetMarksOperation(key=key, old_marks=old_marks, new_marks=new_marks))

    # =========================================================================
    # Batches
    # =========================================================================

    @contextmanager
    def without_normalizing(self) -> Iterator[Editor]:
        """
        Suppress normalization until the outermost scope closes.

        Scopes nest. Only the outermost one normalizes (if it changed
        anything) and only the outermost one rolls back on error.
        """
        outermost = self._depth == 0
        batch_start = len(self.operations)
        self._depth += 1
        try:
            yield self
        except BaseException:
            if outermost:
                self._rollback(batch_start)
            raise
        finally:
            self._depth -= 1

        if outermost and not self._is_normalizing and len(self.operations) > batch_start:
            try:
                self.normalize()
            except BaseException:
                self._rollback(batch_start)
                raise

    def _rollback(self, batch_start: int) -> None:
        undone = self.operations[batch_start:]
        del self.operations[batch_start:]
        if undone:
            logger.warning("Rolling back %d operation(s)", len(undone))
        for operation in reversed(undone):
            operation.invert().apply(self.value)

    # =========================================================================
    # Normalization
    # =========================================================================

    def normalize(self) -> Editor:
        """
        Repair violations until the document satisfies the schema.

        Raises:
            NormalizationError: a repair made no change, or the document
                is still invalid after max_iterations repairs
        """
        if self.schema is None or self._is_normalizing:
            return self
        self._is_normalizing = True
        try:
            for _ in range(self.max_iterations):
                violation = self.schema.find_violation(self.value)
                if violation is None:
                    return self
                self._normalize_violation(violation)
            violation = self.schema.find_violation(self.value)
            if violation is None:
                return self
            logger.error("Normalization did not converge after %d repairs: %r", self.max_iterations, violation)
            raise NormalizationError(
                f"Document still invalid after {self.max_iterations} repairs: {violation!r}"
            )
        finally:
            self._is_normalizing = False

    def _normalize_violation(self, violation: "Violation") -> None:
        logger.debug("Normalizing %r", violation)
        before = len(self.operations)
        with self.without_normalizing():
            if self.schema.normalize(self, violation) is None:
                logger.info("No rule handled %s, applying default repair", violation.code.value)
                self.schema.default_normalize(self, violation)
        if len(self.operations) == before:
            raise NormalizationError(f"Repair of {violation!r} made no change")

    def __repr__(self) -> str:
        return f"Editor({self.value!r}, operations={len(self.operations)})"
