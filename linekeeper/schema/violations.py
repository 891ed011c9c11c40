"""
Violation - a detected breach of a schema rule.

Violations are produced by Schema.find_violation, consumed once by a
normalize function and then discarded.
"""

from __future__ import annotations
import enum
from pydantic import BaseModel

from ..block.node import Node


class ViolationCode(enum.StrEnum):
    CHILD_TYPE_INVALID = "child_type_invalid"
    CHILD_OBJECT_INVALID = "child_object_invalid"
    CHILD_MIN_INVALID = "child_min_invalid"
    PARENT_TYPE_INVALID = "parent_type_invalid"
    PARENT_OBJECT_INVALID = "parent_object_invalid"
    NODE_MARK_INVALID = "node_mark_invalid"


class Violation(BaseModel):
    """
    Attributes:
        code: What kind of breach was found
        node: The node whose rule failed (the container for child
            violations, the line for parent violations)
        parent: Parent of `node`, None for the document root
        child: The offending child or marked descendant, if any
        index: Index of `child` in `node`, if it is a direct child
    """
    model_config = {"frozen": True}

    code: ViolationCode
    node: Node
    parent: Node | None = None
    child: Node | None = None
    index: int | None = None

    def __repr__(self) -> str:
        return f"Violation({self.code.value}, node={self.node!r}, child={self.child!r})"
