"""
Schema - declarative rules per block type, and the validator that checks them.

A Schema maps block types to BlockRules. Each rule may constrain the
block's children, its parent and its marks, and may carry a normalize
function that repairs violations of the rule. Violations no rule handles
get a generic default repair.

Usage:
    schema = Schema(blocks={
        "code_block": BlockRule(nodes=ChildRule(types=("code_line",)), normalize=fix_block),
    })
    violation = schema.find_violation(document)
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Callable
from pydantic import BaseModel

from ..block.document import Document
from ..block.node import Node
from .violations import Violation, ViolationCode

if TYPE_CHECKING:
    from ..editor.editor import Editor


logger = logging.getLogger(__name__)

NormalizeFn = Callable[..., Any]


class ChildRule(BaseModel):
    """
    Constraint on every child of a block.

    A child matches when its type is in `types` (if given) and its object
    is in `objects` (if given). At least `min` children must match.
    """
    model_config = {"frozen": True}

    types: tuple[str, ...] | None = None
    objects: tuple[str, ...] | None = None
    min: int = 0

    def matches(self, object: str, type: str | None) -> bool:
        if self.types is not None and type not in self.types:
            return False
        if self.objects is not None and object not in self.objects:
            return False
        return True

    @property
    def accepts_text(self) -> bool:
        return self.types is None and (self.objects is None or "text" in self.objects)


class ParentRule(BaseModel):
    model_config = {"frozen": True}

    types: tuple[str, ...]

    def matches(self, object: str, type: str | None) -> bool:
        return object == "block" and type in self.types


class BlockRule(BaseModel):
    """
    Attributes:
        nodes: Constraint on children, None for any
        parent: Constraint on the parent, None for any
        marks: Allowed mark types for the block and its descendants,
            None for any, () for none
        normalize: Repair for violations of this rule; returns None
            when it does not handle the violation
    """
    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    nodes: ChildRule | None = None
    parent: ParentRule | None = None
    marks: tuple[str, ...] | None = None
    normalize: NormalizeFn | None = None


class Schema(BaseModel):
    model_config = {"frozen": True}

    blocks: dict[str, BlockRule] = {}

    def _rule_for(self, object: str, type: str | None) -> BlockRule | None:
        if object != "block" or type is None:
            return None
        return self.blocks.get(type)

    def get_rule(self, node: Node) -> BlockRule | None:
        return self._rule_for(node.object, node.type)

    # =========================================================================
    # Validation
    # =========================================================================

    def _find_breach(
        self, document: Document, key: int, rule: BlockRule
    ) -> tuple[ViolationCode, int | None, int | None] | None:
        """(code, offending key, child index) of the first failed check, read from slots."""
        children = document.child_keys(key)

        if rule.nodes is not None:
            for index, child_key in enumerate(children):
                object, type = document.get_kind(child_key)
                if not rule.nodes.matches(object, type):
                    if object == "block":
                        return ViolationCode.CHILD_TYPE_INVALID, child_key, index
                    return ViolationCode.CHILD_OBJECT_INVALID, child_key, index
            if len(children) < rule.nodes.min:
                return ViolationCode.CHILD_MIN_INVALID, None, len(children)

        parent_key = document.parent_key(key)
        if rule.parent is not None and parent_key is not None:
            object, type = document.get_kind(parent_key)
            if not rule.parent.matches(object, type):
                if object == "block":
                    return ViolationCode.PARENT_TYPE_INVALID, None, None
                return ViolationCode.PARENT_OBJECT_INVALID, None, None

        if rule.marks is not None:
            for descendant in document.iter_keys(key):
                if any(mark.type not in rule.marks for mark in document.get_marks(descendant)):
                    index = children.index(descendant) if descendant in children else None
                    return ViolationCode.NODE_MARK_INVALID, descendant, index
        return None

    def validate_node(self, document: Document, key: int) -> Violation | None:
        """
        Check one stored node against its rule.

        Checks run in order: children, minimum children, parent, marks.
        Only the first failure is reported. Snapshots are built only for
        a failing node.
        """
        rule = self._rule_for(*document.get_kind(key))
        if rule is None:
            return None
        breach = self._find_breach(document, key, rule)
        if breach is None:
            return None

        code, child_key, index = breach
        node = document.get_node(key)
        parent = document.get_parent(key)
        child = None
        if child_key is not None:
            child = node.nodes[index] if index is not None else document.get_node(child_key)
        return Violation(code=code, node=node, parent=parent, child=child, index=index)

    def find_violation(self, document: Document) -> Violation | None:
        """First violation in depth-first document order, or None."""
        for key in document.iter_keys():
            violation = self.validate_node(document, key)
            if violation is not None:
                logger.debug("Found %s at %s", violation.code.value, document.get_path(key))
                return violation
        return None

    def is_valid(self, document: Document) -> bool:
        return self.find_violation(document) is None

    # =========================================================================
    # Normalization
    # =========================================================================

    def normalize(self, editor: "Editor", violation: Violation) -> "Editor | None":
        """Route a violation to the normalize function of its node's rule."""
        rule = self.get_rule(violation.node)
        if rule is None or rule.normalize is None:
            return None
        return rule.normalize(editor, violation)

    def default_normalize(self, editor: "Editor", violation: Violation) -> "Editor":
        """Generic repair for violations no rule handled."""
        match violation.code:
            case ViolationCode.CHILD_TYPE_INVALID | ViolationCode.CHILD_OBJECT_INVALID:
                editor.remove_node_by_key(violation.child.key)
            case ViolationCode.CHILD_MIN_INVALID:
                rule = self.get_rule(violation.node)
                if rule is not None and rule.nodes is not None and rule.nodes.accepts_text:
                    editor.insert_node_by_key(violation.node.key, len(violation.node.nodes), Node.text_leaf(""))
                else:
                    editor.remove_node_by_key(violation.node.key)
            case ViolationCode.PARENT_TYPE_INVALID | ViolationCode.PARENT_OBJECT_INVALID:
                editor.remove_node_by_key(violation.node.key)
            case ViolationCode.NODE_MARK_INVALID:
                rule = self.get_rule(violation.node)
                allowed = rule.marks if rule is not None and rule.marks is not None else ()
                kept = [mark for mark in violation.child.marks if mark.type in allowed]
                editor.set_marks_by_key(violation.child.key, kept)
        return editor
