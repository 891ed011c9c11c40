"""
Schema validation and repairs for container/line documents.

This module provides:
- ViolationCode, Violation: Classified breaches of a rule
- Schema, BlockRule, ChildRule, ParentRule: Declarative rules and validator
- get_successive_nodes: Run grouping over sibling sequences
- only_line, no_orphan_line: The two structural repairs
- CodeSchema: Rules and repair dispatch for one container/line pair
"""

from .violations import Violation, ViolationCode
from .rules import BlockRule, ChildRule, ParentRule, Schema
from .grouping import get_successive_nodes
from .repairs import no_orphan_line, only_line
from .code_schema import CodeSchema, normalize_code_block, normalize_code_line

__all__ = [
    "Violation",
    "ViolationCode",
    "Schema",
    "BlockRule",
    "ChildRule",
    "ParentRule",
    "get_successive_nodes",
    "only_line",
    "no_orphan_line",
    "CodeSchema",
    "normalize_code_block",
    "normalize_code_line",
]
