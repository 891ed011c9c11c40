"""
Document tree primitives.

This module provides:
- Node: Immutable snapshot of a node and its subtree
- Mark: Formatting mark carried by a node
- Document: Arena of nodes indexed by monotonically issued keys
- IndexPath: Node position via child indices (e.g., "0.2.1")
"""

from .node import Mark, Node, NodeObject
from .path import IndexPath
from .document import Document

__all__ = [
    "Node",
    "Mark",
    "NodeObject",
    "Document",
    "IndexPath",
]
