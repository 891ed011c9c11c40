from __future__ import annotations
from typing import Callable, Sequence

from ..block.node import Node


def get_successive_nodes(nodes: Sequence[Node], match: Callable[[Node], bool]) -> list[list[Node]]:
    """
    Group the maximal runs of consecutive nodes matching `match`.

    Nodes that do not match are skipped and never returned. Groups are
    non-empty, keep the original order, and are listed in sequence order.

    Example:
        get_successive_nodes([a, b, x, c], is_line)  ->  [[a, b], [c]]
    """
    groups: list[list[Node]] = []
    cursor = 0
    size = len(nodes)
    while cursor < size:
        while cursor < size and not match(nodes[cursor]):
            cursor += 1
        if cursor == size:
            break
        group: list[Node] = []
        while cursor < size and match(nodes[cursor]):
            group.append(nodes[cursor])
            cursor += 1
        groups.append(group)
    return groups
