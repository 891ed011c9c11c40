"""
Repairs for the container/line invariant.

- only_line: a container holds children that are not lines. Each run of
  such children is flattened to text, reparsed into lines and spliced in
  where the run was.
- no_orphan_line: lines sit outside a container. Each run of consecutive
  lines is wrapped in a new container placed where the run was.

Both record their edits inside one without_normalizing() scope, so the
document is re-validated only after the whole repair is applied.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING

from ..block.node import Node
from ..options import Options
from ..utils.deserialize import TextToLines, text_to_lines as default_text_to_lines
from .grouping import get_successive_nodes
from .violations import Violation

if TYPE_CHECKING:
    from ..editor.editor import Editor


logger = logging.getLogger(__name__)


def only_line(
    opts: Options,
    editor: "Editor",
    violation: Violation,
    text_to_lines: TextToLines = default_text_to_lines,
) -> "Editor":
    """Ensure a container only holds lines, converting other children to lines."""
    non_line_groups = get_successive_nodes(violation.node.nodes, lambda n: not opts.is_line(n))

    with editor.without_normalizing():
        for group in non_line_groups:
            if not group:
                continue
            text = "".join(n.text for n in group)
            lines = text_to_lines(opts, text)

            # positions are looked up live, earlier groups have shifted them
            first = group[0]
            parent = editor.get_parent(first.key)
            index = editor.current_child_index(parent.key, first.key)

            with editor.without_normalizing():
                for offset, line in enumerate(lines):
                    editor.insert_node_by_key(parent.key, index + offset, line)

            with editor.without_normalizing():
                for node in group:
                    editor.remove_node_by_key(node.key)

            logger.debug(
                "Replaced %d non-line node(s) in %s %s with %d line(s)",
                len(group), opts.container_type, parent.key, len(lines),
            )

    return editor


def no_orphan_line(opts: Options, editor: "Editor", violation: Violation) -> "Editor | None":
    """Ensure lines are always children of a container, wrapping orphan runs."""
    parent = violation.parent
    if parent is None:
        return None

    lines_groups = get_successive_nodes(parent.nodes, opts.is_line)

    with editor.without_normalizing():
        for group in lines_groups:
            first_line_index = editor.current_child_index(parent.key, group[0].key)
            container = editor.insert_node_by_key(
                parent.key, first_line_index, Node.block(opts.container_type)
            )
            for index, line in enumerate(group):
                editor.move_node_by_key(line.key, container.key, index)

            logger.debug(
                "Wrapped %d orphan line(s) of node %s in %s %s",
                len(group), parent.key, opts.container_type, container.key,
            )

    return editor
