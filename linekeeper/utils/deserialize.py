"""
Default reparse collaborator: raw text to line nodes.
"""

from __future__ import annotations
import re
from typing import Callable, Sequence

from ..block.node import Node
from ..options import Options


TextToLines = Callable[[Options, str], Sequence[Node]]

_NEWLINE = re.compile(r"\r?\n")


def deserialize_code(opts: Options, text: str) -> Node:
    """
    Build a container holding one line per line of `text`.

    Lines are split on "\\n" or "\\r\\n". Every line holds exactly one text
    node, so "" gives a single empty line. No keys are assigned.
    """
    lines = [
        Node.block(opts.line_type, [Node.text_leaf(line)])
        for line in _NEWLINE.split(text)
    ]
    return Node.block(opts.container_type, lines)


def text_to_lines(opts: Options, text: str) -> list[Node]:
    return list(deserialize_code(opts, text).nodes)
