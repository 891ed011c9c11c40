"""
CodeSchema - schema rules that keep containers and lines consistent.

- the container accepts only line blocks as children
- a line accepts only text children (at least one) and must sit in a container
- unless allow_marks is set, lines and their text carry no marks

Violations of the first two rules are repaired with only_line and
no_orphan_line; everything else is left to the schema's default repair.
"""

from __future__ import annotations
from functools import partial
from typing import TYPE_CHECKING

from ..options import Options
from ..utils.deserialize import TextToLines, text_to_lines as default_text_to_lines
from .repairs import no_orphan_line, only_line
from .rules import BlockRule, ChildRule, ParentRule, Schema
from .violations import Violation, ViolationCode

if TYPE_CHECKING:
    from ..editor.editor import Editor


def normalize_code_block(
    opts: Options,
    editor: "Editor",
    violation: Violation,
    text_to_lines: TextToLines = default_text_to_lines,
) -> "Editor | None":
    match violation.code:
        case ViolationCode.CHILD_OBJECT_INVALID | ViolationCode.CHILD_TYPE_INVALID:
            return only_line(opts, editor, violation, text_to_lines)
        case _:
            return None


def normalize_code_line(opts: Options, editor: "Editor", violation: Violation) -> "Editor | None":
    match violation.code:
        case ViolationCode.PARENT_OBJECT_INVALID | ViolationCode.PARENT_TYPE_INVALID:
            return no_orphan_line(opts, editor, violation)
        case _:
            return None


class CodeSchema(Schema):
    """
    Schema for one container/line pair.

    Usage:
        schema = CodeSchema(Options(container_type="code_block", line_type="code_line"))
        editor = Editor(document, schema=schema)
        editor.normalize()
    """

    opts: Options

    def __init__(self, opts: Options | None = None, *, text_to_lines: TextToLines = default_text_to_lines):
        opts = opts or Options()
        line_rule = BlockRule(
            nodes=ChildRule(objects=("text",), min=1),
            parent=ParentRule(types=(opts.container_type,)),
            marks=None if opts.allow_marks else (),
            normalize=partial(normalize_code_line, opts),
        )
        container_rule = BlockRule(
            nodes=ChildRule(types=(opts.line_type,), objects=("block",)),
            normalize=partial(normalize_code_block, opts, text_to_lines=text_to_lines),
        )
        super().__init__(
            opts=opts,
            blocks={
                opts.container_type: container_rule,
                opts.line_type: line_rule,
            },
        )
