"""
linekeeper - keeps container/line document trees valid.

Usage:
    from linekeeper import CodeSchema, Document, Editor, Node, Options

    opts = Options(container_type="code_block", line_type="code_line")
    doc = Document([Node.block("code_line", [Node.text_leaf("orphan")])])
    editor = Editor(doc, schema=CodeSchema(opts))
    editor.normalize()
    # the orphan line is now wrapped in a code_block
"""

from .errors import DocumentError, NodeNotFoundError, NormalizationError
from .options import Options
from .block import Document, IndexPath, Mark, Node
from .editor import Editor
from .schema import (
    CodeSchema,
    Schema,
    BlockRule,
    ChildRule,
    ParentRule,
    Violation,
    ViolationCode,
    get_successive_nodes,
    no_orphan_line,
    only_line,
)
from .utils import deserialize_code, text_to_lines

__all__ = [
    "Options",
    "Node",
    "Mark",
    "Document",
    "IndexPath",
    "Editor",
    "Schema",
    "BlockRule",
    "ChildRule",
    "ParentRule",
    "CodeSchema",
    "Violation",
    "ViolationCode",
    "get_successive_nodes",
    "only_line",
    "no_orphan_line",
    "deserialize_code",
    "text_to_lines",
    "DocumentError",
    "NodeNotFoundError",
    "NormalizationError",
]
