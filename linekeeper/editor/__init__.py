from .editor import Editor
from .operations import (
    Operation,
    InsertNodeOperation,
    RemoveNodeOperation,
    MoveNodeOperation,
    SetMarksOperation,
)

__all__ = [
    "Editor",
    "Operation",
    "InsertNodeOperation",
    "RemoveNodeOperation",
    "MoveNodeOperation",
    "SetMarksOperation",
]
