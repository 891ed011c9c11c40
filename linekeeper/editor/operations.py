"""
Operations - recorded, invertible edits applied to a Document.

Every primitive edit made through the Editor is recorded as one of these
models. Inverting an operation and applying it undoes the edit exactly,
which is how a failed batch is rolled back.
"""

from __future__ import annotations
from typing import Annotated, Literal, Union
from pydantic import BaseModel, Field

from ..block.document import Document
from ..block.node import Mark, Node


class InsertNodeOperation(BaseModel):
    model_config = {"frozen": True}

    type: Literal["insert_node"] = "insert_node"
    parent_key: int
    index: int
    node: Node  # stored subtree, with its allocated keys

    def apply(self, document: Document) -> None:
        document.insert_node(self.parent_key, self.index, self.node, keep_keys=True)

    def invert(self) -> RemoveNodeOperation:
        return RemoveNodeOperation(parent_key=self.parent_key, index=self.index, node=self.node)


class RemoveNodeOperation(BaseModel):
    model_config = {"frozen": True}

    type: Literal["remove_node"] = "remove_node"
    parent_key: int
    index: int
    node: Node

    def apply(self, document: Document) -> None:
        document.remove_node(self.node.key)

    def invert(self) -> InsertNodeOperation:
        return InsertNodeOperation(parent_key=self.parent_key, index=self.index, node=self.node)


class MoveNodeOperation(BaseModel):
    model_config = {"frozen": True}

    type: Literal["move_node"] = "move_node"
    key: int
    old_parent_key: int
    old_index: int
    new_parent_key: int
    new_index: int

    def apply(self, document: Document) -> None:
        document.move_node(self.key, self.new_parent_key, self.new_index)

    def invert(self) -> MoveNodeOperation:
        return MoveNodeOperation(
            key=self.key,
            old_parent_key=self.new_parent_key,
            old_index=self.new_index,
            new_parent_key=self.old_parent_key,
            new_index=self.old_index,
        )


class SetMarksOperation(BaseModel):
    model_config = {"frozen": True}

    type: Literal["set_marks"] = "set_marks"
    key: int
    old_marks: tuple[Mark, ...] = ()
    new_marks: tuple[Mark, ...] = ()

    def apply(self, document: Document) -> None:
        document.set_marks(self.key, self.new_marks)

    def invert(self) -> SetMarksOperation:
        return SetMarksOperation(key=self.key, old_marks=self.new_marks, new_marks=self.old_marks)


Operation = Annotated[
    Union[InsertNodeOperation, RemoveNodeOperation, MoveNodeOperation, SetMarksOperation],
    Field(discriminator="type"),
]
