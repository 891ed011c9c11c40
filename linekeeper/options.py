"""
Options - read-only configuration of the container/line pair.

Usage:
    opts = Options(container_type="code_block", line_type="code_line")
    opts = Options.model_validate({"allow_marks": True})
"""

from __future__ import annotations
from pydantic import BaseModel, model_validator


class Options(BaseModel):
    """
    Kind identifiers of the container and line blocks.

    Attributes:
        container_type: Block type meant to hold only lines (e.g. a code block)
        line_type: Block type meant to appear only inside a container
        allow_marks: Whether lines (and their text) may carry formatting marks
    """
    model_config = {"frozen": True}

    container_type: str = "code_block"
    line_type: str = "code_line"
    allow_marks: bool = False

    @model_validator(mode="after")
    def _check_types(self) -> "Options":
        if not self.container_type or not self.line_type:
            raise ValueError("container_type and line_type must be non-empty")
        if self.container_type == self.line_type:
            raise ValueError(
                f"container_type and line_type must differ, both are {self.container_type!r}"
            )
        return self

    def is_line(self, node) -> bool:
        return node.object == "block" and node.type == self.line_type
