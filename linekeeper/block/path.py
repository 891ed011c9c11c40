"""
IndexPath - A node's position in a document as child indices.

Paths are immutable snapshots computed from the live document; they go
stale as soon as the tree changes. Use keys for identity and paths for
ordering and display.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True, order=True)
class IndexPath:
    """
    Child indices from the document root down to a node.

    The root path is empty. Ordering is document order (depth-first,
    left to right), so sorting paths sorts nodes by position.

    Example:
        path = document.get_path(key)
        str(path)          # "0.2.1"
        path.parent        # IndexPath([0, 2])
    """

    indices: tuple[int, ...] = ()

    def __init__(self, indices: list[int] | tuple[int, ...] = ()):
        object.__setattr__(self, "indices", tuple(indices))

    def __len__(self) -> int:
        return len(self.indices)

    def __getitem__(self, index: int) -> int:
        return self.indices[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self.indices)

    @property
    def depth(self) -> int:
        return len(self.indices)

    @property
    def is_root(self) -> bool:
        return not self.indices

    @property
    def last(self) -> int | None:
        """Position in the parent's children, None for the root."""
        return self.indices[-1] if self.indices else None

    @property
    def parent(self) -> IndexPath | None:
        if not self.indices:
            return None
        return IndexPath(self.indices[:-1])

    def __str__(self) -> str:
        return ".".join(str(i) for i in self.indices)

    def __repr__(self) -> str:
        return f"IndexPath({list(self.indices)})"

    @classmethod
    def from_string(cls, s: str) -> IndexPath:
        """Parse "0.2.1" into a path; "" is the root."""
        if not s:
            return cls()
        return cls([int(i) for i in s.split(".")])
