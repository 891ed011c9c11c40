"""
Errors raised by the document arena and the editor.

The repairs themselves have no error channel: an unhandled violation is
reported by returning None, never by raising.
"""


class DocumentError(Exception):
    """An operation would leave the document tree malformed."""
    pass


class NodeNotFoundError(DocumentError, KeyError):
    """No node with the given key lives in the document."""

    def __init__(self, key: int):
        self.key = key
        super().__init__(f"Node with key {key} does not exist in the document")

    def __str__(self) -> str:
        return self.args[0]


class NormalizationError(Exception):
    """The normalization loop did not converge."""
    pass
