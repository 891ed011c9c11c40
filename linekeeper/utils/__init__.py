from .deserialize import TextToLines, deserialize_code, text_to_lines

__all__ = [
    "TextToLines",
    "deserialize_code",
    "text_to_lines",
]
