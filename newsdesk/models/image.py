"""
ImageRef model for images placed inside an article body.

Insertion points are carried as a structured integer (`after_paragraph`).
The legacy string annotation ("after-paragraph-N") is still accepted and
parsed into that field.
"""
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Legacy annotation produced upstream by the record store
POSITION_PATTERN = re.compile(r"after-paragraph-(\d+)")

# Images with no usable annotation land after the second paragraph
DEFAULT_AFTER_PARAGRAPH = 2


def parse_position(position: Optional[str]) -> Optional[int]:
    """
    Parse an "after-paragraph-N" annotation.

    Args:
        position: Annotation string, possibly None

    Returns:
        Optional[int]: N, or None when the annotation does not match
    """
    if not position:
        return None
    match = POSITION_PATTERN.search(position)
    if not match:
        return None
    return int(match.group(1))


class ImageRef(BaseModel):
    """An in-article image with its declared insertion point."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    url: str
    alt_text: str = ""
    caption: str = ""
    position: Optional[str] = None
    after_paragraph: Optional[int] = Field(default=None, ge=0)
    quality: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def resolve_insertion_point(cls, data):
        """Fill `after_paragraph` from the legacy annotation when missing."""
        if isinstance(data, dict) and data.get("after_paragraph") is None:
            parsed = parse_position(data.get("position"))
            data = {
                **data,
                "after_paragraph": parsed if parsed is not None else DEFAULT_AFTER_PARAGRAPH,
            }
        return data

    @property
    def annotation(self) -> str:
        """Legacy annotation string for this image."""
        return f"after-paragraph-{self.after_paragraph}"
