"""Image data model."""

from datetime import datetime

from pydantic import BaseModel, Field

IMAGE_KEY_PREFIX = "IMG"


def image_key_for(sequence: str | int) -> str:
    """Build the canonical image key from a printed sequence token.

    Args:
        sequence: The digits following ``i`` in a caption line, or an int.

    Returns:
        Key of the form ``IMG002``.
    """
    return f"{IMAGE_KEY_PREFIX}{int(sequence):03d}"


class Image(BaseModel):
    """An illustration referenced from the text, unique by ``image_key``."""

    id: int | None = None
    image_key: str
    title: str
    description: str = ""
    source_page: int | None = None
    content_type: str | None = None
    data: bytes | None = None
    note_ids: list[int] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
