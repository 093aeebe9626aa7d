"""Verse and note data models."""

from datetime import datetime

from pydantic import BaseModel, Field


class Verse(BaseModel):
    """A numbered verse such as ``14/7.1``.

    ``verse_key`` is the printed book/chapter/verse reference, not a
    storage identity; the same key may appear again on re-ingestion.
    """

    id: int | None = None
    verse_key: str
    text: str
    page_number: int | None = None
    chapter_id: int
    note_ids: list[int] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def append_text(self, continuation: str) -> None:
        """Append a continuation line, separated by a single space."""
        self.text = f"{self.text} {continuation}"


class Note(BaseModel):
    """A footnote, optionally attached to the verse it annotates."""

    id: int | None = None
    note_key: str
    text: str
    page_number: int | None = None
    verse_id: int | None = None
    image_ids: list[int] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def append_text(self, continuation: str) -> None:
        """Append a continuation line, separated by a single space."""
        self.text = f"{self.text} {continuation}"
