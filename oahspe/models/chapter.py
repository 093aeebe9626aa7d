"""Chapter data model."""

from datetime import datetime

from pydantic import BaseModel, Field


class Chapter(BaseModel):
    """A chapter inside a book.

    ``book_id`` may be ``None`` for a chapter header seen before any book
    title. Once set it is never rewritten by the repository.
    """

    id: int | None = None
    title: str
    description: str | None = None
    page_number: int | None = None
    book_id: int | None = None
    verse_ids: list[int] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
