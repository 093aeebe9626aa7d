"""Book data model."""

from datetime import datetime

from pydantic import BaseModel, Field


class Book(BaseModel):
    """A top-level book of the document, e.g. "Book of Apollo"."""

    id: int | None = None
    title: str
    description: str | None = None
    page_number: int | None = None
    chapter_ids: list[int] = Field(default_factory=list)  # document order
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
