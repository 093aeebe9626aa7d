"""Typed events emitted by the page parser.

The event set is closed. Consumers dispatch with ``match`` and finish with
``typing.assert_never`` so that adding a variant surfaces as a type error
instead of a silently ignored case.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class BookStart(_Event):
    """A book title line, e.g. "Book of Apollo"."""

    kind: Literal["book_start"] = "book_start"
    title: str


class ChapterStart(_Event):
    """A chapter header line, e.g. "Chapter 7"."""

    kind: Literal["chapter_start"] = "chapter_start"
    title: str


class Verse(_Event):
    """A verse line. ``key`` is ``None`` for a continuation of the open verse."""

    kind: Literal["verse"] = "verse"
    key: str | None = None
    text: str


class Note(_Event):
    """A footnote line. ``key`` is ``None`` for a continuation of the open note."""

    kind: Literal["note"] = "note"
    key: str | None = None
    text: str


class ImageRef(_Event):
    """An image caption line; ``key`` is the canonical image key (``IMG002``)."""

    kind: Literal["image_ref"] = "image_ref"
    key: str
    caption: str


class PageBreak(_Event):
    """Always the first event of a parsed page."""

    kind: Literal["page_break"] = "page_break"
    page_number: int


Event = BookStart | ChapterStart | Verse | Note | ImageRef | PageBreak
