"""Parser position within the document structure."""

from enum import Enum


class ParserState(Enum):
    """Where the parser is while scanning one page.

    Only ``IN_VERSE`` and ``IN_NOTE`` give unmatched lines a target; in
    the other states a continuation line is dropped.

        OUTSIDE_BOOK --book--> IN_BOOK --chapter--> IN_CHAPTER
        IN_CHAPTER --verse--> IN_VERSE <--verse/note--> IN_NOTE
    """

    OUTSIDE_BOOK = "outside_book"
    IN_BOOK = "in_book"
    IN_CHAPTER = "in_chapter"
    IN_VERSE = "in_verse"
    IN_NOTE = "in_note"

    @property
    def accepts_continuation(self) -> bool:
        """Whether an unmatched line in this state continues the open verse or note."""
        return self in (ParserState.IN_VERSE, ParserState.IN_NOTE)
