"""Line-oriented page parser emitting structural events."""

import logging
import re
from collections.abc import Sequence
from typing import Annotated

from pydantic import BaseModel, Field

from oahspe.ingestion.events import (
    BookStart,
    ChapterStart,
    Event,
    ImageRef,
    Note,
    PageBreak,
    Verse,
)
from oahspe.ingestion.state import ParserState
from oahspe.models.image import image_key_for

logger = logging.getLogger(__name__)

# Recognizers, tried in this order. The first match wins.
BOOK_PATTERN = re.compile(r"^(Book of .+|.*?之.*?书)$")
CHAPTER_PATTERN = re.compile(r"^(Chapter\s+\d+|第[一二三四五六七八九十百]+章)$")
VERSE_PATTERN = re.compile(r"^(\d+/\d+\.\d+)\s+(.*)$")
NOTE_PATTERN = re.compile(r"^\(?([0-9]+)\)?\s+(.*)$")
IMAGE_PATTERN = re.compile(r"^i(\d{3})\s+(.*)$")

# NOTE_PATTERN alone also accepts "12 some text"; a real footnote opens
# with "(" or with digits closed by ")".
NOTE_MARKER_PATTERN = re.compile(r"^(\(|\d+\))")


class ParsedPage(BaseModel):
    """Events for one page plus the state the parser ended in."""

    page_number: int
    events: list[Annotated[Event, Field(discriminator="kind")]] = Field(
        default_factory=list
    )
    final_state: ParserState = ParserState.OUTSIDE_BOOK


class OahspeParser:
    """Turns the text lines of one page into an ordered event list.

    The parser is deterministic and keeps no state between calls: every
    call starts ``OUTSIDE_BOOK``, so a continuation line at the top of a
    page is dropped here and cross-page continuity is left to the
    ingestion service. The state is a local of each call, which keeps a
    single instance safe to share between concurrent page jobs.
    """

    def parse(self, lines: Sequence[str] | None, page_number: int) -> list[Event]:
        """Parse one page of text lines.

        Args:
            lines: The page's text lines, untrimmed.
            page_number: Source page number, carried by the leading PageBreak.

        Returns:
            Events in document order, starting with ``PageBreak``.

        Raises:
            ValueError: If lines is None.
        """
        return self.parse_page(lines, page_number).events

    def parse_page(self, lines: Sequence[str] | None, page_number: int) -> ParsedPage:
        """Parse one page and also report the final parser state.

        Args:
            lines: The page's text lines, untrimmed.
            page_number: Source page number.

        Returns:
            A ParsedPage with the events and the state after the last line.

        Raises:
            ValueError: If lines is None.
        """
        if lines is None:
            raise ValueError("lines cannot be None")

        state = ParserState.OUTSIDE_BOOK
        events: list[Event] = [PageBreak(page_number=page_number)]
        logger.debug("Processing page %s with %d lines", page_number, len(lines))

        for raw_line in lines:
            line = raw_line.strip()
            if not line:
                continue

            event, next_state = self._match_line(line, state)
            if next_state is not state:
                logger.debug("State transition: %s -> %s", state.name, next_state.name)
                state = next_state
            if event is not None:
                events.append(event)

        logger.debug(
            "Completed parsing page %s - emitted %d events", page_number, len(events)
        )
        return ParsedPage(page_number=page_number, events=events, final_state=state)

    def _match_line(
        self, line: str, state: ParserState
    ) -> tuple[Event | None, ParserState]:
        """Apply the recognizers to a trimmed, non-blank line.

        Args:
            line: The trimmed line.
            state: Parser state before this line.

        Returns:
            The emitted event (or None if the line is dropped) and the new state.
        """
        if BOOK_PATTERN.match(line):
            logger.debug("Detected book: %s", line)
            return BookStart(title=line), ParserState.IN_BOOK

        if CHAPTER_PATTERN.match(line):
            logger.debug("Detected chapter: %s", line)
            return ChapterStart(title=line), ParserState.IN_CHAPTER

        verse_match = VERSE_PATTERN.match(line)
        if verse_match:
            return (
                Verse(key=verse_match.group(1), text=verse_match.group(2)),
                ParserState.IN_VERSE,
            )

        note_match = NOTE_PATTERN.match(line)
        if note_match and NOTE_MARKER_PATTERN.match(line):
            return (
                Note(key=note_match.group(1), text=note_match.group(2)),
                ParserState.IN_NOTE,
            )

        image_match = IMAGE_PATTERN.match(line)
        if image_match:
            logger.debug("Detected image: i%s - %s", image_match.group(1), image_match.group(2))
            image = ImageRef(
                key=image_key_for(image_match.group(1)), caption=image_match.group(2)
            )
            return image, state

        return self._continuation(line, state), state

    def _continuation(self, line: str, state: ParserState) -> Event | None:
        """Attach an unmatched line to the open verse or note, if any."""
        if not state.accepts_continuation:
            logger.debug("Dropping unmatched line in state %s: %s", state.name, line)
            return None
        if state is ParserState.IN_VERSE:
            return Verse(key=None, text=line)
        return Note(key=None, text=line)
