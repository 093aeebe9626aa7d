"""Tests for the page parser."""

import logging

import pytest

from oahspe.ingestion.events import (
    BookStart,
    ChapterStart,
    ImageRef,
    Note,
    PageBreak,
    Verse,
)
from oahspe.ingestion.parser import OahspeParser
from oahspe.ingestion.state import ParserState

APOLLO_PAGE = [
    "Book of Apollo",
    "Chapter 7",
    "14/7.1 In the beginning...",
    "(1) This refers to creation",
    "i003 Divine throne",
    "14/7.2 And it was good",
]


class TestBookAndChapterLines:
    """Tests for book titles and chapter headers."""

    @pytest.mark.parametrize("title", ["Book of Apollo", "Book of Jehovih", "启示之书"])
    def test_detects_book_titles(self, parser: OahspeParser, title: str) -> None:
        events = parser.parse([title], 1)
        assert events == [PageBreak(page_number=1), BookStart(title=title)]

    @pytest.mark.parametrize("header", ["Chapter 1", "Chapter 42", "第七章"])
    def test_detects_chapter_headers(self, parser: OahspeParser, header: str) -> None:
        events = parser.parse([header], 1)
        assert events == [PageBreak(page_number=1), ChapterStart(title=header)]

    def test_chapter_with_trailing_text_is_not_a_header(self, parser: OahspeParser) -> None:
        assert parser.parse(["Chapter 7 continued"], 1) == [PageBreak(page_number=1)]


class TestVerseLines:
    def test_standard_verse(self, parser: OahspeParser) -> None:
        events = parser.parse(["14/7.1 In the beginning..."], 1)
        assert events[1] == Verse(key="14/7.1", text="In the beginning...")

    def test_internal_spaces_preserved(self, parser: OahspeParser) -> None:
        events = parser.parse(["14/7.1   Multiple   spaces   inside"], 1)
        assert events[1] == Verse(key="14/7.1", text="Multiple   spaces   inside")

    def test_missing_verse_number_does_not_match(self, parser: OahspeParser) -> None:
        assert parser.parse(["14/7 wrong format"], 1) == [PageBreak(page_number=1)]


class TestNoteLines:
    @pytest.mark.parametrize(
        ("line", "key", "text"),
        [
            ("(1) This refers to...", "1", "This refers to..."),
            ("1) Also valid format", "1", "Also valid format"),
            ("(42) Multi-digit note", "42", "Multi-digit note"),
            ("42) Suffix form", "42", "Suffix form"),
        ],
    )
    def test_detects_note_markers(
        self, parser: OahspeParser, line: str, key: str, text: str
    ) -> None:
        events = parser.parse([line], 1)
        assert events[1] == Note(key=key, text=text)

    def test_bare_number_is_not_a_note(self, parser: OahspeParser) -> None:
        # Matches the loose note capture but has no parenthesis marker
        events = parser.parse(["14/7.1 Verse", "12 and the hosts"], 1)
        assert events[2] == Verse(key=None, text="12 and the hosts")


class TestImageLines:
    def test_three_digit_image(self, parser: OahspeParser) -> None:
        events = parser.parse(["i002 x"], 1)
        assert events[1] == ImageRef(key="IMG002", caption="x")

    @pytest.mark.parametrize("line", ["i02 only two digits", "i9999 too many digits"])
    def test_wrong_digit_count_never_matches(self, parser: OahspeParser, line: str) -> None:
        events = parser.parse([line], 1)
        assert not any(isinstance(event, ImageRef) for event in events)
        assert events == [PageBreak(page_number=1)]

    def test_image_keeps_note_state(self, parser: OahspeParser) -> None:
        page = parser.parse_page(["(1) note", "i045 The divine plate", "more note"], 1)
        assert page.events[2] == ImageRef(key="IMG045", caption="The divine plate")
        assert page.events[3] == Note(key=None, text="more note")
        assert page.final_state is ParserState.IN_NOTE


class TestContinuationLines:
    def test_verse_continuation(self, parser: OahspeParser) -> None:
        events = parser.parse(["14/7.1 Hear me", "and the Lords answered..."], 1)
        assert events[1:] == [
            Verse(key="14/7.1", text="Hear me"),
            Verse(key=None, text="and the Lords answered..."),
        ]

    def test_note_continuation(self, parser: OahspeParser) -> None:
        events = parser.parse(["(1) First line", "second line", "third line"], 1)
        assert events[1:] == [
            Note(key="1", text="First line"),
            Note(key=None, text="second line"),
            Note(key=None, text="third line"),
        ]

    def test_unmatched_line_outside_context_is_dropped(
        self, parser: OahspeParser, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="oahspe.ingestion.parser"):
            events = parser.parse(["This is random text that matches nothing"], 1)
        assert events == [PageBreak(page_number=1)]
        assert "Dropping unmatched line" in caplog.text

    def test_unmatched_line_after_chapter_is_dropped(self, parser: OahspeParser) -> None:
        events = parser.parse(["Book of Apollo", "Chapter 7", "stray header text"], 1)
        assert len(events) == 3


class TestParserState:
    """Tests for state transitions and per-call reset."""

    @pytest.mark.parametrize(
        ("lines", "expected"),
        [
            ([], ParserState.OUTSIDE_BOOK),
            (["Book of Apollo"], ParserState.IN_BOOK),
            (["Book of Apollo", "Chapter 7"], ParserState.IN_CHAPTER),
            (["14/7.1 Verse"], ParserState.IN_VERSE),
            (["14/7.1 Verse", "(1) Note"], ParserState.IN_NOTE),
            (["(1) Note", "14/7.2 Verse"], ParserState.IN_VERSE),
        ],
    )
    def test_final_state(
        self, parser: OahspeParser, lines: list[str], expected: ParserState
    ) -> None:
        assert parser.parse_page(lines, 1).final_state is expected

    def test_state_resets_between_calls(self, parser: OahspeParser) -> None:
        first = parser.parse_page(["14/7.1 Verse"], 1)
        assert first.final_state is ParserState.IN_VERSE

        # The same line would be a continuation had state carried over
        second = parser.parse(["and it was good"], 2)
        assert second == [PageBreak(page_number=2)]

    def test_accepts_continuation(self) -> None:
        assert ParserState.IN_VERSE.accepts_continuation
        assert ParserState.IN_NOTE.accepts_continuation
        assert not ParserState.IN_CHAPTER.accepts_continuation


class TestParserEdgeCases:
    def test_none_lines_rejected(self, parser: OahspeParser) -> None:
        with pytest.raises(ValueError, match="lines cannot be None"):
            parser.parse(None, 1)

    def test_empty_input_emits_only_page_break(self, parser: OahspeParser) -> None:
        assert parser.parse([], 5) == [PageBreak(page_number=5)]

    def test_whitespace_lines_skipped(self, parser: OahspeParser) -> None:
        assert parser.parse(["   ", "\t\t", "  \t  "], 1) == [PageBreak(page_number=1)]

    def test_lines_are_trimmed(self, parser: OahspeParser) -> None:
        events = parser.parse(["  Book of Apollo  "], 1)
        assert events[1] == BookStart(title="Book of Apollo")

    def test_deterministic(self, parser: OahspeParser) -> None:
        assert parser.parse(APOLLO_PAGE, 1) == parser.parse(APOLLO_PAGE, 1)

    def test_full_page(self, parser: OahspeParser) -> None:
        events = parser.parse(APOLLO_PAGE, 1)
        assert [type(event) for event in events] == [
            PageBreak,
            BookStart,
            ChapterStart,
            Verse,
            Note,
            ImageRef,
            Verse,
        ]
        assert events[0] == PageBreak(page_number=1)

    def test_parsed_page_serializes_events(self, parser: OahspeParser) -> None:
        page = parser.parse_page(APOLLO_PAGE, 3)
        data = page.model_dump()
        assert data["page_number"] == 3
        assert [event["kind"] for event in data["events"]][:3] == [
            "page_break",
            "book_start",
            "chapter_start",
        ]
