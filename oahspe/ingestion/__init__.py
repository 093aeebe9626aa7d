"""Page ingestion: parsing events and folding them into the entity graph."""

from oahspe.ingestion.events import (
    BookStart,
    ChapterStart,
    Event,
    ImageRef,
    Note,
    PageBreak,
    Verse,
)
from oahspe.ingestion.linker import ImageNoteLinker
from oahspe.ingestion.loader import Page, PageLoader
from oahspe.ingestion.parser import OahspeParser, ParsedPage
from oahspe.ingestion.runner import PageIngestionRunner
from oahspe.ingestion.service import IngestionService, IngestionSession
from oahspe.ingestion.state import ParserState

__all__ = [
    "BookStart",
    "ChapterStart",
    "Event",
    "ImageNoteLinker",
    "ImageRef",
    "IngestionService",
    "IngestionSession",
    "Note",
    "OahspeParser",
    "Page",
    "PageBreak",
    "PageIngestionRunner",
    "PageLoader",
    "ParsedPage",
    "ParserState",
    "Verse",
]
