"""Data models for the Oahspe ingestion engine."""

from oahspe.models.book import Book
from oahspe.models.chapter import Chapter
from oahspe.models.image import Image, image_key_for
from oahspe.models.report import IngestionReport, PageError
from oahspe.models.verse import Note, Verse

__all__ = [
    "Book",
    "Chapter",
    "Image",
    "IngestionReport",
    "Note",
    "PageError",
    "Verse",
    "image_key_for",
]
