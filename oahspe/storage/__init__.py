"""Persistent entity store backed by SQLite."""

from oahspe.storage.database import get_connection, initialize_database
from oahspe.storage.repositories import (
    BookRepository,
    ChapterRepository,
    ImageRepository,
    NoteRepository,
    Repositories,
    VerseRepository,
)

__all__ = [
    "BookRepository",
    "ChapterRepository",
    "ImageRepository",
    "NoteRepository",
    "Repositories",
    "VerseRepository",
    "get_connection",
    "initialize_database",
]
