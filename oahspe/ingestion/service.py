"""Folds parser events into the persistent Book/Chapter/Verse/Note/Image graph."""

import logging
from collections.abc import Iterable
from typing import assert_never

from pydantic import BaseModel

from oahspe.config import IngestionConfig
from oahspe.ingestion import events
from oahspe.ingestion.linker import ImageNoteLinker
from oahspe.models import Book, Chapter, Image, Note, Verse
from oahspe.storage.repositories import (
    BookRepository,
    ChapterRepository,
    ImageRepository,
    NoteRepository,
    Repositories,
    VerseRepository,
)

logger = logging.getLogger(__name__)


class IngestionSession(BaseModel):
    """Single-slot context pointers for one ingestion session.

    Each pointer is a storage id. A new book or chapter replaces the slot
    and clears everything beneath it; there is no stack.
    """

    book_id: int | None = None
    chapter_id: int | None = None
    verse_id: int | None = None
    note_id: int | None = None
    introduction_chapter_created: bool = False
    introduction_book_id: int | None = None
    introduction_chapter_id: int | None = None
    page_number: int = 0

    def clear_below_book(self) -> None:
        """Close the chapter, verse and note when a new book opens."""
        self.chapter_id = None
        self.verse_id = None
        self.note_id = None

    def clear_below_chapter(self) -> None:
        """Close the verse and note when a new chapter opens."""
        self.verse_id = None
        self.note_id = None

    def forget_introduction(self) -> None:
        """Mark the synthetic introduction pair as not yet created."""
        self.introduction_chapter_created = False
        self.introduction_book_id = None
        self.introduction_chapter_id = None


class IngestionService:
    """Event-driven builder of the entity hierarchy.

    Every entity is saved as soon as it is created so that the next event,
    on this page or a later one, can reference it by id. The service never
    commits or rolls back; run each page inside one caller-owned
    transaction. Because a failed page may have rolled back entities the
    session still points at, every call to ``ingest_events`` first
    re-resolves the context from the store.

    Call ``finish_ingestion`` between documents, otherwise the next
    document inherits this one's book and chapter.

    Args:
        books: Book repository.
        chapters: Chapter repository.
        verses: Verse repository.
        notes: Note repository.
        images: Image repository.
        linker: Links images to the active note.
        config: Titles for the synthetic introduction book and chapter.
    """

    def __init__(
        self,
        books: BookRepository,
        chapters: ChapterRepository,
        verses: VerseRepository,
        notes: NoteRepository,
        images: ImageRepository,
        linker: ImageNoteLinker,
        config: IngestionConfig | None = None,
    ) -> None:
        self._books = books
        self._chapters = chapters
        self._verses = verses
        self._notes = notes
        self._images = images
        self._linker = linker
        self._config = config or IngestionConfig()
        self._session = IngestionSession()

    @classmethod
    def from_repositories(
        cls, repositories: Repositories, config: IngestionConfig | None = None
    ) -> "IngestionService":
        """Build a service and its linker over one set of repositories."""
        linker = ImageNoteLinker(repositories.images, repositories.notes)
        return cls(
            books=repositories.books,
            chapters=repositories.chapters,
            verses=repositories.verses,
            notes=repositories.notes,
            images=repositories.images,
            linker=linker,
            config=config,
        )

    @property
    def session(self) -> IngestionSession:
        """A copy of the current context pointers."""
        return self._session.model_copy()

    @property
    def introduction_chapter_created(self) -> bool:
        """Whether orphaned content has already produced the introduction pair."""
        return self._session.introduction_chapter_created

    def ingest_events(self, page_events: Iterable[events.Event], page_number: int) -> None:
        """Fold one page's events into the store.

        Args:
            page_events: Events from ``OahspeParser.parse`` for this page.
            page_number: Source page recorded on every entity created.

        Raises:
            sqlite3.Error: Propagated unchanged from the store.
        """
        self._session.page_number = page_number
        self._recover_context()

        for event in page_events:
            self._dispatch(event)

    def save_current_book(self) -> None:
        """Re-persist the current book without touching the context."""
        if self._session.book_id is None:
            return
        book = self._books.find_by_id(self._session.book_id)
        if book is not None:
            self._books.save(book)

    def finish_ingestion(self) -> None:
        """Flush the current book and reset every context pointer."""
        self.save_current_book()
        logger.debug("Finishing ingestion session at page %s", self._session.page_number)
        self._session = IngestionSession()

    def _dispatch(self, event: events.Event) -> None:
        """Route one event to its handler."""
        match event:
            case events.BookStart():
                self._handle_book_start(event)
            case events.ChapterStart():
                self._handle_chapter_start(event)
            case events.Verse():
                self._handle_verse(event)
            case events.Note():
                self._handle_note(event)
            case events.ImageRef():
                self._handle_image_ref(event)
            case events.PageBreak():
                logger.debug("Page %s start", event.page_number)
            case _:
                assert_never(event)

    def _recover_context(self) -> None:
        """Re-resolve the context pointers against the store.

        A chapter that no longer belongs to the current book is dropped,
        except the synthetic preface chapter, which orphan verses use
        while another book is still current. When a book has chapters but
        no chapter pointer survives, its most recently created chapter is
        adopted. That guess can attach content to the wrong chapter if a
        rollback lost the pointer mid-book.
        """
        session = self._session

        if (
            session.introduction_chapter_id is not None
            and self._chapters.find_by_id(session.introduction_chapter_id) is None
        ):
            logger.info("Introduction chapter was rolled back; it will be recreated")
            session.forget_introduction()

        book = None
        if session.book_id is not None:
            book = self._books.find_by_id(session.book_id)
            if book is None:
                logger.info("Book %s is no longer persisted; clearing context", session.book_id)
                session.book_id = None
                session.clear_below_book()

        if session.chapter_id is not None:
            chapter = self._chapters.find_by_id(session.chapter_id)
            if chapter is None:
                logger.info("Chapter %s is no longer persisted", session.chapter_id)
                session.chapter_id = None
            elif (
                book is not None
                and chapter.book_id != book.id
                and chapter.id != session.introduction_chapter_id
            ):
                logger.info(
                    "Chapter %s does not belong to book %s; dropping it",
                    chapter.id,
                    book.id,
                )
                session.chapter_id = None

        if session.chapter_id is None and book is not None and book.chapter_ids:
            session.chapter_id = book.chapter_ids[-1]
            logger.info(
                "Adopting last chapter %s of book %s as current", session.chapter_id, book.id
            )

        if session.verse_id is not None:
            verse = self._verses.find_by_id(session.verse_id)
            if verse is None or verse.chapter_id != session.chapter_id:
                session.verse_id = None

        if session.note_id is not None:
            note = self._notes.find_by_id(session.note_id)
            if note is None or (note.verse_id is not None and note.verse_id != session.verse_id):
                session.note_id = None

    def _handle_book_start(self, event: events.BookStart) -> None:
        """Open a new book and close everything beneath the old one."""
        book = self._books.save(
            Book(title=event.title, page_number=self._session.page_number)
        )
        self._session.book_id = book.id
        self._session.clear_below_book()
        logger.debug("Starting book: %s", event.title)

    def _handle_chapter_start(self, event: events.ChapterStart) -> None:
        """Open a chapter under the current book, or with no book if none is open."""
        if self._session.book_id is None:
            logger.debug("Chapter %s has no enclosing book", event.title)
        chapter = self._chapters.save(
            Chapter(
                title=event.title,
                page_number=self._session.page_number,
                book_id=self._session.book_id,
            )
        )
        self._session.chapter_id = chapter.id
        self._session.clear_below_chapter()

    def _handle_verse(self, event: events.Verse) -> None:
        """Create a keyed verse, or append an unkeyed one to the open verse.

        A keyed verse with no open chapter goes to the synthetic preface chapter.

        Args:
            event: The verse event.
        """
        if event.key is None:
            self._append_to_verse(event.text)
            return

        chapter_id = self._session.chapter_id
        if chapter_id is None:
            chapter_id = self._introduction_chapter_id()

        verse = self._verses.save(
            Verse(
                verse_key=event.key,
                text=event.text,
                page_number=self._session.page_number,
                chapter_id=chapter_id,
            )
        )
        self._session.verse_id = verse.id
        self._session.note_id = None

    def _append_to_verse(self, text: str) -> None:
        if self._session.verse_id is None:
            logger.debug("No open verse for continuation: %s", text)
            return
        verse = self._verses.find_by_id(self._session.verse_id)
        if verse is None:
            self._session.verse_id = None
            return
        verse.append_text(text)
        self._verses.save(verse)

    def _handle_note(self, event: events.Note) -> None:
        """Create a keyed note under the open verse, or extend the open note.

        A note with no open verse is stored without a verse.

        Args:
            event: The note event.
        """
        if event.key is None:
            self._append_to_note(event.text)
            return

        note = self._notes.save(
            Note(
                note_key=event.key,
                text=event.text,
                page_number=self._session.page_number,
                verse_id=self._session.verse_id,
            )
        )
        self._session.note_id = note.id

    def _append_to_note(self, text: str) -> None:
        if self._session.note_id is None:
            logger.debug("No open note for continuation: %s", text)
            return
        note = self._notes.find_by_id(self._session.note_id)
        if note is None:
            self._session.note_id = None
            return
        note.append_text(text)
        self._notes.save(note)

    def _handle_image_ref(self, event: events.ImageRef) -> None:
        """Find or create the image by key and link it to the open note, if any."""
        image = self._images.find_by_image_key(event.key)
        if image is None:
            image = self._images.save(
                Image(
                    image_key=event.key,
                    title=event.caption,
                    description=event.caption,
                    source_page=self._session.page_number,
                )
            )
        else:
            logger.debug("Image %s already exists; reusing it", event.key)

        if self._session.note_id is None:
            logger.debug("Image %s has no active note; leaving it unlinked", event.key)
            return
        note = self._notes.find_by_id(self._session.note_id)
        if note is not None:
            self._linker.link_image_to_note(note, image)

    def _introduction_chapter_id(self) -> int:
        """Return the synthetic preface chapter, creating it once per session."""
        session = self._session
        if not session.introduction_chapter_created:
            book = self._books.save(
                Book(
                    title=self._config.introduction_book_title,
                    description=self._config.introduction_book_description,
                    page_number=session.page_number,
                )
            )
            chapter = self._chapters.save(
                Chapter(
                    title=self._config.preface_chapter_title,
                    description=self._config.preface_chapter_description,
                    page_number=session.page_number,
                    book_id=book.id,
                )
            )
            session.introduction_book_id = book.id
            session.introduction_chapter_id = chapter.id
            session.introduction_chapter_created = True
            logger.info(
                "Created %s/%s for orphaned content on page %s",
                book.title,
                chapter.title,
                session.page_number,
            )

        if session.book_id is None:
            session.book_id = session.introduction_book_id
        session.chapter_id = session.introduction_chapter_id
        return session.introduction_chapter_id
