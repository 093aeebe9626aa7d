"""Per-entity repositories over a shared SQLite connection.

Repositories only create, read and update. They never commit: the caller
owns the transaction boundary, typically one transaction per page.
"""

import sqlite3
from datetime import datetime

from oahspe.models.book import Book
from oahspe.models.chapter import Chapter
from oahspe.models.image import Image
from oahspe.models.verse import Note, Verse


class _SqliteRepository:
    """Shared connection handling for the entity repositories."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _child_ids(self, sql: str, parent_id: int) -> list[int]:
        """Run a single-column id query for one parent.

        Args:
            sql: SELECT returning child ids, with one ``?`` for the parent id.
            parent_id: Id of the parent row.

        Returns:
            Child ids in the order the query yields them.
        """
        return [row[0] for row in self._conn.execute(sql, (parent_id,)).fetchall()]

    @staticmethod
    def _touch(entity: Book | Chapter | Verse | Note | Image) -> str:
        """Stamp updated_at on the entity and return it as an ISO string."""
        entity.updated_at = datetime.now()
        return entity.updated_at.isoformat()


class BookRepository(_SqliteRepository):
    def save(self, book: Book) -> Book:
        """Insert a new book or update an existing one.

        Args:
            book: The book to persist. Its id is set on insert.

        Returns:
            The same Book instance, now carrying its id.
        """
        updated_at = self._touch(book)
        if book.id is None:
            cursor = self._conn.execute(
                "INSERT INTO books (title, description, page_number, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (book.title, book.description, book.page_number,
                 book.created_at.isoformat(), updated_at),
            )
            book.id = cursor.lastrowid
        else:
            self._conn.execute(
                "UPDATE books SET title = ?, description = ?, updated_at = ? WHERE id = ?",
                (book.title, book.description, updated_at, book.id),
            )
        return book

    def find_by_id(self, book_id: int) -> Book | None:
        """Load a book with its chapter ids in creation order.

        Args:
            book_id: The book's database ID.

        Returns:
            The Book, or None if no such row exists.
        """
        row = self._conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
        if row is None:
            return None
        chapter_ids = self._child_ids(
            "SELECT id FROM chapters WHERE book_id = ? ORDER BY id", book_id
        )
        return Book(**dict(row), chapter_ids=chapter_ids)


class ChapterRepository(_SqliteRepository):
    def save(self, chapter: Chapter) -> Chapter:
        """Insert a new chapter or update the title and description of an existing one.

        Args:
            chapter: The chapter to persist. Its id is set on insert.

        Returns:
            The same Chapter instance, now carrying its id.
        """
        updated_at = self._touch(chapter)
        if chapter.id is None:
            cursor = self._conn.execute(
                "INSERT INTO chapters "
                "(title, description, page_number, book_id, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (chapter.title, chapter.description, chapter.page_number,
                 chapter.book_id, chapter.created_at.isoformat(), updated_at),
            )
            chapter.id = cursor.lastrowid
        else:
            # book_id is fixed at creation
            self._conn.execute(
                "UPDATE chapters SET title = ?, description = ?, updated_at = ? WHERE id = ?",
                (chapter.title, chapter.description, updated_at, chapter.id),
            )
        return chapter

    def find_by_id(self, chapter_id: int) -> Chapter | None:
        """Load a chapter with its verse ids in creation order.

        Args:
            chapter_id: The chapter's database ID.

        Returns:
            The Chapter, or None if no such row exists.
        """
        row = self._conn.execute(
            "SELECT * FROM chapters WHERE id = ?", (chapter_id,)
        ).fetchone()
        if row is None:
            return None
        verse_ids = self._child_ids(
            "SELECT id FROM verses WHERE chapter_id = ? ORDER BY id", chapter_id
        )
        return Chapter(**dict(row), verse_ids=verse_ids)


class VerseRepository(_SqliteRepository):
    def save(self, verse: Verse) -> Verse:
        """Insert a new verse or update the text of an existing one.

        Args:
            verse: The verse to persist. Its id is set on insert.

        Returns:
            The same Verse instance, now carrying its id.
        """
        updated_at = self._touch(verse)
        if verse.id is None:
            cursor = self._conn.execute(
                "INSERT INTO verses "
                "(verse_key, text, page_number, chapter_id, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (verse.verse_key, verse.text, verse.page_number, verse.chapter_id,
                 verse.created_at.isoformat(), updated_at),
            )
            verse.id = cursor.lastrowid
        else:
            # chapter_id is fixed at creation
            self._conn.execute(
                "UPDATE verses SET text = ?, updated_at = ? WHERE id = ?",
                (verse.text, updated_at, verse.id),
            )
        return verse

    def find_by_id(self, verse_id: int) -> Verse | None:
        """Load a verse with its note ids in creation order.

        Args:
            verse_id: The verse's database ID.

        Returns:
            The Verse, or None if no such row exists.
        """
        row = self._conn.execute("SELECT * FROM verses WHERE id = ?", (verse_id,)).fetchone()
        if row is None:
            return None
        note_ids = self._child_ids(
            "SELECT id FROM notes WHERE verse_id = ? ORDER BY id", verse_id
        )
        return Verse(**dict(row), note_ids=note_ids)


class NoteRepository(_SqliteRepository):
    """Notes own the note-image association; saving a note writes its links."""

    def save(self, note: Note) -> Note:
        """Insert or update a note and record its image links.

        Links already stored are kept; ids missing from ``image_ids`` are
        not removed.

        Args:
            note: The note to persist. Its id is set on insert.

        Returns:
            The same Note instance, now carrying its id.
        """
        updated_at = self._touch(note)
        if note.id is None:
            cursor = self._conn.execute(
                "INSERT INTO notes "
                "(note_key, text, page_number, verse_id, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (note.note_key, note.text, note.page_number, note.verse_id,
                 note.created_at.isoformat(), updated_at),
            )
            note.id = cursor.lastrowid
        else:
            self._conn.execute(
                "UPDATE notes SET text = ?, updated_at = ? WHERE id = ?",
                (note.text, updated_at, note.id),
            )
        self._conn.executemany(
            "INSERT OR IGNORE INTO note_images (note_id, image_id) VALUES (?, ?)",
            [(note.id, image_id) for image_id in note.image_ids],
        )
        return note

    def find_by_id(self, note_id: int) -> Note | None:
        """Load a note with the ids of its linked images.

        Args:
            note_id: The note's database ID.

        Returns:
            The Note, or None if no such row exists.
        """
        row = self._conn.execute("SELECT * FROM notes WHERE id = ?", (note_id,)).fetchone()
        if row is None:
            return None
        image_ids = self._child_ids(
            "SELECT image_id FROM note_images WHERE note_id = ? ORDER BY image_id", note_id
        )
        return Note(**dict(row), image_ids=image_ids)


class ImageRepository(_SqliteRepository):
    def save(self, image: Image) -> Image:
        """Insert a new image or update an existing one.

        Note links are written by ``NoteRepository.save``, not here.

        Args:
            image: The image to persist. Its id is set on insert.

        Returns:
            The same Image instance, now carrying its id.
        """
        updated_at = self._touch(image)
        if image.id is None:
            cursor = self._conn.execute(
                "INSERT INTO images "
                "(image_key, title, description, source_page, content_type, data, "
                "created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (image.image_key, image.title, image.description, image.source_page,
                 image.content_type, image.data, image.created_at.isoformat(), updated_at),
            )
            image.id = cursor.lastrowid
        else:
            self._conn.execute(
                "UPDATE images SET title = ?, description = ?, content_type = ?, data = ?, "
                "updated_at = ? WHERE id = ?",
                (image.title, image.description, image.content_type, image.data,
                 updated_at, image.id),
            )
        return image

    def find_by_id(self, image_id: int) -> Image | None:
        """Load an image by database ID.

        Args:
            image_id: The image's database ID.

        Returns:
            The Image with its linked note ids, or None if not found.
        """
        row = self._conn.execute("SELECT * FROM images WHERE id = ?", (image_id,)).fetchone()
        return self._to_image(row)

    def find_by_image_key(self, image_key: str) -> Image | None:
        """Look up an image by its unique key.

        Args:
            image_key: Key such as ``IMG003``.

        Returns:
            The Image with its linked note ids, or None if not found.
        """
        row = self._conn.execute(
            "SELECT * FROM images WHERE image_key = ?", (image_key,)
        ).fetchone()
        return self._to_image(row)

    def _to_image(self, row: sqlite3.Row | None) -> Image | None:
        """Map an images row to an Image, loading its note ids."""
        if row is None:
            return None
        note_ids = self._child_ids(
            "SELECT note_id FROM note_images WHERE image_id = ? ORDER BY note_id", row["id"]
        )
        return Image(**dict(row), note_ids=note_ids)


class Repositories:
    """The five entity repositories bound to one connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.connection = conn
        self.books = BookRepository(conn)
        self.chapters = ChapterRepository(conn)
        self.verses = VerseRepository(conn)
        self.notes = NoteRepository(conn)
        self.images = ImageRepository(conn)
