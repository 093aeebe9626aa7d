"""Loads already-extracted page text from a plain text dump."""

import logging
from pathlib import Path

import chardet
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\f"


class Page(BaseModel):
    """The text lines of one source page."""

    page_number: int
    lines: list[str] = Field(default_factory=list)


class PageLoader:
    """Splits a text dump into pages.

    Pages are separated by form feeds, as written by common PDF-to-text
    tools. Page numbers start at 1 and follow file order.

    Args:
        separator: Page separator, form feed by default.
    """

    def __init__(self, separator: str = PAGE_SEPARATOR) -> None:
        if not separator:
            raise ValueError("separator must not be empty")
        self._separator = separator

    def load(self, file_path: str | Path) -> list[Page]:
        """Read a text dump into pages.

        Args:
            file_path: Path to the extracted text.

        Returns:
            One Page per separator-delimited block, including empty pages.

        Raises:
            FileNotFoundError: If file_path does not exist.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        text = self._read_text(path)
        pages = self.split_pages(text)
        logger.info("Loaded %d pages from %s", len(pages), path)
        return pages

    def split_pages(self, text: str) -> list[Page]:
        """Split already-decoded text into numbered pages."""
        if not text:
            return []
        blocks = text.split(self._separator)
        # A trailing separator does not open another page
        if blocks and not blocks[-1].strip():
            blocks = blocks[:-1]
        return [
            Page(page_number=number, lines=block.splitlines())
            for number, block in enumerate(blocks, start=1)
        ]

    def _read_text(self, file_path: Path) -> str:
        """Read a text file, detecting the encoding when it is not UTF-8.

        Args:
            file_path: Path to the text file.

        Returns:
            The file content as a string.
        """
        try:
            return file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            pass

        raw_bytes = file_path.read_bytes()
        detected = chardet.detect(raw_bytes)
        encoding = detected.get("encoding") or "utf-8"
        confidence = detected.get("confidence", 0)

        if confidence < 0.7:
            logger.warning(
                "Low confidence encoding detection for %s: %s (%.0f%%)",
                file_path,
                encoding,
                confidence * 100,
            )

        try:
            return raw_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            logger.error("Failed to decode file: %s", file_path)
            return raw_bytes.decode("utf-8", errors="replace")
