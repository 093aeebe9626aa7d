"""Drives parse and ingest page by page, one transaction per page."""

import logging
import sqlite3
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from oahspe.ingestion.loader import Page, PageLoader
from oahspe.ingestion.parser import OahspeParser
from oahspe.ingestion.service import IngestionService
from oahspe.models.report import IngestionReport

logger = logging.getLogger(__name__)


class PageIngestionRunner:
    """Runs each page in its own transaction and records page failures.

    A failing page is rolled back and reported; the run continues with
    the next page, whose recovery step sees only committed state.

    Args:
        parser: Page parser.
        service: Ingestion service bound to repositories on ``conn``.
        conn: The connection whose transactions bound each page.
        loader: Page source for ``ingest_file``.
    """

    def __init__(
        self,
        parser: OahspeParser,
        service: IngestionService,
        conn: sqlite3.Connection,
        loader: PageLoader | None = None,
    ) -> None:
        self._parser = parser
        self._service = service
        self._conn = conn
        self._loader = loader or PageLoader()

    def ingest_file(self, file_path: str | Path) -> IngestionReport:
        """Load a page dump and ingest all of its pages."""
        pages = self._loader.load(file_path)
        return self.ingest_pages(pages, source=str(file_path))

    def ingest_pages(self, pages: Iterable[Page], source: str = "") -> IngestionReport:
        """Ingest pages in order and close the session at the end.

        Args:
            pages: Pages in document order.
            source: Label for the report, usually the file path.

        Returns:
            The run report with per-page errors.
        """
        page_list = list(pages)
        report = IngestionReport(source=source, total_pages=len(page_list))
        logger.info("Starting ingestion: %s (%d pages)", source or "<pages>", len(page_list))

        for page in page_list:
            try:
                event_count = self._ingest_page(page)
            except Exception as exc:
                logger.exception("Page %d processing failed", page.page_number)
                report.add_page_error(page.page_number, str(exc) or type(exc).__name__)
                continue
            report.pages_processed += 1
            report.total_events_processed += event_count

        with self._conn:
            self._service.finish_ingestion()

        report.finished_at = datetime.now()
        logger.info(
            "Ingestion complete: %s - Pages: %d, Events: %d, Errors: %d, Time: %dms",
            source or "<pages>",
            report.pages_processed,
            report.total_events_processed,
            len(report.page_errors),
            report.elapsed_ms,
        )
        return report

    def _ingest_page(self, page: Page) -> int:
        """Parse and ingest one page inside its own transaction.

        Args:
            page: The page to ingest.

        Returns:
            Number of events the page produced.
        """
        with self._conn:
            events = self._parser.parse(page.lines, page.page_number)
            self._service.ingest_events(events, page.page_number)
        logger.debug("Page %d processed: %d events", page.page_number, len(events))
        return len(events)
