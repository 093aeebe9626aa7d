"""Ingestion run report models."""

from datetime import datetime

from pydantic import BaseModel, Field


class PageError(BaseModel):
    """A page that failed to ingest and was rolled back."""

    page_number: int
    message: str


class IngestionReport(BaseModel):
    """Summary of a multi-page ingestion run.

    Page failures are recorded here rather than aborting the run, so a
    single malformed page never stops the remaining pages.
    """

    source: str = ""
    total_pages: int = 0
    pages_processed: int = 0
    total_events_processed: int = 0
    page_errors: list[PageError] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def is_successful(self) -> bool:
        return not self.page_errors

    @property
    def failed_pages(self) -> list[int]:
        return [error.page_number for error in self.page_errors]

    @property
    def elapsed_ms(self) -> int:
        end = self.finished_at or datetime.now()
        return int((end - self.started_at).total_seconds() * 1000)

    def add_page_error(self, page_number: int, message: str) -> None:
        self.page_errors.append(PageError(page_number=page_number, message=message))
