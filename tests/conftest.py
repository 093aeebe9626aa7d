"""Shared fixtures: a fresh SQLite store per test."""

import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from oahspe.ingestion.parser import OahspeParser
from oahspe.ingestion.service import IngestionService
from oahspe.storage import Repositories, get_connection, initialize_database


@pytest.fixture
def conn(tmp_path: Path) -> Iterator[sqlite3.Connection]:
    db_path = tmp_path / "oahspe.db"
    initialize_database(db_path)
    connection = get_connection(db_path)
    yield connection
    connection.close()


@pytest.fixture
def repos(conn: sqlite3.Connection) -> Repositories:
    return Repositories(conn)


@pytest.fixture
def service(repos: Repositories) -> IngestionService:
    return IngestionService.from_repositories(repos)


@pytest.fixture
def parser() -> OahspeParser:
    return OahspeParser()
