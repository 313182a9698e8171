"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from reqsmith.models.draft import KeyValuePair, RequestDraft
from reqsmith.repositories.history import JsonHistoryRepository
from reqsmith.services.history import HistoryService


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def read_fixture(fixtures_dir: Path):
    """Read a snippet fixture by file name."""

    def _read(name: str) -> str:
        return (fixtures_dir / name).read_text(encoding="utf-8")

    return _read


@pytest.fixture
def history_file(tmp_path: Path) -> Path:
    """Return a history file path inside a temporary directory."""
    return tmp_path / "history.json"


@pytest.fixture
def history_repo(history_file: Path) -> JsonHistoryRepository:
    """Return a repository backed by a temporary file."""
    return JsonHistoryRepository(history_file)


@pytest.fixture
def history_service(history_repo: JsonHistoryRepository) -> HistoryService:
    """Return a history service with the default limits."""
    return HistoryService(history_repo)


@pytest.fixture
def unsaveable_history_service(
    history_repo: JsonHistoryRepository, mocker: MockerFixture
) -> HistoryService:
    """Return a history service whose repository cannot write its file."""
    mocker.patch.object(history_repo, "save", side_effect=PermissionError(13, "Permission denied"))
    return HistoryService(history_repo)


@pytest.fixture
def sample_draft() -> RequestDraft:
    """Return a POST draft with params, headers and a body."""
    return RequestDraft(
        method="POST",
        url="https://api.example.com/users",
        params=[KeyValuePair(key="verbose", value="1")],
        headers=[KeyValuePair(key="Content-Type", value="application/json")],
        body='{\n  "name": "a"\n}',
    )


@pytest.fixture
def clock():
    """Return a function producing strictly increasing UTC timestamps."""
    start = datetime(2024, 1, 1, tzinfo=UTC)
    ticks = iter(range(10_000))

    def _now() -> datetime:
        return start + timedelta(seconds=next(ticks))

    return _now
