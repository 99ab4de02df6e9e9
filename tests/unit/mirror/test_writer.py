from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest
from pytest_mock import MockerFixture
from sqlalchemy.exc import OperationalError

from pagemirror.cache.base import PageCacheStore
from pagemirror.cache.sql.store import SqlPageCacheStore
from pagemirror.connectors.schemas import Page
from pagemirror.mirror.schemas import PageOutcome
from pagemirror.mirror.writer import DualSinkWriter

NOW = datetime(2024, 5, 1, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def writer(output_dir: Path, cache_store: SqlPageCacheStore) -> DualSinkWriter:
    output_dir.mkdir(parents=True, exist_ok=True)
    return DualSinkWriter(output_dir=output_dir, cache_store=cache_store)


@pytest.fixture(autouse=True)
def fixed_now(mocker: MockerFixture) -> None:
    mocker.patch("pagemirror.mirror.writer.get_current_datetime", return_value=NOW)


def write(writer: DualSinkWriter, page: Page, content: str, existed: bool = False):
    return writer.write(
        doc_id="doc-1",
        doc_name="Team Handbook",
        page=page,
        parent_name=None,
        content=content,
        target_path=writer.output_dir / f"{page.id}.md",
        existed=existed,
    )


def test_write_creates_file_and_record(
    writer: DualSinkWriter,
    cache_store: SqlPageCacheStore,
    make_page: Callable[..., Page],
) -> None:
    page = make_page("p1", "Overview")

    outcome = write(writer, page, "A long enough body of text.")

    assert outcome == PageOutcome.CREATED
    text = (writer.output_dir / "p1.md").read_text(encoding="utf-8")
    assert "page_id: p1\n" in text
    assert "extracted_at: 2024-05-01T09:30:00+00:00\n" in text
    assert text.endswith("# Overview\n\nA long enough body of text.\n")

    record = cache_store.get_page("doc-1", "p1")
    assert record is not None
    assert record.content == "A long enough body of text."
    assert record.content_length == len("A long enough body of text.")
    assert record.extracted_at == int(NOW.timestamp() * 1000)
    assert record.file_name == "p1.md"


def test_write_reports_update_for_existing_record(
    writer: DualSinkWriter, make_page: Callable[..., Page]
) -> None:
    page = make_page("p1", "Overview")
    assert write(writer, page, "First version body") == PageOutcome.CREATED
    assert write(writer, page, "Second version body", existed=True) == PageOutcome.UPDATED

    text = (writer.output_dir / "p1.md").read_text(encoding="utf-8")
    assert "Second version body" in text
    assert "First version body" not in text


@pytest.mark.parametrize(
    "content,outcome",
    [
        ("", PageOutcome.SKIPPED_EMPTY),
        ("   \n\t ", PageOutcome.SKIPPED_EMPTY),
        ("  short  ", PageOutcome.SKIPPED_TOO_SHORT),
        ("123456789", PageOutcome.SKIPPED_TOO_SHORT),
    ],
)
def test_write_skips_insufficient_content(
    writer: DualSinkWriter,
    cache_store: SqlPageCacheStore,
    make_page: Callable[..., Page],
    content: str,
    outcome: PageOutcome,
) -> None:
    page = make_page("p1", "Overview")

    assert write(writer, page, content) == outcome
    assert not (writer.output_dir / "p1.md").exists()
    assert cache_store.get_page("doc-1", "p1") is None


def test_write_accepts_minimum_length(
    writer: DualSinkWriter, make_page: Callable[..., Page]
) -> None:
    assert write(writer, make_page("p1", "Overview"), " 1234567890 ") == PageOutcome.CREATED


def test_write_leaves_mirror_file_when_cache_fails(
    output_dir: Path, make_page: Callable[..., Page], mocker: MockerFixture
) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    failing_store = mocker.Mock(spec=PageCacheStore)
    failing_store.store_page.side_effect = OperationalError("INSERT", {}, Exception("locked"))
    writer = DualSinkWriter(output_dir=output_dir, cache_store=failing_store)

    with pytest.raises(OperationalError):
        write(writer, make_page("p1", "Overview"), "A long enough body of text.")

    assert (output_dir / "p1.md").exists()
