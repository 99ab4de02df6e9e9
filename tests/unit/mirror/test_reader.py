from datetime import datetime, timedelta, timezone
import os
from pathlib import Path
from typing import Callable

import pytest

from pagemirror.connectors.schemas import Page
from pagemirror.mirror.frontmatter import compose_mirror_file
from pagemirror.mirror.reader import MirrorReader

EXTRACTED_AT = datetime(2024, 5, 1, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def reader(output_dir: Path) -> MirrorReader:
    output_dir.mkdir(parents=True, exist_ok=True)
    return MirrorReader(output_dir)


def mirror(output_dir: Path, page: Page, content: str, parent_name: str | None = None) -> Path:
    path = output_dir / f"{page.id}.md"
    path.write_text(
        compose_mirror_file(
            page=page,
            doc_id="doc-1",
            doc_name="Team Handbook",
            content=content,
            parent_name=parent_name,
            extracted_at=EXTRACTED_AT,
        ),
        encoding="utf-8",
    )
    return path


def test_read_pages(
    reader: MirrorReader, output_dir: Path, make_page: Callable[..., Page]
) -> None:
    mirror(
        output_dir,
        make_page("p2", "Deploys", parent_id="p1"),
        "| a | b |\nShip it by running the release pipeline twice.",
        parent_name="Runbooks",
    )

    pages = reader.read_pages()

    assert len(pages) == 1
    page = pages[0]
    assert page.file_name == "p2.md"
    assert page.page_id == "p2"
    assert page.parent_page_id == "p1"
    assert page.parent_page_name == "Runbooks"
    assert page.is_subpage is True
    assert page.kind == "canvas"
    assert page.description == "Ship it by running the release pipeline twice."
    assert page.extracted_at == EXTRACTED_AT.isoformat()


def test_read_pages_skips_invalid_files(
    reader: MirrorReader,
    output_dir: Path,
    make_page: Callable[..., Page],
    caplog: pytest.LogCaptureFixture,
) -> None:
    mirror(output_dir, make_page("p1", "Overview"), "Body text that is long enough.")
    (output_dir / "plain.md").write_text("# No frontmatter\n", encoding="utf-8")
    (output_dir / "partial.md").write_text(
        "---\ntitle: Partial\npage_id: p9\n---\nbody\n", encoding="utf-8"
    )

    pages = reader.read_pages()

    assert [page.page_id for page in pages] == ["p1"]
    assert "No frontmatter found in plain.md" in caplog.text
    assert "Missing required field doc_id in partial.md" in caplog.text


def test_description_truncated(
    reader: MirrorReader, output_dir: Path, make_page: Callable[..., Page]
) -> None:
    mirror(output_dir, make_page("p1", "Overview"), "x" * 250)

    description = reader.read_pages()[0].description

    assert description == "x" * 200 + "..."


def test_read_changed_since(
    reader: MirrorReader, output_dir: Path, make_page: Callable[..., Page]
) -> None:
    old = mirror(output_dir, make_page("p1", "Old"), "Body text that is long enough.")
    mirror(output_dir, make_page("p2", "New"), "Body text that is long enough.")
    cutoff = datetime.now(timezone.utc) - timedelta(hours=1)
    old_time = (cutoff - timedelta(days=1)).timestamp()
    os.utime(old, (old_time, old_time))

    pages = reader.read_changed_since(cutoff)

    assert [page.page_id for page in pages] == ["p2"]
