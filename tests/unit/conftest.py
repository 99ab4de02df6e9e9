from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Generator

import pytest

from pagemirror.cache.sql.store import SqlPageCacheStore
from pagemirror.connectors.schemas import Page

from tests.unit.fakes import FakePageSource


@pytest.fixture
def make_page() -> Callable[..., Page]:
    def _make_page(
        id: str,
        name: str,
        parent_id: str | None = None,
        parent_name: str | None = None,
        updated_at: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc),
    ) -> Page:
        return Page(
            id=id,
            name=name,
            parent_id=parent_id,
            parent_name=parent_name,
            content_type="canvas",
            created_at=datetime(2023, 12, 1, tzinfo=timezone.utc),
            updated_at=updated_at,
            browser_link=f"https://docs.example.com/d/doc-1/{id}",
        )

    return _make_page


@pytest.fixture
def page_source() -> FakePageSource:
    return FakePageSource()


@pytest.fixture
def cache_store(tmp_path: Path) -> Generator[SqlPageCacheStore, None, None]:
    store = SqlPageCacheStore(f"sqlite:///{tmp_path / 'cache' / 'pages.db'}")
    yield store
    store.close()


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "mirror"
