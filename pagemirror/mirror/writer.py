import logging
from pathlib import Path

from pagemirror.cache.base import PageCacheStore
from pagemirror.cache.schemas import PageWrite
from pagemirror.common.current_datetime import get_current_datetime, to_epoch_ms
from pagemirror.connectors.schemas import Page
from pagemirror.mirror.frontmatter import compose_mirror_file
from pagemirror.mirror.schemas import PageOutcome

logger = logging.getLogger(__name__)


class DualSinkWriter:
    """Persists extracted pages to the mirror directory, then the page cache.

    The two writes share no transaction. A failed cache upsert leaves the
    mirror file newer than its cache record; the next run sees the record
    as stale and extracts the page again.
    """

    def __init__(
        self,
        *,
        output_dir: Path,
        cache_store: PageCacheStore,
        min_content_length: int = 10,
    ):
        self.output_dir = output_dir
        self.cache_store = cache_store
        self.min_content_length = min_content_length

    def write(
        self,
        *,
        doc_id: str,
        doc_name: str,
        page: Page,
        parent_name: str | None,
        content: str,
        target_path: Path,
        existed: bool,
    ) -> PageOutcome:
        trimmed = content.strip()
        if not trimmed:
            return PageOutcome.SKIPPED_EMPTY
        if len(trimmed) < self.min_content_length:
            return PageOutcome.SKIPPED_TOO_SHORT

        extracted_at = get_current_datetime()
        target_path.write_text(
            compose_mirror_file(
                page=page,
                doc_id=doc_id,
                doc_name=doc_name,
                content=content,
                parent_name=parent_name,
                extracted_at=extracted_at,
            ),
            encoding="utf-8",
        )

        self.cache_store.store_page(
            PageWrite(
                doc_id=doc_id,
                page_id=page.id,
                doc_name=doc_name,
                page_name=page.name,
                url=page.browser_link,
                content=content,
                content_type=page.content_type,
                created_at=page.created_at.isoformat(),
                updated_at=page.updated_at.isoformat(),
                file_name=target_path.name,
            ),
            extracted_at=to_epoch_ms(extracted_at),
        )

        return PageOutcome.UPDATED if existed else PageOutcome.CREATED
