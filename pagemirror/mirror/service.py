import logging
from pathlib import Path

from pagemirror.cache.base import PageCacheStore
from pagemirror.config import Settings
from pagemirror.connectors.base import PageSource
from pagemirror.connectors.schemas import Page
from pagemirror.mirror.exceptions import MirrorDirectoryException
from pagemirror.mirror.fetcher import RetryingContentFetcher
from pagemirror.mirror.filter import filter_pages
from pagemirror.mirror.naming import mirror_file_name
from pagemirror.mirror.pacer import Pacer
from pagemirror.mirror.reconciler import RenameReconciler
from pagemirror.mirror.schemas import MirrorOptions, MirrorRunOutput, PageOutcome
from pagemirror.mirror.staleness import classify_page
from pagemirror.mirror.writer import DualSinkWriter

logger = logging.getLogger(__name__)


class DocumentMirrorService:
    """Runs one incremental mirroring pass over the pages of a document."""

    def __init__(
        self,
        *,
        page_source: PageSource,
        cache_store: PageCacheStore,
        settings: Settings,
        output_dir: Path | None = None,
    ):
        self.page_source = page_source
        self.cache_store = cache_store
        self.settings = settings
        self.output_dir = output_dir or Path(settings.MIRROR_OUTPUT_DIR)

        self.fetcher = RetryingContentFetcher(
            page_source=page_source,
            max_attempts=settings.FETCH_MAX_ATTEMPTS,
            retry_delay=settings.FETCH_RETRY_DELAY,
        )
        self.pacer = Pacer(settings.PAGE_FETCH_DELAY)
        self.reconciler = RenameReconciler(self.output_dir)

    async def mirror_document(
        self, doc_id: str, options: MirrorOptions | None = None
    ) -> MirrorRunOutput:
        """Main entry point for mirroring a document."""
        options = options or MirrorOptions()

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MirrorDirectoryException(
                f"Cannot create mirror directory {self.output_dir}: {e}"
            ) from e

        min_content_length = (
            options.min_content_length
            if options.min_content_length is not None
            else self.settings.MIN_CONTENT_LENGTH
        )
        writer = DualSinkWriter(
            output_dir=self.output_dir,
            cache_store=self.cache_store,
            min_content_length=min_content_length,
        )

        doc_name = await self.page_source.get_doc_name(doc_id)
        pages = await self.page_source.list_pages(doc_id)
        logger.info(f"Mirroring document {doc_name} ({doc_id}): {len(pages)} pages")

        eligible = filter_pages(
            pages,
            exclude_subpages=options.exclude_subpages,
            include_hidden=options.include_hidden,
        )
        candidates = eligible
        if options.limit is not None:
            candidates = eligible[: options.limit]

        output = MirrorRunOutput(
            doc_id=doc_id, doc_name=doc_name, output_dir=str(self.output_dir)
        )
        # Pages past the limit are left out of outcomes entirely.
        eligible_ids = {page.id for page in eligible}
        for page in pages:
            if page.id not in eligible_ids:
                output.outcomes[page.id] = PageOutcome.FILTERED_OUT

        pages_by_id = {page.id: page for page in pages}
        for index, page in enumerate(candidates):
            outcome = await self._mirror_page(
                doc_id=doc_id,
                doc_name=doc_name,
                page=page,
                parent_name=self._parent_name(page, pages_by_id),
                writer=writer,
                force=options.force,
            )
            output.record(page.id, outcome)
            logger.info(
                f"[{index + 1}/{len(candidates)}] {page.name} ({page.id}): {outcome.value}"
            )

            if index < len(candidates) - 1:
                await self.pacer.pause()

        logger.info(
            f"Mirrored document {doc_id}: {output.created} created, "
            f"{output.updated} updated, {output.skipped} skipped, "
            f"{output.errored} errored"
        )
        return output

    async def _mirror_page(
        self,
        *,
        doc_id: str,
        doc_name: str,
        page: Page,
        parent_name: str | None,
        writer: DualSinkWriter,
        force: bool,
    ) -> PageOutcome:
        try:
            cached = self.cache_store.get_page(doc_id, page.id)
            if not classify_page(page, cached, force).needs_extraction:
                return PageOutcome.SKIPPED_UP_TO_DATE

            target_path = self.output_dir / mirror_file_name(page, parent_name)
            if not force:
                self.reconciler.reconcile(
                    page.id,
                    target_path,
                    indexed_file_name=cached.file_name if cached else None,
                )

            content = await self.fetcher.fetch(doc_id, page.id)

            return writer.write(
                doc_id=doc_id,
                doc_name=doc_name,
                page=page,
                parent_name=parent_name,
                content=content,
                target_path=target_path,
                existed=cached is not None,
            )
        except Exception:
            logger.exception(f"Failed to mirror page {page.name} ({page.id})")
            return PageOutcome.ERRORED

    def _parent_name(self, page: Page, pages_by_id: dict[str, Page]) -> str | None:
        if page.parent_id is None:
            return None
        if page.parent_name:
            return page.parent_name
        parent = pages_by_id.get(page.parent_id)
        return parent.name if parent else None
