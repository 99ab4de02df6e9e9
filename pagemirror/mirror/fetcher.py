import asyncio
import logging

from pagemirror.connectors.base import PageSource

logger = logging.getLogger(__name__)


class RetryingContentFetcher:
    def __init__(
        self,
        *,
        page_source: PageSource,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
    ):
        self.page_source = page_source
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay

    async def fetch(self, doc_id: str, page_id: str) -> str:
        """Fetch page content, retrying failures after a fixed delay.

        The last failure is re-raised once all attempts are used up.
        """
        attempt = 1
        while True:
            try:
                return await self.page_source.get_page_content(doc_id, page_id)
            except Exception as e:
                if attempt >= self.max_attempts:
                    logger.error(
                        f"Failed to fetch page {page_id} after {attempt} attempts: {e}"
                    )
                    raise
                logger.warning(
                    f"Attempt {attempt}/{self.max_attempts} to fetch page {page_id} "
                    f"failed: {e}. Retrying in {self.retry_delay} seconds..."
                )
                attempt += 1
                await asyncio.sleep(self.retry_delay)
