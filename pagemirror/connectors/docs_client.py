import asyncio
import gzip
import logging
from types import TracebackType
from typing import Any, Type
from aiohttp import ClientError, ClientSession

from pagemirror.connectors.base import PageSource
from pagemirror.connectors.exceptions import ConnectorException
from pagemirror.connectors.schemas import Page


logger = logging.getLogger(__name__)


class DocsApiClient(PageSource):
    def __init__(
        self,
        *,
        base_url: str,
        user_agent: str,
        api_token: str | None,
        list_pages_limit: int = 100,
        list_pages_max: int = 1000,
        list_pages_delay: float = 0.5,
        export_poll_interval: float = 2.0,
        export_max_polls: int = 30,
    ):
        if not api_token:
            raise ConnectorException(
                "DOCS_API_TOKEN is required to access the document API"
            )

        self.base_url = base_url.rstrip("/")
        self.session: ClientSession = ClientSession(
            headers={
                "Accept": "application/json",
                "User-Agent": user_agent,
                "Authorization": f"Bearer {api_token}",
            }
        )
        self.list_pages_limit = list_pages_limit
        self.list_pages_max = list_pages_max
        self.list_pages_delay = list_pages_delay
        self.export_poll_interval = export_poll_interval
        self.export_max_polls = export_max_polls

    async def __aenter__(self):
        return self

    async def __aexit__(
        self, exc_type: Type[Exception], exc: Exception, tb: TracebackType
    ):
        if self.session:
            await self.session.close()

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        max_attempts: int = 5,
        retry_backoff: float = 60,
    ) -> Any | None:
        retry_count = 0
        while retry_count < max_attempts:
            try:
                async with self.session.request(
                    method, url, params=params, json=json
                ) as response:
                    if response.status == 429:
                        if retry_count + 1 >= max_attempts:
                            logger.warning(f"Rate limit exceeded for {url}.")
                            break
                        retry_after = response.headers.get("Retry-After")
                        if retry_after:
                            wait_time = float(retry_after)
                        else:
                            # Exponential backoff
                            wait_time = retry_backoff * (2**retry_count)

                        logger.warning(
                            f"Rate limit exceeded. Waiting for {wait_time} seconds."
                        )
                        await asyncio.sleep(wait_time)
                        retry_count += 1
                        continue
                    elif response.status == 404:
                        raise ConnectorException(f"Resource not found at {url}")
                    elif response.status == 401:
                        raise ConnectorException(
                            f"DOCS_API_TOKEN is not authorized to access {url}"
                        )
                    response.raise_for_status()
                    return await response.json()
            except ConnectorException as e:
                raise e
            except ClientError:
                logger.exception("HTTP request failed")
                retry_count += 1
                if retry_count < max_attempts:
                    wait_time = retry_backoff * (2**retry_count)
                    logger.warning(f"Retrying in {wait_time} seconds...")
                    await asyncio.sleep(wait_time)
            except Exception:
                logger.exception("Unexpected error")
                raise ConnectorException(f"Unexpected error when fetching {url}")

        logger.error(f"Failed to make request to {url} after {max_attempts} attempts.")
        return None

    async def get_doc_name(self, doc_id: str) -> str:
        url = f"{self.base_url}/docs/{doc_id}"
        data = await self.request("GET", url)
        if not data:
            raise ConnectorException(f"Failed to fetch document {doc_id}")
        return data["name"]

    async def list_pages(self, doc_id: str) -> list[Page]:
        url = f"{self.base_url}/docs/{doc_id}/pages"
        pages: list[Page] = []
        next_page_token: str | None = None

        while True:
            params = {"limit": str(self.list_pages_limit)}
            if next_page_token:
                params["pageToken"] = next_page_token

            data = await self.request("GET", url, params=params)
            if not data:
                raise ConnectorException(f"Failed to list pages of document {doc_id}")

            pages.extend(Page.from_api(item) for item in data.get("items", []))
            next_page_token = data.get("nextPageToken")
            logger.debug(
                f"Listed {len(pages)} pages of document {doc_id} so far "
                f"(more: {'yes' if next_page_token else 'no'})"
            )

            if not next_page_token:
                break
            if len(pages) >= self.list_pages_max:
                logger.warning(
                    f"Reached safety limit of {self.list_pages_max} pages, "
                    "stopping pagination"
                )
                break

            await asyncio.sleep(self.list_pages_delay)

        logger.info(f"Found {len(pages)} pages in document {doc_id}")
        return pages

    async def get_page_content(self, doc_id: str, page_id: str) -> str:
        export_url = f"{self.base_url}/docs/{doc_id}/pages/{page_id}/export"
        # One attempt only: callers own the retry policy for page content
        data = await self.request(
            "POST", export_url, json={"outputFormat": "markdown"}, max_attempts=1
        )
        if not data or "href" not in data:
            raise ConnectorException(f"Export request failed for page {page_id}")

        status_url = data["href"]
        for attempt in range(1, self.export_max_polls + 1):
            await asyncio.sleep(self.export_poll_interval)

            status = await self.request("GET", status_url, max_attempts=1)
            if not status:
                logger.warning(
                    f"Export status check {attempt}/{self.export_max_polls} "
                    f"failed for page {page_id}"
                )
                continue

            if status.get("status") == "complete":
                return await self._download_export(status["downloadLink"])
            if status.get("status") == "failed":
                raise ConnectorException(
                    f"Export failed for page {page_id}: "
                    f"{status.get('error') or 'Unknown error'}"
                )

        raise ConnectorException(
            f"Export of page {page_id} timed out after {self.export_max_polls} polls"
        )

    async def _download_export(self, download_link: str) -> str:
        # The download link is pre-signed and must not carry the API token
        try:
            async with ClientSession() as download_session:
                async with download_session.get(download_link) as response:
                    response.raise_for_status()
                    payload = await response.read()
        except ClientError as e:
            raise ConnectorException(f"Download of export failed: {e}") from e
        return decode_export(payload)


def decode_export(payload: bytes) -> str:
    try:
        payload = gzip.decompress(payload)
    except (OSError, EOFError):
        pass  # Not compressed
    return payload.decode("utf-8", errors="replace")
