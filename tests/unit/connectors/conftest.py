from typing import AsyncGenerator

import pytest

from pagemirror.connectors.docs_client import DocsApiClient


@pytest.fixture
async def docs_client() -> AsyncGenerator[DocsApiClient, None]:
    async with DocsApiClient(
        base_url="https://docs.example.com/apis/v1/",
        user_agent="test-agent",
        api_token="test-token",
        list_pages_limit=2,
        list_pages_delay=0,
        export_poll_interval=0,
        export_max_polls=3,
    ) as client:
        yield client
