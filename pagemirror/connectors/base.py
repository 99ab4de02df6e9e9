from abc import ABC, abstractmethod

from pagemirror.connectors.schemas import Page


class PageSource(ABC):
    """Read-only view of a remote hierarchical document"""

    @abstractmethod
    async def get_doc_name(self, doc_id: str) -> str:
        pass

    @abstractmethod
    async def list_pages(self, doc_id: str) -> list[Page]:
        pass

    @abstractmethod
    async def get_page_content(self, doc_id: str, page_id: str) -> str:
        """Return the page as markdown; may be empty for container pages."""
        pass
