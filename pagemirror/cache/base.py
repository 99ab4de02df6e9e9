from abc import ABC, abstractmethod

from pagemirror.cache.schemas import CachedPageRecord, CacheStats, PageWrite


class PageCacheStore(ABC):
    @abstractmethod
    def get_page(self, doc_id: str, page_id: str) -> CachedPageRecord | None:
        pass

    @abstractmethod
    def store_page(self, page: PageWrite, extracted_at: int | None = None) -> str:
        """Insert or replace the record for (doc_id, page_id) and return its id."""
        pass

    @abstractmethod
    def get_page_by_url(self, url: str) -> CachedPageRecord | None:
        pass

    @abstractmethod
    def list_pages(self, doc_id: str | None = None) -> list[CachedPageRecord]:
        pass

    @abstractmethod
    def get_recent_pages(self, limit: int = 10) -> list[CachedPageRecord]:
        pass

    @abstractmethod
    def search_pages(self, query: str, limit: int = 20) -> list[CachedPageRecord]:
        pass

    @abstractmethod
    def get_stats(self) -> CacheStats:
        pass

    @abstractmethod
    def close(self) -> None:
        pass
