import time
from pathlib import Path
from typing import Any
from sqlalchemy import create_engine, func, or_
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from pagemirror.cache.base import PageCacheStore
from pagemirror.cache.schemas import CachedPageRecord, CacheStats, PageWrite
from pagemirror.cache.sql.model import Base, CachedPageModel


class SqlPageCacheStore(PageCacheStore):
    def __init__(self, database_url: str):
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
            db_path = Path(url.database).expanduser()
            db_path.parent.mkdir(parents=True, exist_ok=True)
            url = url.set(database=str(db_path))

        self.engine = create_engine(url)
        self.Session = sessionmaker(bind=self.engine)
        Base.metadata.create_all(self.engine)

    def _map_page(self, page: Any) -> CachedPageRecord:
        return CachedPageRecord(
            id=page.id,
            doc_id=page.doc_id,
            page_id=page.page_id,
            doc_name=page.doc_name,
            page_name=page.page_name,
            url=page.url,
            content=page.content,
            content_type=page.content_type,
            created_at=page.created_at,
            updated_at=page.updated_at,
            extracted_at=page.extracted_at,
            content_length=page.content_length,
            file_name=page.file_name,
        )

    def get_page(self, doc_id: str, page_id: str) -> CachedPageRecord | None:
        with self.Session() as session:
            page = (
                session.query(CachedPageModel)
                .filter_by(doc_id=doc_id, page_id=page_id)
                .first()
            )
            return self._map_page(page) if page else None

    def store_page(self, page: PageWrite, extracted_at: int | None = None) -> str:
        id = f"{page.doc_id}-{page.page_id}"
        if extracted_at is None:
            extracted_at = int(time.time() * 1000)

        with self.Session() as session:
            try:
                # merge() replaces the row sharing the primary key
                session.merge(
                    CachedPageModel(
                        id=id,
                        doc_id=page.doc_id,
                        page_id=page.page_id,
                        doc_name=page.doc_name,
                        page_name=page.page_name,
                        url=page.url,
                        content=page.content,
                        content_type=page.content_type,
                        created_at=page.created_at,
                        updated_at=page.updated_at,
                        extracted_at=extracted_at,
                        content_length=len(page.content),
                        file_name=page.file_name,
                    )
                )
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                raise

        return id

    def get_page_by_url(self, url: str) -> CachedPageRecord | None:
        with self.Session() as session:
            page = session.query(CachedPageModel).filter_by(url=url).first()
            return self._map_page(page) if page else None

    def list_pages(self, doc_id: str | None = None) -> list[CachedPageRecord]:
        with self.Session() as session:
            query = session.query(CachedPageModel)
            if doc_id is not None:
                query = query.filter_by(doc_id=doc_id)
            results = query.order_by(CachedPageModel.extracted_at.desc()).all()
            return [self._map_page(page) for page in results]

    def get_recent_pages(self, limit: int = 10) -> list[CachedPageRecord]:
        with self.Session() as session:
            results = (
                session.query(CachedPageModel)
                .order_by(CachedPageModel.extracted_at.desc())
                .limit(limit)
                .all()
            )
            return [self._map_page(page) for page in results]

    def search_pages(self, query: str, limit: int = 20) -> list[CachedPageRecord]:
        pattern = f"%{query}%"
        with self.Session() as session:
            results = (
                session.query(CachedPageModel)
                .filter(
                    or_(
                        CachedPageModel.page_name.ilike(pattern),
                        CachedPageModel.doc_name.ilike(pattern),
                        CachedPageModel.content.ilike(pattern),
                    )
                )
                .order_by(CachedPageModel.extracted_at.desc())
                .limit(limit)
                .all()
            )
            return [self._map_page(page) for page in results]

    def get_stats(self) -> CacheStats:
        with self.Session() as session:
            total_pages, total_content = session.query(
                func.count(CachedPageModel.id),
                func.coalesce(func.sum(CachedPageModel.content_length), 0),
            ).one()
            return CacheStats(total_pages=total_pages, total_content=total_content)

    def close(self) -> None:
        self.engine.dispose()
