from sqlalchemy import BigInteger, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, Mapped, mapped_column

from pagemirror.config import get_settings


settings = get_settings()

Base = declarative_base()


class CachedPageModel(Base):
    __tablename__ = settings.PAGE_CACHE_TABLE
    __table_args__ = (
        UniqueConstraint("doc_id", "page_id"),
        Index(f"idx_{settings.PAGE_CACHE_TABLE}_doc_id", "doc_id"),
        Index(f"idx_{settings.PAGE_CACHE_TABLE}_extracted_at", "extracted_at"),
    )

    # "<doc_id>-<page_id>"
    id: Mapped[str] = mapped_column(String, primary_key=True)
    doc_id: Mapped[str] = mapped_column(String, nullable=False)
    page_id: Mapped[str] = mapped_column(String, nullable=False)
    doc_name: Mapped[str] = mapped_column(String, nullable=False)
    page_name: Mapped[str] = mapped_column(String, nullable=False)
    url: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[str] = mapped_column(String, nullable=False)
    updated_at: Mapped[str] = mapped_column(String, nullable=False)
    extracted_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content_length: Mapped[int] = mapped_column(Integer, nullable=False)
    file_name: Mapped[str | None] = mapped_column(String, nullable=True)
