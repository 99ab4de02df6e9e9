from pydantic import BaseModel


class CachedPageRecord(BaseModel):
    id: str
    doc_id: str
    page_id: str
    doc_name: str
    page_name: str
    url: str
    content: str
    content_type: str
    created_at: str
    updated_at: str
    extracted_at: int  # Milliseconds since the epoch
    content_length: int
    file_name: str | None = None


class PageWrite(BaseModel):
    doc_id: str
    page_id: str
    doc_name: str
    page_name: str
    url: str
    content: str
    content_type: str
    created_at: str
    updated_at: str
    file_name: str | None = None


class CacheStats(BaseModel):
    total_pages: int
    total_content: int
