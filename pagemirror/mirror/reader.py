import logging
from datetime import datetime
from pathlib import Path
from pydantic import BaseModel

from pagemirror.mirror.frontmatter import split_frontmatter

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "title",
    "page_id",
    "doc_id",
    "doc_name",
    "url",
    "content_type",
    "created_at",
    "updated_at",
)


class MirroredPage(BaseModel):
    file_name: str
    title: str
    page_id: str
    doc_id: str
    doc_name: str
    url: str
    content_type: str
    parent_page_id: str | None = None
    parent_page_name: str | None = None
    is_subpage: bool = False
    created_at: str
    updated_at: str
    extracted_at: str | None = None
    body: str

    @property
    def kind(self) -> str:
        content_type = self.content_type.lower()
        if content_type in ("canvas", "table", "document"):
            return content_type
        return "page"

    @property
    def description(self) -> str | None:
        for line in self.body.split("\n"):
            trimmed = line.strip()
            if trimmed.startswith(("#", "|", "---")):
                continue
            if len(trimmed) > 20:
                if len(trimmed) > 200:
                    return trimmed[:200] + "..."
                return trimmed
        return None


class MirrorReader:
    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def read_pages(self) -> list[MirroredPage]:
        return self._read(sorted(self.output_dir.glob("*.md")))

    def read_changed_since(self, timestamp: datetime) -> list[MirroredPage]:
        cutoff = timestamp.timestamp()
        paths = [
            path
            for path in sorted(self.output_dir.glob("*.md"))
            if path.stat().st_mtime > cutoff
        ]
        return self._read(paths)

    def _read(self, paths: list[Path]) -> list[MirroredPage]:
        pages: list[MirroredPage] = []
        for path in paths:
            page = self.parse_file(path)
            if page:
                pages.append(page)
        return pages

    def parse_file(self, path: Path) -> MirroredPage | None:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {path.name}: {e}")
            return None

        parsed = split_frontmatter(text)
        if not parsed:
            logger.warning(f"No frontmatter found in {path.name}")
            return None

        metadata, body = parsed
        for field in REQUIRED_FIELDS:
            if not metadata.get(field):
                logger.warning(f"Missing required field {field} in {path.name}")
                return None

        return MirroredPage(
            file_name=path.name,
            title=str(metadata["title"]),
            page_id=str(metadata["page_id"]),
            doc_id=str(metadata["doc_id"]),
            doc_name=str(metadata["doc_name"]),
            url=str(metadata["url"]),
            content_type=str(metadata["content_type"]),
            parent_page_id=_optional_str(metadata.get("parent_page_id")),
            parent_page_name=_optional_str(metadata.get("parent_page_name")),
            is_subpage=metadata.get("is_subpage") is True,
            created_at=str(metadata["created_at"]),
            updated_at=str(metadata["updated_at"]),
            extracted_at=_optional_str(metadata.get("extracted_at")),
            body=body,
        )


def _optional_str(value: str | bool | None) -> str | None:
    return None if value is None else str(value)
