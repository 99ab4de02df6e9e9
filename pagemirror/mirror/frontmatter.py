import re
from datetime import datetime
from typing import Any

from pagemirror.connectors.schemas import Page

FRONTMATTER_PATTERN = re.compile(r"^---\n(.*?)\n---\n(.*)$", re.DOTALL)

FRONTMATTER_FIELDS = (
    "title",
    "page_id",
    "doc_id",
    "doc_name",
    "url",
    "content_type",
    "parent_page_id",
    "parent_page_name",
    "is_subpage",
    "created_at",
    "updated_at",
    "extracted_at",
)

FrontmatterValue = str | bool | None


def format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    # Values are line-oriented
    return " ".join(str(value).splitlines()).strip()


def parse_value(raw: str) -> FrontmatterValue:
    value = raw.strip()
    if value in ("null", ""):
        return None
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def compose_mirror_file(
    *,
    page: Page,
    doc_id: str,
    doc_name: str,
    content: str,
    parent_name: str | None,
    extracted_at: datetime,
) -> str:
    metadata: dict[str, Any] = {
        "title": page.name,
        "page_id": page.id,
        "doc_id": doc_id,
        "doc_name": doc_name,
        "url": page.browser_link,
        "content_type": page.content_type,
        "parent_page_id": page.parent_id,
        "parent_page_name": parent_name,
        "is_subpage": page.is_subpage,
        "created_at": page.created_at,
        "updated_at": page.updated_at,
        "extracted_at": extracted_at,
    }
    lines = [f"{key}: {format_value(metadata[key])}" for key in FRONTMATTER_FIELDS]
    return "---\n" + "\n".join(lines) + f"\n---\n\n# {format_value(page.name)}\n\n{content}\n"


def split_frontmatter(text: str) -> tuple[dict[str, FrontmatterValue], str] | None:
    """Split a mirrored file into its metadata and body, None without frontmatter."""
    match = FRONTMATTER_PATTERN.match(text)
    if not match:
        return None

    block, body = match.groups()
    metadata: dict[str, FrontmatterValue] = {}
    for line in block.strip().split("\n"):
        key, sep, raw = line.partition(":")
        if not sep:
            continue
        metadata[key.strip()] = parse_value(raw)
    return metadata, body


def references_page(text: str, page_id: str) -> bool:
    """Whether a mirrored file's frontmatter names this page as its own."""
    expected = f"page_id: {page_id}"
    match = FRONTMATTER_PATTERN.match(text)
    header = match.group(1) if match else text
    return any(line.strip() == expected for line in header.splitlines())
