import re

from pagemirror.connectors.schemas import Page

PAGE_SLUG_LENGTH = 60
PARENT_SLUG_LENGTH = 30


def slugify(value: str, max_length: int) -> str:
    slug = re.sub(r"[^A-Za-z0-9 -]", "", value.lower())
    slug = re.sub(r"\s+", "-", slug.strip())
    return slug[:max_length]


def sanitize_page_id(page_id: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "-", page_id)


def mirror_file_name(page: Page, parent_name: str | None = None) -> str:
    name = f"{slugify(page.name, PAGE_SLUG_LENGTH)}-{sanitize_page_id(page.id)}.md"
    if parent_name:
        return f"{slugify(parent_name, PARENT_SLUG_LENGTH)}_{name}"
    return name
