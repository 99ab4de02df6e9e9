from datetime import datetime
from typing import Any
from pydantic import BaseModel


class Page(BaseModel):
    id: str
    name: str
    parent_id: str | None = None
    parent_name: str | None = None
    content_type: str = "canvas"
    created_at: datetime
    updated_at: datetime
    browser_link: str

    @property
    def is_subpage(self) -> bool:
        return self.parent_id is not None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "Page":
        parent = item.get("parent") or {}
        return cls(
            id=item["id"],
            name=item["name"],
            parent_id=parent.get("id"),
            parent_name=parent.get("name"),
            content_type=item.get("contentType") or "canvas",
            created_at=item["createdAt"],
            updated_at=item["updatedAt"],
            browser_link=item["browserLink"],
        )
