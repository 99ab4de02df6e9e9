from enum import Enum
from pydantic import BaseModel, field_validator


class PageOutcome(str, Enum):
    FILTERED_OUT = "filtered-out"
    SKIPPED_UP_TO_DATE = "skip-up-to-date"
    SKIPPED_TOO_SHORT = "skip-too-short"
    SKIPPED_EMPTY = "skip-empty"
    CREATED = "created"
    UPDATED = "updated"
    ERRORED = "errored"

    @property
    def is_skip(self) -> bool:
        return self in (
            PageOutcome.SKIPPED_UP_TO_DATE,
            PageOutcome.SKIPPED_TOO_SHORT,
            PageOutcome.SKIPPED_EMPTY,
        )


class MirrorOptions(BaseModel):
    force: bool = False
    limit: int | None = None
    exclude_subpages: bool = False
    include_hidden: bool = False
    min_content_length: int | None = None

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("limit must not be negative")
        return value


class MirrorRunOutput(BaseModel):
    doc_id: str
    doc_name: str
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errored: int = 0
    output_dir: str
    outcomes: dict[str, PageOutcome] = {}

    def record(self, page_id: str, outcome: PageOutcome) -> None:
        self.outcomes[page_id] = outcome
        if outcome == PageOutcome.CREATED:
            self.created += 1
        elif outcome == PageOutcome.UPDATED:
            self.updated += 1
        elif outcome == PageOutcome.ERRORED:
            self.errored += 1
        elif outcome.is_skip:
            self.skipped += 1
