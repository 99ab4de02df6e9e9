from enum import Enum

from pagemirror.cache.schemas import CachedPageRecord
from pagemirror.common.current_datetime import to_epoch_ms
from pagemirror.connectors.schemas import Page


class Freshness(str, Enum):
    FORCED = "forced"
    NEW = "new"
    STALE = "stale"
    UP_TO_DATE = "up-to-date"

    @property
    def needs_extraction(self) -> bool:
        return self != Freshness.UP_TO_DATE


def classify_page(
    page: Page, cached: CachedPageRecord | None, force: bool = False
) -> Freshness:
    # One-sided: remote deletions are not detected and clock skew is ignored
    if force:
        return Freshness.FORCED
    if cached is None:
        return Freshness.NEW
    if to_epoch_ms(page.updated_at) <= cached.extracted_at:
        return Freshness.UP_TO_DATE
    return Freshness.STALE
