import logging

from pagemirror.connectors.schemas import Page

logger = logging.getLogger(__name__)

HIDDEN_NAME_MARKERS = ("hidden", "private", "draft", "temp", "test")
HIDDEN_NAME_PREFIXES = ("_", ".")


def is_hidden_name(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in HIDDEN_NAME_MARKERS) or lowered.startswith(
        HIDDEN_NAME_PREFIXES
    )


def filter_pages(
    pages: list[Page], exclude_subpages: bool, include_hidden: bool
) -> list[Page]:
    """Reduce a document's page list to the pages eligible for extraction."""
    filtered = pages

    if exclude_subpages:
        top_level = [page for page in filtered if page.parent_id is None]
        logger.info(f"Excluded {len(filtered) - len(top_level)} subpages")
        filtered = top_level

    if not include_hidden:
        visible = [page for page in filtered if not is_hidden_name(page.name)]
        logger.info(f"Excluded {len(filtered) - len(visible)} hidden pages")
        filtered = visible

    return filtered
