import logging
from pathlib import Path

from pagemirror.mirror.frontmatter import references_page

logger = logging.getLogger(__name__)


class RenameReconciler:
    """Removes the file a page was mirrored to under its previous name."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def reconcile(
        self, page_id: str, target_path: Path, indexed_file_name: str | None = None
    ) -> Path | None:
        """Delete the obsolete mirror of ``page_id`` and return its path.

        ``indexed_file_name`` is the file name last recorded for the page in
        the page cache. When it points at an existing file other than the
        target, that file is removed without scanning the directory. When it
        equals the target name the page was not renamed and nothing is done.
        Otherwise every ``.md`` file is read and the first one whose
        frontmatter carries ``page_id: <page_id>`` is removed.
        """
        if indexed_file_name == target_path.name:
            return None
        if indexed_file_name:
            indexed_path = self.output_dir / indexed_file_name
            if indexed_path.is_file():
                return self._remove(page_id, indexed_path)

        for path in sorted(self.output_dir.glob("*.md")):
            if path == target_path:
                continue
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable mirror file {path.name}: {e}")
                continue
            if references_page(text, page_id):
                return self._remove(page_id, path)

        return None

    def _remove(self, page_id: str, path: Path) -> Path:
        path.unlink()
        logger.info(f"Removed renamed mirror file {path.name} of page {page_id}")
        return path
