"""File output sink for previews and downloadable decks."""

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Union

from briefdeck.errors import OutputError

logger = logging.getLogger(__name__)


class OutputSink:
    """Writes ``previews/presentation_<ms>.html`` and ``downloads/presentation_<ms>.pptx`` under *root*.

    Names are built from a millisecond timestamp; an existing file of the
    same name gets a ``_<n>`` suffix instead of being overwritten.
    """

    PREVIEW_DIR = "previews"
    DOWNLOAD_DIR = "downloads"

    def __init__(self, root: Union[str, Path], clock: Optional[Callable[[], float]] = None):
        self.root = Path(root)
        self.clock = clock or time.time

    def timestamp(self) -> int:
        return int(self.clock() * 1000)

    def reserve(self, subdir: str, suffix: str, stamp: Optional[int] = None) -> Path:
        """Create *subdir* and claim a new, empty ``presentation_<stamp>`` file in it."""
        directory = self.root / subdir
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(f"Cannot create output directory {directory}: {exc}", path=directory) from exc

        stem = f"presentation_{self.timestamp() if stamp is None else stamp}"
        candidate = directory / f"{stem}{suffix}"
        n = 1
        while True:
            try:
                # exclusive create claims the name
                candidate.open("x").close()
                return candidate
            except FileExistsError:
                candidate = directory / f"{stem}_{n}{suffix}"
                n += 1
            except OSError as exc:
                raise OutputError(f"Cannot create {candidate}: {exc}", path=candidate) from exc

    def write_preview(self, html: str, stamp: Optional[int] = None) -> Path:
        path = self.reserve(self.PREVIEW_DIR, ".html", stamp)
        try:
            path.write_text(html, encoding="utf-8")
        except OSError as exc:
            raise OutputError(f"Cannot write preview {path}: {exc}", path=path) from exc
        logger.info("Wrote preview %s", path)
        return path

    def download_path(self, stamp: Optional[int] = None) -> Path:
        """Claimed, empty path for a deck; the writer saves over it."""
        return self.reserve(self.DOWNLOAD_DIR, ".pptx", stamp)

    def url_for(self, path: Path) -> str:
        """Retrieval path relative to the sink root, e.g. ``/downloads/presentation_1.pptx``."""
        return "/" + Path(path).relative_to(self.root).as_posix()
