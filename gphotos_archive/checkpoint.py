"""
Checkpoint store: the locator of the last item that was processed and is still
reachable by URL. Archived items are never written, their URL stops resolving.
"""
import re
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from . import config
from .errors import CheckpointError
from .progress import ProgressLogger

ACCOUNT_SEGMENT = re.compile(r'/u/\d+/')


def normalize_locator(url: str) -> str:
    """Strip the /u/<n>/ account index so locators compare equal across accounts."""
    return ACCOUNT_SEGMENT.sub('/', url, count=1)


class CheckpointStore:

    def __init__(self, path: Optional[Path] = None, prefix: Optional[str] = None,
                 logger: Optional[ProgressLogger] = None, item_path: Optional[str] = None):
        self.path = Path(path) if path else config.LASTDONE_FILE
        self.prefix = prefix or config.PHOTOS_URL
        self.item_path = item_path or config.Selectors().item_path
        self.logger = logger or ProgressLogger()

    def read(self) -> str:
        """Return the stored locator. Raises CheckpointError if missing or empty."""
        if not self.path.exists():
            raise CheckpointError(f"Checkpoint file not found: {self.path}. "
                                  f"Please add the starting link in {self.path}")

        locator = self.path.read_text(encoding='utf-8').strip()
        if not locator:
            raise CheckpointError(f"Please add the starting link in {self.path}")
        return locator

    def write(self, locator: str) -> bool:
        """Persist the normalized locator if it is a single item of the library. Returns True if written."""
        locator = normalize_locator(locator)
        if not locator.startswith(self.prefix):
            self.logger.warning(f"Current URL does not start with {self.prefix}, not saving progress: {locator}")
            return False
        if self.item_path not in urlparse(locator).path:
            self.logger.warning(f"Current URL is not a photo, not saving progress: {locator}")
            return False

        self.path.write_text(locator, encoding='utf-8')
        return True
