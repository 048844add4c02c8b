"""
Finds the most recently added photo, which is where the walk stops.
"""
from typing import Optional

from . import config
from .checkpoint import normalize_locator
from .errors import BoundaryError
from .probe import PageProbe
from .progress import ProgressLogger


def find_latest_item(probe: PageProbe, logger: ProgressLogger, timeout: Optional[int] = None) -> str:
    """
    From the landing grid, focus the first cell (the newest photo) and return its locator.
    Must run on the landing page, before any item is opened.
    """
    probe.wait_for_render(config.PAGE_TIMEOUT)
    latest = probe.focus_latest_item(config.FOCUS_TIMEOUT if timeout is None else timeout)
    if not probe.is_item_url(latest):
        raise BoundaryError(f"Could not determine the latest photo, focused element was {latest!r}")

    latest = normalize_locator(latest)
    logger.info(f"Latest Photo: {latest}")
    return latest
