"""
Item processor: decides for the photo currently on screen whether to archive it.
"""
from playwright.sync_api import TimeoutError as PlaywrightTimeout

from . import config
from .probe import AlbumState, PageProbe
from .progress import Outcome, ProgressLogger


class ItemProcessor:
    """
    Runs the per-item sequence on the current page:
    render wait, info drawer, album membership check, archive.
    Never raises; every failure degrades to Outcome.TIMEOUT.
    """

    def __init__(
        self,
        probe: PageProbe,
        logger: ProgressLogger,
        page_timeout: int = config.PAGE_TIMEOUT,
        album_check_timeout: int = config.ALBUM_CHECK_TIMEOUT,
        panel_timeout: int = config.PANEL_TIMEOUT,
    ):
        self.probe = probe
        self.logger = logger
        self.page_timeout = page_timeout
        self.album_check_timeout = album_check_timeout
        self.panel_timeout = panel_timeout

    def process(self) -> Outcome:
        try:
            if not self._wait_for_render():
                self.logger.info("Photo skipped (page load timeout)")
                return Outcome.TIMEOUT

            if not self._ensure_panel():
                self.logger.info("Photo skipped (drawer timeout)")
                return Outcome.TIMEOUT

            if self._archive_if_eligible():
                self.logger.info("Photo archived successfully")
                return Outcome.ARCHIVED

            self.logger.info("Photo skipped (in album or error)")
            return Outcome.SKIPPED
        except PlaywrightTimeout:
            self.logger.warning("Album check timeout - skipping this image")
            return Outcome.TIMEOUT
        except Exception as e:
            self.logger.warning(f"Photo processing timeout - skipping: {e}")
            return Outcome.TIMEOUT

    def _wait_for_render(self) -> bool:
        self.logger.debug(f"Loading page {self.probe.url}")
        try:
            self.probe.wait_for_render(self.page_timeout)
        except PlaywrightTimeout:
            return False
        # Short wait for dynamic content
        self.probe.settle(0.2)
        return True

    def _ensure_panel(self) -> bool:
        try:
            if self.probe.is_panel_visible():
                self.logger.debug("Right hand drawer already visible.")
                return True

            self.logger.debug("Show right hand drawer.")
            self.probe.toggle_panel()
            if not self.probe.wait_for_panel(self.panel_timeout):
                self.logger.warning("Drawer did not appear after toggling, checking albums anyway")
            return True
        except Exception as e:
            self.logger.warning(f"Drawer check failed: {e}")
            return False

    def _archive_if_eligible(self) -> bool:
        check = self.probe.album_marker_state(self.album_check_timeout)

        if check.state == AlbumState.AMBIGUOUS:
            self.logger.warning(f"Found {check.regions} visible info boxes, archiving skipped.")
            return False

        if check.state == AlbumState.IN_ALBUM:
            self.logger.info(f"Found {check.markers} album boxes - skipping archive.")
            return False

        self.logger.info("No albums found - photo will be archived.")
        self.probe.archive()
        self.probe.settle(0.5)
        return True
