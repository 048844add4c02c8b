"""
The archive walk: from the checkpoint toward the newest photo, one item at a time.
"""
from typing import Optional

from . import config
from .boundary import find_latest_item
from .checkpoint import CheckpointStore, normalize_locator
from .navigation import NavigationController, NavState
from .probe import PageProbe
from .processor import ItemProcessor
from .progress import Outcome, ProgressLogger
from .session import ensure_logged_in


class Walker:

    def __init__(self, probe: PageProbe, store: CheckpointStore, logger: ProgressLogger):
        self.probe = probe
        self.store = store
        self.logger = logger
        self.processor = ItemProcessor(probe, logger)
        self.controller: NavigationController | None = None

    def run(self, start: str) -> NavState:
        """Walk from start until the latest photo. Returns NavState.DONE or NavState.FAILED."""
        self.probe.goto(config.PHOTOS_URL)
        ensure_logged_in(self.probe)

        boundary = find_latest_item(self.probe, self.logger)
        self.controller = NavigationController(self.probe, self.store, self.logger, boundary)

        self.logger.info(f"Starting from: {start}")
        self.probe.goto(normalize_locator(start))

        # The start photo itself is processed before the first advance
        outcome = self._process_current()
        if outcome == Outcome.TIMEOUT:
            self.logger.info("First photo timed out, continuing...")

        while True:
            state = self.controller.check_position()
            if state in (NavState.DONE, NavState.FAILED):
                return state

            self.controller.advance(outcome)
            outcome = self._process_current()
            if outcome == Outcome.TIMEOUT:
                self.logger.info("Skipping due to timeout, continuing to next photo...")

    def _process_current(self) -> Optional[Outcome]:
        """Process the photo on screen. Returns None when the viewer bounced to the landing page."""
        if self.probe.is_home_page():
            # Nothing to process on the grid; check_position recovers from the checkpoint
            self.logger.warning("Landed on the landing page instead of a photo, not processing")
            return None

        locator = normalize_locator(self.probe.url)
        outcome = self.processor.process()
        self.logger.record(outcome, locator)
        # An archived photo's URL no longer resolves, keep the previous checkpoint
        if outcome != Outcome.ARCHIVED:
            self.store.write(locator)
        return outcome
