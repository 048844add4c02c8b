"""
Navigation controller: moves the viewer to the next (newer) photo and
recovers when the UI does not do what it was asked to.

The "previous" control may silently do nothing, skip ahead twice, or bounce
back to the landing grid, so every advance is verified before it is trusted.
The decisions are pure functions over small state values; the controller
only performs the page actions they call for.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from . import config
from .checkpoint import CheckpointStore, normalize_locator
from .probe import PageProbe
from .progress import Outcome, ProgressLogger


class NavState(str, Enum):
    ADVANCING = "advancing"
    RETRYING = "retrying"
    FALLBACK_KEYBOARD = "fallback_keyboard"
    RECOVERING = "recovering"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Transition:
    state: NavState
    counter: int = 0


def position_state(on_home_page: bool, at_boundary: bool) -> NavState:
    """What to do with the page as it is now, before advancing."""
    if on_home_page:
        return NavState.RECOVERING
    if at_boundary:
        return NavState.DONE
    return NavState.ADVANCING


def recovery_state(still_home_page: bool) -> NavState:
    return NavState.FAILED if still_home_page else NavState.ADVANCING


def retry_transition(attempt: int, landed_on_new_item: bool,
                     max_attempts: int = config.MAX_ARCHIVE_RETRIES) -> Transition:
    """After an archive: keep clicking until a new item shows up, then give up to the keyboard."""
    if landed_on_new_item:
        return Transition(NavState.ADVANCING)
    if attempt >= max_attempts:
        return Transition(NavState.FALLBACK_KEYBOARD, attempt)
    return Transition(NavState.RETRYING, attempt + 1)


def repeat_transition(repeats: int, revisited: bool,
                      max_repeats: int = config.MAX_CONSECUTIVE_REPEATS) -> Transition:
    """After a plain advance: count landings on already visited items."""
    if not revisited:
        return Transition(NavState.ADVANCING, 0)
    repeats += 1
    if repeats >= max_repeats:
        return Transition(NavState.FALLBACK_KEYBOARD, 0)
    return Transition(NavState.ADVANCING, repeats)


class NavigationController:

    def __init__(
        self,
        probe: PageProbe,
        store: CheckpointStore,
        logger: ProgressLogger,
        boundary: str,
        page_timeout: int = config.PAGE_TIMEOUT,
        retry_timeout: int = config.ARCHIVE_RETRY_TIMEOUT,
        max_retries: int = config.MAX_ARCHIVE_RETRIES,
        max_repeats: int = config.MAX_CONSECUTIVE_REPEATS,
    ):
        self.probe = probe
        self.store = store
        self.logger = logger
        self.boundary = normalize_locator(boundary)
        self.page_timeout = page_timeout
        self.retry_timeout = retry_timeout
        self.max_retries = max_retries
        self.max_repeats = max_repeats
        self.visited: set[str] = set()
        self.repeats = 0
        self.keyboard_fallbacks = 0
        self.recoveries = 0

    @property
    def current(self) -> str:
        return normalize_locator(self.probe.url)

    def check_position(self) -> NavState:
        """Home-page recovery and boundary check. Returns DONE, FAILED or ADVANCING."""
        state = position_state(self.probe.is_home_page(), self.current == self.boundary)
        if state == NavState.RECOVERING:
            state = self._recover()
            if state == NavState.ADVANCING and self.current == self.boundary:
                state = NavState.DONE
        if state == NavState.DONE:
            self.logger.info("Reached the latest photo, exiting...")
        return state

    def _recover(self) -> NavState:
        self.recoveries += 1
        checkpoint = self.store.read()
        self.logger.warning(f"Redirected to the landing page, reloading last checkpoint {checkpoint}")
        try:
            self.probe.goto(checkpoint)
            self.probe.wait_for_render(self.page_timeout)
        except Exception as e:
            self.logger.error(f"Recovery navigation failed: {e}")
        state = recovery_state(self.probe.is_home_page())
        if state == NavState.FAILED:
            self.logger.error("Still on the landing page after recovery, giving up.")
        return state

    def advance(self, previous: Optional[Outcome]) -> NavState:
        """Move to the next photo. Returns the terminal state of this advance."""
        start_url = self.probe.url
        self.visited.add(normalize_locator(start_url))
        try:
            if previous == Outcome.ARCHIVED:
                state = self._advance_after_archive()
            else:
                state = self._advance_once()
        except Exception as e:
            self.logger.warning(f"Advance failed ({e}), falling back to keyboard")
            state = NavState.FALLBACK_KEYBOARD

        if state == NavState.FALLBACK_KEYBOARD:
            self._keyboard_fallback()
        return state

    def _advance_after_archive(self) -> NavState:
        # Archiving animates the grid and reflows the viewer
        self.probe.settle(1.0)
        transition = Transition(NavState.RETRYING, 1)
        while transition.state == NavState.RETRYING:
            attempt = transition.counter
            self.logger.debug(f"Advance attempt {attempt}/{self.max_retries} after archive")
            landed = False
            try:
                # Each attempt waits on its own move, not on the URL before the first one
                before = self.probe.url
                self.probe.click_previous()
                self.probe.wait_for_url_change(before, self.retry_timeout)
                landed = self.current not in self.visited and not self.probe.is_home_page()
            except Exception as e:
                self.logger.debug(f"Attempt {attempt} did not move: {e}")
            transition = retry_transition(attempt, landed, self.max_retries)
        if transition.state == NavState.FALLBACK_KEYBOARD:
            self.logger.warning(f"No new photo after {self.max_retries} attempts, falling back to keyboard")
        return transition.state

    def _advance_once(self) -> NavState:
        before = self.probe.url
        self.probe.click_previous()
        self.probe.wait_for_url_change(before, self.page_timeout)
        revisited = self.current in self.visited
        if revisited:
            self.logger.warning(f"Landed on an already visited photo {self.current}")
        transition = repeat_transition(self.repeats, revisited, self.max_repeats)
        self.repeats = transition.counter
        if transition.state == NavState.FALLBACK_KEYBOARD:
            self.logger.warning("Stuck on visited photos, falling back to keyboard")
        return transition.state

    def _keyboard_fallback(self) -> None:
        self.keyboard_fallbacks += 1
        try:
            before = self.probe.url
            self.probe.press_previous()
            self.probe.wait_for_url_change(before, self.retry_timeout)
        except Exception as e:
            self.logger.warning(f"Keyboard fallback did not change the photo: {e}")
