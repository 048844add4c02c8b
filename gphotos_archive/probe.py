"""
PageProbe - every interaction with the Google Photos page goes through here.
Sensing methods return typed results so the processor and the navigation
controller can be tested against a fake probe.
"""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

from playwright.sync_api import Page, Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from . import config
from .checkpoint import normalize_locator
from .config import Selectors

PANEL_VISIBLE_JS = """
(selector) => {
    const el = document.querySelector(selector);
    return !!el && window.getComputedStyle(el).display !== 'none' && el.innerHTML.trim() !== '';
}
"""

# Always returns an object so wait_for_function resolves on the first evaluation
ALBUM_CHECK_JS = """
({ infoBox, albumBox, labels }) => {
    const visible = Array.from(document.querySelectorAll(infoBox)).filter(box => {
        const style = window.getComputedStyle(box);
        return style.display !== 'none' && box.offsetParent !== null;
    });
    if (visible.length !== 1) {
        return { regions: visible.length, markers: 0 };
    }
    const markers = Array.from(visible[0].querySelectorAll(albumBox))
        .filter(el => labels.includes(el.textContent.trim())).length;
    return { regions: 1, markers: markers };
}
"""

# Keyboard and native clicks on the arrow overlay are ignored by the UI, click through the DOM
CLICK_PREVIOUS_JS = """
(selector) => {
    const el = document.querySelector(selector);
    if (!el) {
        throw new Error('Previous control not found: ' + selector);
    }
    el.click();
}
"""

HOME_GRID_JS = "(selector) => document.querySelector(selector) !== null"

ACTIVE_LINK_JS = "() => !!document.activeElement && !!document.activeElement.href"


class AlbumState(str, Enum):
    NOT_IN_ALBUM = "not_in_album"
    IN_ALBUM = "in_album"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class AlbumCheck:
    state: AlbumState
    regions: int
    markers: int = 0

    @classmethod
    def from_counts(cls, regions: int, markers: int) -> 'AlbumCheck':
        if regions != 1:
            return cls(AlbumState.AMBIGUOUS, regions, markers)
        if markers > 0:
            return cls(AlbumState.IN_ALBUM, regions, markers)
        return cls(AlbumState.NOT_IN_ALBUM, regions, markers)


class PageProbe:
    """Thin typed wrapper around a Playwright page."""

    def __init__(self, page: Page, selectors: Optional[Selectors] = None, sleep_multiplier: Optional[float] = None):
        self.page = page
        self.selectors = selectors or Selectors()
        self.sleep_multiplier = config.SLEEP_MULTIPLIER if sleep_multiplier is None else sleep_multiplier

    @property
    def url(self) -> str:
        return self.page.url

    def settle(self, seconds: float) -> None:
        """Fixed pause for UI effects that expose no observable signal."""
        time.sleep(seconds * self.sleep_multiplier)

    def goto(self, url: str) -> None:
        self.page.goto(url, timeout=config.NAVIGATION_TIMEOUT)

    def wait_for_render(self, timeout: int) -> None:
        self.page.wait_for_load_state("domcontentloaded", timeout=timeout)

    def press(self, key: str) -> None:
        self.page.keyboard.press(key)

    # -- sensing ------------------------------------------------------------

    def is_panel_visible(self) -> bool:
        return bool(self.page.evaluate(PANEL_VISIBLE_JS, self.selectors.panel))

    def wait_for_panel(self, timeout: int) -> bool:
        try:
            self.page.wait_for_function(PANEL_VISIBLE_JS, arg=self.selectors.panel, timeout=timeout)
            return True
        except PlaywrightTimeout:
            return False

    def album_marker_state(self, timeout: int) -> AlbumCheck:
        """Count visible info regions and album markers. Raises PlaywrightTimeout past the bound."""
        handle = self.page.wait_for_function(
            ALBUM_CHECK_JS,
            arg={
                "infoBox": self.selectors.info_box,
                "albumBox": self.selectors.album_box,
                "labels": list(self.selectors.album_labels),
            },
            timeout=timeout,
        )
        result = handle.json_value()
        return AlbumCheck.from_counts(int(result.get("regions", 0)), int(result.get("markers", 0)))

    def is_item_url(self, url: str) -> bool:
        parsed = urlparse(normalize_locator(url))
        return url.startswith(config.PHOTOS_URL) and self.selectors.item_path in parsed.path

    def is_home_page(self) -> bool:
        """Landing/grid view instead of a single item: no item path and the grid is rendered."""
        if self.is_item_url(self.url):
            return False
        try:
            return bool(self.page.evaluate(HOME_GRID_JS, self.selectors.home_grid))
        except PlaywrightError:
            # Page mid-navigation; the URL alone says we left the item view
            return True

    def is_login_page(self) -> bool:
        return "accounts.google.com" in self.url

    # -- actions ------------------------------------------------------------

    def toggle_panel(self) -> None:
        self.press(self.selectors.panel_key)

    def archive(self) -> None:
        self.press(self.selectors.archive_key)

    def click_previous(self) -> None:
        self.page.evaluate(CLICK_PREVIOUS_JS, self.selectors.previous_button)

    def press_previous(self) -> None:
        self.press(self.selectors.previous_key)

    def wait_for_url_change(self, old_url: str, timeout: int) -> str:
        """Block until the page shows a different URL on the library host. Returns the new URL."""
        host = urlparse(config.PHOTOS_URL).netloc
        self.page.wait_for_url(lambda url: urlparse(url).netloc == host and url != old_url, timeout=timeout)
        return self.url

    def focus_latest_item(self, timeout: int) -> str:
        """Move focus onto the first grid cell and return what the focused element points to."""
        self.press(self.selectors.latest_key)
        try:
            self.page.wait_for_function(ACTIVE_LINK_JS, timeout=timeout)
        except PlaywrightTimeout:
            self.settle(0.5)
        return self.page.evaluate("() => document.activeElement.toString()")
