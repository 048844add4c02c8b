"""Shared fixtures: a fake photo library standing in for the Playwright page."""

import io
from pathlib import Path

import pytest
from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from gphotos_archive import config
from gphotos_archive.checkpoint import CheckpointStore, normalize_locator
from gphotos_archive.probe import AlbumCheck
from gphotos_archive.progress import ProgressLogger

HOME = config.PHOTOS_URL + "/"


def photo(item_id, account=None) -> str:
    """Detail view URL of an item, optionally with the /u/<n>/ account segment."""
    prefix = f"/u/{account}" if account is not None else ""
    return f"{config.PHOTOS_URL}{prefix}/photo/{item_id}"


class FakeProbe:
    """
    Simulated library viewer. Items are ordered oldest first; the "previous"
    control moves to the next newer item that has not been archived.

    Scripted misbehaviour:
      click_script        per-click overrides: "noop", "home", or an index to land on
      click_error         the previous control is missing from the DOM
      render_timeouts     item ids whose page never finishes loading
      album_timeouts      item ids whose album probe times out
      album_regions       item id -> number of visible info regions
      redirect_on_archive item ids whose archive bounces to the landing page
      broken_urls         URLs that land on the landing page when opened
    """

    def __init__(self, ids, albums=(), latest=None):
        self.ids = list(ids)
        self.items = [photo(i) for i in self.ids]
        self.albums = set(albums)
        self.latest = latest if latest is not None else photo(self.ids[-1], account=0)
        self._url = "about:blank"
        self.panel_visible = False
        self.panel_error = False
        self.login = False
        self.click_script = []
        self.click_error = False
        self.render_timeouts = set()
        self.album_timeouts = set()
        self.album_regions = {}
        self.redirect_on_archive = set()
        self.broken_urls = set()
        self.archived = []
        self.calls = []
        self.waits = []

    # -- helpers ----------------------------------------------------------

    @property
    def url(self):
        return self._url

    def index(self):
        try:
            return self.items.index(normalize_locator(self._url))
        except ValueError:
            return None

    def current_id(self):
        i = self.index()
        return None if i is None else self.ids[i]

    def _next_index(self, i):
        for j in range(i + 1, len(self.items)):
            if self.items[j] not in self.archived:
                return j
        return i

    def count(self, call):
        return sum(1 for c in self.calls if c == call)

    # -- PageProbe interface ----------------------------------------------

    def settle(self, seconds):
        self.calls.append(("settle", seconds))

    def goto(self, url):
        self.calls.append(("goto", url))
        self._url = HOME if url in self.broken_urls else url

    def wait_for_render(self, timeout):
        if self.current_id() in self.render_timeouts:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded.")

    def press(self, key):
        self.calls.append(("press", key))

    def is_panel_visible(self):
        if self.panel_error:
            raise PlaywrightError("Execution context was destroyed")
        return self.panel_visible

    def wait_for_panel(self, timeout):
        return self.panel_visible

    def toggle_panel(self):
        self.calls.append("panel")
        self.panel_visible = not self.panel_visible

    def album_marker_state(self, timeout):
        item_id = self.current_id()
        if item_id in self.album_timeouts:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded.")
        regions = self.album_regions.get(item_id, 1)
        markers = 1 if item_id in self.albums else 0
        return AlbumCheck.from_counts(regions, markers)

    def is_item_url(self, url):
        return url.startswith(config.PHOTOS_URL) and "/photo/" in url

    def is_home_page(self):
        return not self.is_item_url(self._url)

    def is_login_page(self):
        return self.login

    def archive(self):
        self.calls.append("archive")
        self.archived.append(normalize_locator(self._url))
        if self.current_id() in self.redirect_on_archive:
            self._url = HOME

    def click_previous(self):
        self.calls.append("click")
        if self.click_error:
            raise PlaywrightError("Previous control not found: .SxgK2b.OQEhnd")
        action = self.click_script.pop(0) if self.click_script else None
        if action == "noop":
            return
        if action == "home":
            self._url = HOME
            return
        if isinstance(action, int):
            self._url = self.items[action]
            return
        i = self.index()
        if i is None:
            raise PlaywrightError("Previous control not found: .SxgK2b.OQEhnd")
        self._url = self.items[self._next_index(i)]

    def press_previous(self):
        self.calls.append("key")
        i = self.index()
        if i is not None:
            self._url = self.items[self._next_index(i)]

    def wait_for_url_change(self, old_url, timeout):
        self.waits.append(timeout)
        if self._url == old_url:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded.")
        return self._url

    def focus_latest_item(self, timeout):
        self.calls.append(("latest", timeout))
        return self.latest


class RecordingStore(CheckpointStore):
    """Checkpoint store that also remembers every locator it was asked to write."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.writes = []

    def write(self, locator):
        self.writes.append(locator)
        return super().write(locator)


@pytest.fixture
def logger():
    return ProgressLogger(stream=io.StringIO())


@pytest.fixture
def checkpoint_file(tmp_path) -> Path:
    return tmp_path / ".lastdone"


@pytest.fixture
def make_store(checkpoint_file, logger):
    """Store seeded with a start locator."""
    def _make(start=None):
        if start is not None:
            checkpoint_file.write_text(start, encoding='utf-8')
        return RecordingStore(path=checkpoint_file, prefix=config.PHOTOS_URL, logger=logger)
    return _make
