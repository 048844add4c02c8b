"""
Runtime configuration for the archiver.
Settings come from environment variables; UI affordances come from selectors.yml.
"""
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

# =============================================================================
# Common configuration - loaded from environment with sensible defaults
# =============================================================================
PHOTOS_URL = os.getenv("PHOTOS_URL", "https://photos.google.com")
BROWSER_PROFILE = os.getenv("BROWSER_PROFILE", "./session")
LASTDONE_FILE = Path(os.getenv("LASTDONE_FILE", ".lastdone"))
SELECTORS_FILE = Path(os.getenv("SELECTORS_FILE", str(Path(__file__).parent / "selectors.yml")))
HEADLESS = os.getenv("HEADLESS", "true").lower() == "true"
SLEEP_MULTIPLIER = float(os.getenv("SLEEP_MULTIPLIER", "1"))
USER_AGENT = os.getenv("USER_AGENT", "")

# Timeouts in milliseconds, as Playwright expects them
PAGE_TIMEOUT = int(os.getenv("PAGE_TIMEOUT", "10000"))
ALBUM_CHECK_TIMEOUT = int(os.getenv("ALBUM_CHECK_TIMEOUT", "5000"))
ARCHIVE_RETRY_TIMEOUT = int(os.getenv("ARCHIVE_RETRY_TIMEOUT", "3000"))
PANEL_TIMEOUT = int(os.getenv("PANEL_TIMEOUT", "2000"))
FOCUS_TIMEOUT = int(os.getenv("FOCUS_TIMEOUT", "2000"))
NAVIGATION_TIMEOUT = int(os.getenv("NAVIGATION_TIMEOUT", "60000"))

MAX_ARCHIVE_RETRIES = int(os.getenv("MAX_ARCHIVE_RETRIES", "5"))
MAX_CONSECUTIVE_REPEATS = int(os.getenv("MAX_CONSECUTIVE_REPEATS", "2"))
HISTORY_SIZE = int(os.getenv("HISTORY_SIZE", "5"))

VIEWPORT = {"width": 1280, "height": 720}


@dataclass
class Selectors:
    """UI affordances of the photo library. None of these are stable, keep them in YAML."""
    item_path: str = "/photo/"
    panel: str = ".Q77Pt.eejsDc"
    info_box: str = ".WUbige"
    album_box: str = ".wiOkb"
    album_labels: list[str] = field(default_factory=lambda: ["Albums", "Alben"])
    previous_button: str = ".SxgK2b.OQEhnd"
    home_grid: str = 'div[role="grid"]'
    panel_key: str = "KeyI"
    archive_key: str = "Shift+KeyA"
    previous_key: str = "ArrowLeft"
    latest_key: str = "ArrowRight"


def load_selectors(path: Optional[Path] = None) -> Selectors:
    """Load selectors from YAML, falling back to the built-in defaults for missing keys."""
    path = Path(path) if path else SELECTORS_FILE
    if not path.exists():
        print(f"[WARNING] Selectors file not found: {path}, using defaults")
        return Selectors()

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    known = {f.name for f in fields(Selectors)}
    unknown = sorted(set(data) - known)
    if unknown:
        print(f"[WARNING] Ignoring unknown selector keys: {', '.join(unknown)}")

    values = {k: v for k, v in data.items() if k in known}
    if isinstance(values.get("album_labels"), str):
        values["album_labels"] = [values["album_labels"]]
    return Selectors(**values)
