"""
Browser session: a persistent Chromium profile so the Google login survives between runs.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from fake_useragent import UserAgent
from playwright.sync_api import Page, sync_playwright

from . import config
from .errors import LoginRequiredError
from .probe import PageProbe
from .progress import ProgressLogger

LAUNCH_ARGS = [
    '--disable-features=IsolateOrigins,site-per-process',
    '--disable-blink-features=AutomationControlled',
    '--disable-dev-shm-usage',
    '--no-sandbox',
    '--disable-infobars',
    '--disable-extensions',
    '--start-maximized',
    f'--window-size={config.VIEWPORT["width"]},{config.VIEWPORT["height"]}',
]

HIDE_WEBDRIVER_JS = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
"""


def pick_user_agent() -> str:
    """Desktop Chrome on macOS, unless USER_AGENT pins one."""
    if config.USER_AGENT:
        return config.USER_AGENT
    return UserAgent(browsers=["Chrome"], os=["Mac OS X"], platforms=["desktop"]).random


@contextmanager
def open_session(
    profile_dir: Optional[str] = None,
    headless: bool = config.HEADLESS,
    logger: Optional[ProgressLogger] = None,
) -> Iterator[Page]:
    """Launch the persistent context and yield its page. The context is closed on every exit path."""
    logger = logger or ProgressLogger()
    profile_dir = str(Path(profile_dir or config.BROWSER_PROFILE).resolve())
    user_agent = pick_user_agent()

    with sync_playwright() as p:
        logger.info(f"Using browser profile: {profile_dir}")
        logger.info(f"Headless mode: {headless}")
        logger.debug(f"User agent: {user_agent}")

        context = p.chromium.launch_persistent_context(
            user_data_dir=profile_dir,
            headless=headless,
            args=LAUNCH_ARGS,
            user_agent=user_agent,
            viewport=config.VIEWPORT,
            device_scale_factor=1,
        )
        try:
            context.add_init_script(HIDE_WEBDRIVER_JS)
            page = context.pages[0] if context.pages else context.new_page()
            yield page
        finally:
            context.close()


def ensure_logged_in(probe: PageProbe) -> None:
    """Raise LoginRequiredError if the library redirected to the Google sign-in page."""
    if probe.is_login_page():
        raise LoginRequiredError(
            "Google login required! Run 'gphotos-archive-login' to log in with the browser profile, "
            "then re-run this command."
        )
