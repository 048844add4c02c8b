#!/usr/bin/env python3
"""
One-time Google sign-in for the archiver's browser profile.
Re-run whenever gphotos-archive reports that a login is required.
"""
import argparse
import sys

from . import config
from .boundary import find_latest_item
from .checkpoint import CheckpointStore
from .errors import ArchiverError
from .probe import PageProbe
from .progress import ProgressLogger
from .session import ensure_logged_in, open_session


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Sign in to Google Photos with the archiver browser profile')
    parser.add_argument('--profile', default=None,
                        help=f'Browser profile directory (default: {config.BROWSER_PROFILE})')
    return parser.parse_args(argv)


def login(profile_dir=None, logger=None) -> bool:
    """Open a visible browser, wait for the user to sign in, then check the library is reachable."""
    logger = logger or ProgressLogger()
    profile_dir = profile_dir or config.BROWSER_PROFILE

    # Sign-in needs a window, whatever HEADLESS says
    with open_session(profile_dir=profile_dir, headless=False, logger=logger) as page:
        probe = PageProbe(page, config.load_selectors())
        probe.goto(config.PHOTOS_URL)

        print()
        print(f"Sign in to Google in the browser window until your photo grid at {config.PHOTOS_URL} shows up.")
        print("The archiver reuses this session, so keep the window open until you are done here.")
        input("Press Enter when the photo grid is visible... ")

        probe.goto(config.PHOTOS_URL)
        try:
            ensure_logged_in(probe)
            latest = find_latest_item(probe, logger)
        except ArchiverError as e:
            logger.error(str(e))
            return False

    logger.info(f"Signed in, session stored in {profile_dir}")
    _print_next_steps(latest, profile_dir, logger)
    return True


def _print_next_steps(latest: str, profile_dir: str, logger: ProgressLogger) -> None:
    store = CheckpointStore(logger=logger)
    try:
        logger.info(f"Walk will resume from {store.read()}")
    except ArchiverError:
        logger.warning(f"No starting photo yet, put the URL of the oldest photo to check in {store.path}")
    logger.info(f"The walk stops at {latest}")
    print(f"\nNext: BROWSER_PROFILE='{profile_dir}' gphotos-archive --headful")


def main(argv=None):
    args = parse_args(argv)
    sys.exit(0 if login(args.profile) else 1)


if __name__ == "__main__":
    main()
