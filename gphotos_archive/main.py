#!/usr/bin/env python3
"""
Google Photos archiver
Walks the library from the photo saved in .lastdone toward the newest photo and
archives every photo that is not in an album.
"""
import argparse
import sys

from . import config
from .checkpoint import CheckpointStore
from .errors import ArchiverError
from .navigation import NavState
from .probe import PageProbe
from .progress import ProgressLogger
from .session import open_session
from .walker import Walker


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Archive Google Photos that are not in any album')
    parser.add_argument('--headful', action='store_true', help='Run with a visible browser window')
    parser.add_argument('--verbose', action='store_true', help='Print debug output')
    return parser.parse_args(argv)


def run(argv=None) -> int:
    args = parse_args(argv)
    logger = ProgressLogger(verbose=args.verbose)
    selectors = config.load_selectors()
    store = CheckpointStore(logger=logger, item_path=selectors.item_path)

    # Checked before launching the browser; nothing to do without a start point
    try:
        start = store.read()
    except ArchiverError as e:
        logger.error(str(e))
        return 1

    headless = config.HEADLESS and not args.headful
    state = NavState.FAILED
    try:
        with open_session(headless=headless, logger=logger) as page:
            probe = PageProbe(page, selectors)
            state = Walker(probe, store, logger).run(start)
    except ArchiverError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        print()
        logger.warning("Interrupted, progress saved in " + str(store.path))
        print(f"[INFO] {logger.summary_line()}")
        return 130

    print("-" * 37)
    print(f"[INFO] {logger.summary_line()}")
    return 0 if state == NavState.DONE else 1


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
