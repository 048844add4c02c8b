"""Archive Google Photos that are not in any album, driving the web UI with Playwright."""

__version__ = "0.1.0"
