"""Application metadata."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

APP_NAME = "rosella"
APP_DISPLAY_NAME = "Rosella"


def app_version() -> str:
    try:
        return version(APP_NAME)
    except PackageNotFoundError:
        return "0.0.0"
