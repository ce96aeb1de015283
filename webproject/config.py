"""Environment driven defaults.

Settings use ``webproject.foo`` style names which map to ``WEBPROJECT__FOO``
environment variables.  Command line switches always take precedence; the
search path variables are appended after directories given on the command
line.
"""

from __future__ import annotations

import os

from .paths import Category, SearchPaths


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name.replace(".", "__").upper(), default)


# Environment variable names for the default search directories
SEARCH_PATH_SETTINGS = {
    Category.SCRIPT: "webproject.scripts",
    Category.STYLE: "webproject.styles",
    Category.PAGE: "webproject.pages",
    Category.TEMPLATE: "webproject.templates",
    Category.HEADER: "webproject.headers",
    Category.RESOURCE: "webproject.resources",
}


class Settings:
    """Values read once at import time.  Tests reload this module."""

    build_mode: str = _env("webproject.build_mode", "onefile") or "onefile"
    encoding: str = _env("webproject.encoding", "utf-8") or "utf-8"
    log_level: str = (_env("webproject.log_level", "INFO") or "INFO").upper()


def extend_search_paths(paths: SearchPaths) -> SearchPaths:
    """Append directories listed in the ``WEBPROJECT__*`` path variables."""

    for category, setting in SEARCH_PATH_SETTINGS.items():
        raw = _env(setting)
        if not raw:
            continue
        for directory in raw.split(os.pathsep):
            if directory.strip():
                paths.add(category, directory.strip())
    return paths


__all__ = ["Settings", "SEARCH_PATH_SETTINGS", "extend_search_paths"]
