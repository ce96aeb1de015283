"""Placing linked assets next to the generated page.

In the linked build modes every stylesheet, script and resource is made
available under its allocated name below the page's directory, either as a
copy, a hard link or a symbolic link.
"""

from __future__ import annotations

import os
import shutil
from enum import Enum
from pathlib import Path


class BuildMode(Enum):
    SYMLINK = "symlink"
    HARDLINK = "hardlink"
    COPY = "copy"
    ONEFILE = "onefile"

    @property
    def inline(self) -> bool:
        return self is BuildMode.ONEFILE

    @classmethod
    def parse(cls, text: str) -> BuildMode:
        """Accept the long names and the one letter forms of the CLI."""

        try:
            return _ALIASES[text.strip().lower()]
        except KeyError:
            raise ValueError(
                f"Invalid build mode: {text} is not in (symlink, hardlink, copy, onefile)"
            ) from None


_ALIASES = {
    "s": BuildMode.SYMLINK,
    "symlink": BuildMode.SYMLINK,
    "h": BuildMode.HARDLINK,
    "hardlink": BuildMode.HARDLINK,
    "c": BuildMode.COPY,
    "copy": BuildMode.COPY,
    "o": BuildMode.ONEFILE,
    "p": BuildMode.ONEFILE,
    "onefile": BuildMode.ONEFILE,
    "onepage": BuildMode.ONEFILE,
}


def _real_location(path: str | Path) -> str:
    # resolve the directory only; a link left by an earlier build is not followed
    path = os.path.abspath(path)
    return os.path.join(os.path.realpath(os.path.dirname(path)), os.path.basename(path))


def same_file(src: str | Path, dest: str | Path) -> bool:
    """True when writing ``dest`` would overwrite ``src`` itself.

    Directories are compared after resolving symlinks, so an output
    directory that is an alias of the source directory is caught.
    """

    return os.path.realpath(src) == _real_location(dest)


def link_file(src: str | Path, dest: str | Path, mode: BuildMode) -> None:
    """Replace ``dest`` with a copy or link of ``src``.

    Raises :class:`OSError` on failure; the caller decides whether that is
    fatal.  The single file mode has nothing to link and copies instead.
    """

    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    if dest.is_symlink() or dest.exists():
        dest.unlink()
    if mode is BuildMode.SYMLINK:
        os.symlink(os.path.abspath(src), dest)
    elif mode is BuildMode.HARDLINK:
        os.link(src, dest)
    else:
        shutil.copy2(src, dest)


__all__ = ["BuildMode", "link_file", "same_file"]
