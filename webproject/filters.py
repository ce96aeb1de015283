"""Comment stripping for inlined styles and scripts.

The filters are small character level state machines.  :meth:`feed` takes
one character (or :data:`EOF`) and returns whatever output that symbol
releases, so a file can be filtered straight off its stream.  They only
drop comments and blank lines; they are not minifiers.

Strings delimited by ``"`` or ``'`` (and backticks in scripts) are copied
through untouched, so ``"/*"`` or ``'http://'`` inside a string survive.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator, TextIO

# End of input marker passed to ``feed``.
EOF = None

_NEWLINES = ("\n", "\r")


class State(Enum):
    TEXT = "text"
    SLASH = "slash"
    BEGSLASH = "begslash"
    COMMENT = "comment"
    LINECOMMENT = "linecomment"
    QUOTES = "quotes"
    NEWLINE = "newline"


class PassThroughFilter:
    """Copy input unchanged.  Used for HTML fragments."""

    def feed(self, c: str | None) -> str:
        return "" if c is EOF else c


class _CommentFilter:
    quote_chars: tuple[str, ...] = ('"', "'")

    def __init__(self) -> None:
        self.state = State.TEXT
        self._quote = ""
        self._escaped = False
        self._star = False
        # state to return to once a block comment closes
        self._resume = State.TEXT

    def feed(self, c: str | None) -> str:
        return getattr(self, "_" + self.state.value)(c)

    def _open_quote(self, c: str) -> None:
        self.state = State.QUOTES
        self._quote = c
        self._escaped = False

    def _open_comment(self, resume: State) -> str:
        self.state = State.COMMENT
        self._star = False
        self._resume = resume
        return ""

    def _comment(self, c: str | None) -> str:
        if c is EOF:
            return ""
        if c == "/" and self._star:
            self.state = self._resume
        self._star = c == "*"
        return ""

    def _quotes(self, c: str | None) -> str:
        if c is EOF:
            return ""
        if self._escaped:
            self._escaped = False
        elif c == "\\":
            self._escaped = True
        elif c == self._quote:
            self.state = State.TEXT
        return c


class CSSFilter(_CommentFilter):
    """Strip ``/* ... */`` comments and collapse line breaks."""

    def _text(self, c: str | None) -> str:
        if c is EOF:
            return "\n"
        if c == "/":
            self.state = State.SLASH
            return ""
        if c in _NEWLINES:
            self.state = State.NEWLINE
            return ""
        if c in self.quote_chars:
            self._open_quote(c)
        return c

    def _slash(self, c: str | None) -> str:
        if c is EOF:
            return "/\n"
        if c == "/":
            # emit the first slash, the second one is still undecided
            return "/"
        if c == "*":
            return self._open_comment(State.TEXT)
        if c in _NEWLINES:
            self.state = State.NEWLINE
            return "/"
        if c in self.quote_chars:
            self._open_quote(c)
        else:
            self.state = State.TEXT
        return "/" + c

    def _newline(self, c: str | None) -> str:
        if c is EOF or c in _NEWLINES:
            return ""
        if c == "/":
            self.state = State.SLASH
            return "\n"
        if c in self.quote_chars:
            self._open_quote(c)
        else:
            self.state = State.TEXT
        return "\n" + c


class JSFilter(_CommentFilter):
    """Strip ``//`` and ``/* */`` comments, blank lines and indentation.

    At end of input a ``;`` is appended so the next concatenated script
    cannot run into the last statement of this one.
    """

    quote_chars = ('"', "'", "`")

    def _text(self, c: str | None) -> str:
        if c is EOF:
            return ";\n"
        if c == "/":
            self.state = State.SLASH
            return ""
        if c in _NEWLINES:
            self.state = State.NEWLINE
            return ""
        if c in self.quote_chars:
            self._open_quote(c)
        return c

    def _slash(self, c: str | None, prefix: str = "") -> str:
        if c is EOF:
            return prefix + "/\n"
        if c == "/":
            self.state = State.LINECOMMENT
            return ""
        if c == "*":
            return self._open_comment(State.NEWLINE if prefix else State.TEXT)
        if c in _NEWLINES:
            self.state = State.NEWLINE
            return prefix + "/"
        if c in self.quote_chars:
            self._open_quote(c)
        else:
            self.state = State.TEXT
        return prefix + "/" + c

    def _begslash(self, c: str | None) -> str:
        # a slash right after a line break, the break is still pending
        return self._slash(c, prefix="\n")

    def _linecomment(self, c: str | None) -> str:
        if c in _NEWLINES:
            self.state = State.NEWLINE
        return ""

    def _newline(self, c: str | None) -> str:
        if c is EOF or c in (" ", "\t", "\n", "\r"):
            return ""
        if c == "/":
            self.state = State.BEGSLASH
            return ""
        if c in self.quote_chars:
            self._open_quote(c)
        else:
            self.state = State.TEXT
        return "\n" + c


def iter_filtered(stream: TextIO, flt, chunk_size: int = 8192) -> Iterator[str]:
    """Yield the filtered output of ``stream`` piece by piece."""

    for chunk in iter(lambda: stream.read(chunk_size), ""):
        for c in chunk:
            out = flt.feed(c)
            if out:
                yield out
    tail = flt.feed(EOF)
    if tail:
        yield tail


def filter_text(text: str, flt) -> str:
    out = [flt.feed(c) for c in text]
    out.append(flt.feed(EOF))
    return "".join(out)


def strip_css(text: str) -> str:
    return filter_text(text, CSSFilter())


def strip_js(text: str) -> str:
    return filter_text(text, JSFilter())


__all__ = [
    "EOF",
    "State",
    "PassThroughFilter",
    "CSSFilter",
    "JSFilter",
    "iter_filtered",
    "filter_text",
    "strip_css",
    "strip_js",
]
