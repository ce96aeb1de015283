"""Page builder.

:class:`PageBuilder` scans a root script for ``//#`` directives, resolves
every referenced file, and writes a single HTML page that either inlines
the styles and scripts or links them as separate files.

A directive line looks like::

    //#require "lib/util.js"
    //#style main.css

Supported commands are ``require`` (script), ``style``, ``page`` (body
fragment), ``template``, ``header`` (head fragment) and ``resource``.
Required scripts are scanned for their own directives before they are
registered, so dependencies come out ahead of the scripts using them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional, Set

from .config import Settings
from .filters import CSSFilter, JSFilter, PassThroughFilter, iter_filtered
from .materialize import BuildMode, link_file, same_file
from .paths import COMMANDS, Category, SearchPaths

logger = logging.getLogger(__name__)

DIRECTIVE = "//#"

WarningCallback = Callable[[str, int, str], None]

TEMPLATE_LOADER = """
function loadTemplate(name) {
    var tn = document.querySelector("template[data-name=\\""+name+"\\"]");
    if (!tn) throw new ReferenceError("Template "+name+" was not imported");
    return document.importNode(tn.content, true);
};
"""


class Resource(NamedTuple):
    target: str
    index: int


def log_warning(file: str, line: int, message: str) -> None:
    logger.warning("%s:%d warning: %s", file, line, message)


def parse_directive(line: str) -> tuple[str, str] | None:
    """Split a directive line into ``(command, parameter)``.

    Returns ``None`` for ordinary lines and for directives without a
    parameter.
    """

    line = line.lstrip()
    if not line.startswith(DIRECTIVE):
        return None
    cmd, sep, param = line[len(DIRECTIVE):].partition(" ")
    if not sep:
        return None
    param = param.strip()
    if len(param) > 1 and param[0] == '"' and param[-1] == '"':
        param = param[1:-1]
    return cmd, param


def disambiguate(name: str, index: int) -> str:
    """Insert ``.<index>`` before the extension of ``name``."""

    base, ext = os.path.splitext(name)
    return f"{base}.{index}{ext}"


def _normalize(path: str | Path) -> Path:
    return Path(os.path.abspath(path))


class PageBuilder:
    def __init__(self, warning: WarningCallback = log_warning, encoding: str | None = None) -> None:
        self._warning = warning
        self.encoding = encoding or Settings.encoding
        self.tables: Dict[Category, Dict[Path, Resource]] = {c: {} for c in Category}
        self._processed: Set[Path] = set()
        self._allocated: Set[str] = set()
        self.index = 0
        self._source: Optional[Path] = None
        self._paths: Optional[SearchPaths] = None
        self._target: Optional[Path] = None
        self._mode: Optional[BuildMode] = None

    # -- directive processing --------------------------------------------
    def prepare(self, src_file: str | Path, paths: SearchPaths) -> None:
        """Reset all per-build state and resolve everything ``src_file`` needs."""

        src_file = _normalize(src_file)
        self.index = 0
        for table in self.tables.values():
            table.clear()
        self._processed.clear()
        self._allocated.clear()
        self._source = src_file
        self._paths = paths

        self.process_file(src_file, paths)
        # the root script runs last, after everything it required
        self.index += 1
        self._register(Category.SCRIPT, src_file, src_file.name, str(src_file), 0)
        logger.debug(
            "Prepared %s: %s",
            src_file,
            ", ".join(f"{len(t)} {c.command}" for c, t in self.tables.items()),
        )

    def process_file(self, src_file: str | Path, paths: SearchPaths) -> bool:
        """Scan ``src_file`` for directives.

        Returns ``False`` when the file was already scanned in this build.
        The result says nothing about whether the file could be read.
        """

        src_file = _normalize(src_file)
        if src_file in self._processed:
            return False
        self._processed.add(src_file)

        try:
            with open(src_file, encoding=self.encoding, errors="replace") as f:
                for line_number, line in enumerate(f, start=1):
                    self._process_line(src_file, line_number, line.rstrip("\r\n"), paths)
        except OSError as exc:
            logger.debug("Cannot scan %s: %s", src_file, exc)
        return True

    def _process_line(self, src_file: Path, line_number: int, line: str, paths: SearchPaths) -> None:
        directive = parse_directive(line)
        if directive is None:
            return
        cmd, param = directive

        category = Category.from_command(cmd)
        if category is None:
            self._warning(
                str(src_file),
                line_number,
                f"Unknown directive: {cmd}. Only allowed: {COMMANDS}",
            )
            return

        found: Path | None = src_file.parent / param
        if not found.is_file():
            found = paths.find(category, param)
        if found is None:
            self._warning(str(src_file), line_number, f"Linked resource was not found: {param}")
            return
        found = _normalize(found)

        # dependencies of a script take their numbers before the script does
        fresh = category is not Category.SCRIPT or self.process_file(found, paths)
        self.index += 1
        if fresh:
            self._register(category, found, param, str(src_file), line_number)

    def _register(self, category: Category, path: Path, name: str, origin: str, line_number: int) -> None:
        table = self.tables[category]
        if path in table:
            return
        for other, other_table in self.tables.items():
            if other is not category and path in other_table:
                self._warning(
                    origin,
                    line_number,
                    f"{path} is already linked as {other.command}, ignored as {category.command}",
                )
                return
        table[path] = Resource(self._allocate(name), self.index)

    def _allocate(self, name: str) -> str:
        if name in self._allocated:
            name = disambiguate(name, self.index)
        self._allocated.add(name)
        return name

    # -- ordering ---------------------------------------------------------
    def sorted_sources(self, category: Category) -> List[Path]:
        table = self.tables[category]
        return sorted(table, key=lambda p: table[p].index)

    def sorted_targets(self, category: Category) -> List[str]:
        return [r.target for r in sorted(self.tables[category].values(), key=lambda r: r.index)]

    # -- output -----------------------------------------------------------
    def build(self, target_html: str | Path, mode: BuildMode) -> None:
        """Write the page and materialize linked files next to it.

        Errors creating the output directory or opening the page propagate;
        everything else is reported through the warning callback.
        """

        target_html = _normalize(target_html)
        self._target = target_html
        self._mode = mode
        parent = target_html.parent
        parent.mkdir(parents=True, exist_ok=True)
        self.build_page(target_html, mode)
        if not mode.inline:
            self.materialize(Category.STYLE, parent, mode)
            self.materialize(Category.SCRIPT, parent, mode)
        self.materialize(Category.RESOURCE, parent, mode)
        logger.info("Built %s (%s)", target_html, mode.value)

    def rebuild(self) -> None:
        """Rescan the last root file and write the last target again."""

        if self._source is None or self._target is None:
            raise RuntimeError("rebuild() called before prepare() and build()")
        self.prepare(self._source, self._paths)
        self.build(self._target, self._mode)

    def _append(self, out, path: Path, flt) -> bool:
        try:
            with open(path, encoding=self.encoding, errors="replace", newline="") as f:
                for chunk in iter_filtered(f, flt):
                    out.write(chunk)
        except OSError as exc:
            logger.debug("Cannot read %s: %s", path, exc)
            return False
        return True

    def _append_or_warn(self, out, path: Path, flt) -> bool:
        if self._append(out, path, flt):
            return True
        self._warning(str(path), 0, "Failed to open file")
        return False

    def build_page(self, target: str | Path, mode: BuildMode) -> None:
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)

        headers = self.sorted_sources(Category.HEADER)
        pages = self.sorted_sources(Category.PAGE)
        templates = self.sorted_sources(Category.TEMPLATE)
        if mode.inline:
            styles_inline = self.sorted_sources(Category.STYLE)
            scripts_inline = self.sorted_sources(Category.SCRIPT)
            styles_link: List[str] = []
            scripts_link: List[str] = []
        else:
            styles_inline = []
            scripts_inline = []
            styles_link = self.sorted_targets(Category.STYLE)
            scripts_link = self.sorted_targets(Category.SCRIPT)

        with open(target, "w", encoding=self.encoding, newline="") as out:
            out.write("<!DOCTYPE html><HTML><HEAD>")
            for path in headers:
                self._append_or_warn(out, path, PassThroughFilter())
            for href in styles_link:
                out.write(f'<LINK rel="stylesheet" href="{href}">')
            if styles_inline:
                out.write("<STYLE>\n")
                for path in styles_inline:
                    self._append_or_warn(out, path, CSSFilter())
                out.write("\n</STYLE>")
            out.write("</HEAD><BODY>")

            has_template = False
            for path in templates:
                name = self.tables[Category.TEMPLATE][path].target
                out.write(f'<TEMPLATE data-name="{name}">')
                ok = self._append_or_warn(out, path, PassThroughFilter())
                out.write("</TEMPLATE>")
                has_template = has_template or ok
            for path in pages:
                self._append_or_warn(out, path, PassThroughFilter())

            out.write('<SCRIPT type="text/javascript"><!--\n')
            out.write('"use strict";\n')
            if has_template:
                out.write(TEMPLATE_LOADER)
            for path in scripts_inline:
                if self._append_or_warn(out, path, JSFilter()):
                    out.write(";\n")
            out.write("//-->\n</SCRIPT>")

            for src in scripts_link:
                out.write(f'<SCRIPT type="text/javascript" src="{src}"></SCRIPT>')
            out.write("</BODY></HTML>")

    def materialize(self, category: Category, target_dir: str | Path, mode: BuildMode) -> None:
        """Copy or link every resolved file of ``category`` into ``target_dir``."""

        target_dir = Path(target_dir)
        for src, resource in self.tables[category].items():
            dest = target_dir / resource.target
            if same_file(src, dest):
                self._warning(str(dest), 0, "skipped, points to the same file")
                continue
            try:
                link_file(src, dest, mode)
            except OSError as exc:
                self._warning(str(dest), 0, f"Failed to link: {exc.strerror or exc}")
                continue
            logger.debug("%s %s -> %s", mode.value, src, dest)


__all__ = [
    "DIRECTIVE",
    "PageBuilder",
    "Resource",
    "TEMPLATE_LOADER",
    "disambiguate",
    "log_warning",
    "parse_directive",
]
