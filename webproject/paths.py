"""Resource categories and search path lookup.

Every directive names a file in one of six categories.  Each category has
its own ordered list of search directories which :class:`SearchPaths`
scans front to back when the file is not found next to the referencing
source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Category(Enum):
    """Kinds of linked files, valued by their directive command."""

    SCRIPT = "require"
    STYLE = "style"
    PAGE = "page"
    TEMPLATE = "template"
    HEADER = "header"
    RESOURCE = "resource"

    @property
    def command(self) -> str:
        return self.value

    @classmethod
    def from_command(cls, command: str) -> Category | None:
        try:
            return cls(command)
        except ValueError:
            return None


COMMANDS = ", ".join(c.command for c in Category)

# SearchPaths attribute holding the directories of each category
_FIELDS = {
    Category.SCRIPT: "scripts",
    Category.STYLE: "styles",
    Category.PAGE: "page_fragments",
    Category.TEMPLATE: "page_templates",
    Category.HEADER: "header_fragments",
    Category.RESOURCE: "resources",
}


@dataclass
class SearchPaths:
    """Ordered search directories, one list per :class:`Category`."""

    scripts: list[Path] = field(default_factory=list)
    styles: list[Path] = field(default_factory=list)
    page_fragments: list[Path] = field(default_factory=list)
    page_templates: list[Path] = field(default_factory=list)
    header_fragments: list[Path] = field(default_factory=list)
    resources: list[Path] = field(default_factory=list)

    def for_category(self, category: Category) -> list[Path]:
        return getattr(self, _FIELDS[category])

    def add(self, category: Category, directory: str | Path) -> None:
        self.for_category(category).append(Path(directory))

    def find(self, category: Category, name: str) -> Path | None:
        """Return the first ``directory/name`` that is a regular file."""

        for directory in self.for_category(category):
            candidate = Path(directory) / name
            if candidate.is_file():
                return candidate
        return None


__all__ = ["Category", "COMMANDS", "SearchPaths"]
