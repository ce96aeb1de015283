import sys
from pathlib import Path

import pytest

repo_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(repo_root))

from webproject.builder import PageBuilder  # noqa: E402
from webproject.paths import SearchPaths  # noqa: E402


@pytest.fixture()
def write(tmp_path):
    """Create ``tmp_path/rel`` with ``content`` and return its path."""

    def _write(rel, content=""):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def warnings():
    return []


@pytest.fixture()
def builder(warnings):
    return PageBuilder(lambda file, line, msg: warnings.append((file, line, msg)))


@pytest.fixture()
def paths():
    return SearchPaths()
