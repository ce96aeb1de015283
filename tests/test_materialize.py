import os

import pytest

from webproject.materialize import BuildMode, link_file, same_file
from webproject.paths import Category, SearchPaths

needs_links = pytest.mark.skipif(os.name == "nt", reason="needs POSIX links")


@pytest.mark.parametrize(
    "text, mode",
    [
        ("s", BuildMode.SYMLINK),
        ("symlink", BuildMode.SYMLINK),
        ("h", BuildMode.HARDLINK),
        ("c", BuildMode.COPY),
        ("COPY", BuildMode.COPY),
        ("o", BuildMode.ONEFILE),
        ("p", BuildMode.ONEFILE),
        ("onefile", BuildMode.ONEFILE),
        ("onepage", BuildMode.ONEFILE),
    ],
)
def test_parse_build_mode(text, mode):
    assert BuildMode.parse(text) is mode


def test_parse_build_mode_rejects_unknown():
    with pytest.raises(ValueError, match="Invalid build mode: zip"):
        BuildMode.parse("zip")


def test_only_onefile_is_inline():
    assert [m for m in BuildMode if m.inline] == [BuildMode.ONEFILE]


def test_same_file():
    assert same_file("a/../b.js", "b.js")
    assert not same_file("a/b.js", "b.js")


def test_copy_replaces_existing_file(tmp_path, write):
    src = write("src/a.css", "new")
    dest = write("out/a.css", "old")

    link_file(src, dest, BuildMode.COPY)

    assert dest.read_text() == "new"
    assert not dest.is_symlink()


@needs_links
def test_symlink_points_at_source(tmp_path, write):
    src = write("src/a.css", "x")

    link_file(src, tmp_path / "out" / "deep" / "a.css", BuildMode.SYMLINK)

    dest = tmp_path / "out" / "deep" / "a.css"
    assert dest.is_symlink()
    assert os.readlink(dest) == str(src)


@needs_links
def test_hardlink_shares_inode(tmp_path, write):
    src = write("src/a.css", "x")
    dest = tmp_path / "out" / "a.css"
    dest.parent.mkdir()
    os.symlink(src, dest)

    link_file(src, dest, BuildMode.HARDLINK)

    assert not dest.is_symlink()
    assert os.stat(dest).st_ino == os.stat(src).st_ino


@needs_links
def test_build_in_symlink_mode(tmp_path, write, builder, warnings):
    write("src/main.js", "//#style a.css\n//#resource img/x.png\n")
    write("src/a.css", "a{}")
    write("src/img/x.png", "png")
    builder.prepare(tmp_path / "src" / "main.js", SearchPaths())

    builder.build(tmp_path / "out" / "index.html", BuildMode.SYMLINK)

    out = tmp_path / "out"
    for name in ("a.css", "main.js", "img/x.png"):
        assert (out / name).is_symlink()
        assert (out / name).resolve() == (tmp_path / "src" / name).resolve()
    assert warnings == []


def test_same_path_is_skipped_with_warning(tmp_path, write, builder, warnings):
    write("main.js", "//#style a.css\n")
    write("a.css", "a{}")
    builder.prepare(tmp_path / "main.js", SearchPaths())

    builder.build(tmp_path / "index.html", BuildMode.COPY)

    assert (tmp_path / "a.css").read_text() == "a{}"
    assert (str(tmp_path / "a.css"), 0, "skipped, points to the same file") in warnings
    assert (str(tmp_path / "main.js"), 0, "skipped, points to the same file") in warnings


def test_failure_on_one_file_does_not_stop_the_rest(tmp_path, write, builder, warnings):
    write("src/main.js", "//#resource a.txt\n//#resource b.txt\n")
    write("src/a.txt", "a")
    write("src/b.txt", "b")
    builder.prepare(tmp_path / "src" / "main.js", SearchPaths())
    # a directory in the way cannot be replaced by a file
    write("out/a.txt/keep", "")

    builder.materialize(Category.RESOURCE, tmp_path / "out", BuildMode.COPY)

    assert (tmp_path / "out" / "b.txt").read_text() == "b"
    assert len(warnings) == 1
    assert warnings[0][0] == str(tmp_path / "out" / "a.txt")
    assert warnings[0][2].startswith("Failed to link: ")


@needs_links
def test_output_directory_aliasing_sources_is_skipped(tmp_path, write, builder, warnings):
    write("src/main.js", "//#style a.css\n")
    write("src/a.css", "a{}")
    os.symlink(tmp_path / "src", tmp_path / "alias")
    builder.prepare(tmp_path / "src" / "main.js", SearchPaths())

    builder.build(tmp_path / "alias" / "index.html", BuildMode.COPY)

    assert (tmp_path / "src" / "a.css").read_text() == "a{}"
    assert (tmp_path / "src" / "main.js").read_text() == "//#style a.css\n"
    assert (str(tmp_path / "alias" / "a.css"), 0, "skipped, points to the same file") in warnings
    assert (str(tmp_path / "alias" / "main.js"), 0, "skipped, points to the same file") in warnings
    assert not any(w[2].startswith("Failed to link") for w in warnings)


@needs_links
def test_symlink_rebuild_replaces_previous_link(tmp_path, write, builder, warnings):
    write("src/main.js", "//#style a.css\n")
    write("src/a.css", "a{}")
    builder.prepare(tmp_path / "src" / "main.js", SearchPaths())

    builder.build(tmp_path / "out" / "index.html", BuildMode.SYMLINK)
    builder.build(tmp_path / "out" / "index.html", BuildMode.SYMLINK)

    assert (tmp_path / "out" / "a.css").is_symlink()
    assert (tmp_path / "out" / "a.css").read_text() == "a{}"
    assert warnings == []


def test_same_file_resolves_directory_links(tmp_path, write):
    src = write("src/a.css")
    if os.name != "nt":
        os.symlink(tmp_path / "src", tmp_path / "alias")
        assert same_file(src, tmp_path / "alias" / "a.css")
    assert not same_file(src, tmp_path / "out" / "a.css")
