from __future__ import annotations

import os

import pytest

from devserve.paths import is_within, resolve_file, resolve_path, sanitize_path


@pytest.mark.parametrize(
    "pathname, expected",
    [
        ("", ""),
        ("/", ""),
        ("/index.html", "index.html"),
        ("/a/./b/../c.txt", "a/c.txt"),
        ("/../../etc/passwd", "etc/passwd"),
        ("../../../etc/passwd", "etc/passwd"),
        ("a/../../../x", "x"),
        ("..", ""),
        ("..\\..\\windows\\win.ini", "windows/win.ini"),
        ("/..hidden/file", "..hidden/file"),
    ],
)
def test_sanitize_path_never_climbs(pathname, expected):
    assert sanitize_path(pathname) == expected


@pytest.mark.parametrize(
    "pathname",
    ["/../../etc/passwd", "/" + "../" * 20 + "etc/passwd", "/a/b/../../../../x", "/./../.", "//../x"],
)
def test_resolved_path_stays_under_root(tmp_path, pathname):
    root = tmp_path / "srv" / "site"
    root.mkdir(parents=True)
    resolved = resolve_path(pathname, root)
    assert resolved is not None
    assert is_within(root, resolved)


def test_traversal_example_lands_inside_root(tmp_path):
    root = tmp_path / "srv" / "site"
    root.mkdir(parents=True)
    resolved = resolve_path("/../../etc/passwd", root)
    assert resolved == root / "etc" / "passwd"


def test_resolution_is_idempotent(tmp_path):
    first = resolve_path("/docs/../img/./logo.png", tmp_path)
    second = resolve_path("/docs/../img/./logo.png", tmp_path)
    assert first == second == tmp_path / "img" / "logo.png"


def test_empty_path_is_root(tmp_path):
    assert resolve_path("", tmp_path) == tmp_path


def test_prefix_mismatch_returns_none(tmp_path):
    assert resolve_path("/other/file.js", tmp_path, prefix="/static") is None


def test_prefix_is_stripped(tmp_path):
    assert resolve_path("/static/app.js", tmp_path, prefix="/static") == tmp_path / "app.js"


def test_directory_resolves_to_default_document(site):
    assert resolve_file("/docs/", site) == site / "docs" / "index.html"
    assert resolve_file("/", site) == site / "index.html"


def test_file_path_is_left_alone(site):
    assert resolve_file("/style.css", site) == site / "style.css"


def test_is_within_rejects_sibling(tmp_path):
    assert not is_within(tmp_path / "site", tmp_path / "site-other" / "x")
    assert is_within(tmp_path, os.path.join(tmp_path, "a", "b"))


def test_nul_byte_is_rejected(tmp_path):
    assert resolve_path("/a\x00b.html", tmp_path) is None
    assert resolve_file("/docs/\x00", tmp_path) is None
