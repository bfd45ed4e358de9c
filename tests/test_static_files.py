from __future__ import annotations

from devserve.static_files import (
    DEFAULT_MIME_TYPE,
    RELOAD_SNIPPET,
    guess_mime_type,
    inject_reload_script,
    serve_file,
    serve_static,
)


def test_guess_mime_type():
    assert guess_mime_type("a/b/index.html") == "text/html"
    assert guess_mime_type("app.MJS") == "text/javascript"
    assert guess_mime_type("photo.jpg") == "image/jpeg"
    assert guess_mime_type("archive.unknown") == DEFAULT_MIME_TYPE
    assert guess_mime_type("Makefile") == DEFAULT_MIME_TYPE


def test_inject_reload_script_before_head_close():
    html = b"<html><head><title>x</title></head><body></body></html>"
    result = inject_reload_script(html).decode("utf-8")
    assert result.index(RELOAD_SNIPPET) < result.index("</head>")
    assert result.count(RELOAD_SNIPPET) == 1


def test_inject_reload_script_without_head_appends():
    result = inject_reload_script(b"<p>fragment</p>").decode("utf-8")
    assert result == "<p>fragment</p>" + RELOAD_SNIPPET


def test_serve_file_reads_bytes(site):
    response = serve_file(site / "style.css")
    assert response.status_code == 200
    assert response.mimetype == "text/css"
    assert response.get_data() == b"body { color: red; }"


def test_serve_file_applies_transform_for_extension(site):
    response = serve_file(site / "style.css", {".css": lambda data: data.upper()})
    assert response.get_data() == b"BODY { COLOR: RED; }"


def test_serve_file_missing_is_not_found(site):
    response = serve_file(site / "missing.js")
    assert response.status_code == 404
    assert b"not found" in response.get_data()


def test_serve_static_directory_without_default_document(site):
    response = serve_static("/empty/", site)
    assert response.status_code == 404


def test_serve_static_runtime_routing_falls_back_to_index(site):
    response = serve_static("/app/settings", site, runtime_routing=True)
    assert response.status_code == 200
    assert response.mimetype == "text/html"
    assert b"home" in response.get_data()


def test_serve_static_prefix_mismatch(site):
    response = serve_static("/index.html", site, prefix="/static")
    assert response.status_code == 404


def test_serve_file_with_nul_byte_is_not_found(site):
    response = serve_file(str(site / "a\x00b.html"))
    assert response.status_code == 404


def test_serve_static_with_nul_byte_is_not_found(site):
    assert serve_static("/a\x00b.html", site).status_code == 404
    assert serve_static("/a\x00b.html", site, runtime_routing=True).status_code == 404
