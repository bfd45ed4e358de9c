from __future__ import annotations

import pytest

from app import create_app
from devserve.params import Configuration
from devserve.reload_channel import ReloadChannel

INDEX_HTML = "<html><head><title>home</title></head><body>home</body></html>"
DOCS_HTML = "<html><head><title>docs</title></head><body>docs</body></html>"


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    (root / "docs").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (root / "docs" / "index.html").write_text(DOCS_HTML, encoding="utf-8")
    (root / "style.css").write_text("body { color: red; }", encoding="utf-8")
    (root / "notes.xyz").write_text("plain notes", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("top secret", encoding="utf-8")
    return root


@pytest.fixture
def make_client(site):
    def factory(channel=None, **options):
        config = Configuration(dirpath=str(site), **options)
        app = create_app(config, channel if channel is not None else ReloadChannel())
        app.config.update(TESTING=True)
        return app.test_client()

    return factory


@pytest.fixture
def client(make_client):
    return make_client()
