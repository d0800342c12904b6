"""Shared fixtures: a small site tree to serve."""

from pathlib import Path

import pytest
from helpers import FakeHelper


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A served root inside *tmp_path* (which doubles as the cwd)::

        site/
          index.html
          about.html
          guide.htm
          app.js
          style.css
          .env
          docs/index.html
          empty/
          assets/logo.png
    """
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_text("<h1>Home</h1>")
    (root / "about.html").write_text("<h1>About</h1>")
    (root / "guide.htm").write_text("<h1>Guide</h1>")
    (root / "app.js").write_text("console.log('hi');")
    (root / "style.css").write_text("body { color: red; }")
    (root / ".env").write_text("SECRET=1")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_text("<h1>Docs</h1>")
    (root / "empty").mkdir()
    (root / "assets").mkdir()
    (root / "assets" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    return root


@pytest.fixture
def fake_helper() -> FakeHelper:
    return FakeHelper()
