"""Tests for the HTML fallback resolver."""

from pathlib import Path

import pytest
from helpers import FakeHelper, make_context

from nos.handlers.html_fallback import HTMLFallback, is_html_route
from nos.pipeline import CONTINUE, Complete


@pytest.fixture
def fallback(site: Path, fake_helper: FakeHelper) -> HTMLFallback:
    return HTMLFallback(site, fake_helper, cwd=site.parent)


class TestIsHtmlRoute:
    @pytest.mark.parametrize("path", ["/", "/about", "/a/b.html", "/guide.htm", "/X.HTML"])
    def test_html_routes(self, path: str) -> None:
        assert is_html_route(path)

    @pytest.mark.parametrize("path", ["/app.js", "/style.css", "/logo.png", "/a.html.bak"])
    def test_other_extensions(self, path: str) -> None:
        assert not is_html_route(path)


class TestExactPath:
    async def test_serves_file_with_helper_appended(
        self, fallback: HTMLFallback, fake_helper: FakeHelper
    ) -> None:
        outcome = await fallback(make_context("/about.html"))
        assert isinstance(outcome, Complete)
        assert outcome.body == b"<h1>About</h1><!--reload-->"
        assert outcome.content_type.startswith("text/html")
        # The exact path is not registered by this handler
        assert fake_helper.watched == []

    async def test_htm_extension(self, fallback: HTMLFallback) -> None:
        outcome = await fallback(make_context("/guide.htm"))
        assert isinstance(outcome, Complete)
        assert outcome.body.startswith(b"<h1>Guide</h1>")

    async def test_extension_match_is_case_insensitive(
        self, site: Path, fallback: HTMLFallback
    ) -> None:
        (site / "UPPER.HTML").write_text("<p>loud</p>")
        outcome = await fallback(make_context("/UPPER.HTML"))
        assert isinstance(outcome, Complete)
        assert outcome.body == b"<p>loud</p><!--reload-->"

    async def test_head_is_handled(self, fallback: HTMLFallback) -> None:
        outcome = await fallback(make_context("/about.html", method="HEAD"))
        assert isinstance(outcome, Complete)


class TestIndexFallback:
    async def test_root_serves_index_and_watches_it(
        self, fallback: HTMLFallback, fake_helper: FakeHelper
    ) -> None:
        outcome = await fallback(make_context("/"))
        assert isinstance(outcome, Complete)
        assert outcome.body == b"<h1>Home</h1><!--reload-->"
        assert fake_helper.watched == ["site/index.html"]

    async def test_directory_route_serves_nested_index(
        self, fallback: HTMLFallback, fake_helper: FakeHelper
    ) -> None:
        outcome = await fallback(make_context("/docs"))
        assert isinstance(outcome, Complete)
        assert outcome.body.startswith(b"<h1>Docs</h1>")
        assert fake_helper.watched == ["site/docs/index.html"]

    async def test_missing_page_is_watched_before_deferring(
        self, fallback: HTMLFallback, fake_helper: FakeHelper
    ) -> None:
        outcome = await fallback(make_context("/missing"))
        assert outcome is CONTINUE
        # Creating site/missing/index.html later must trigger a reload
        assert fake_helper.watched == ["site/missing/index.html"]

    async def test_directory_without_index_defers(
        self, fallback: HTMLFallback, fake_helper: FakeHelper
    ) -> None:
        assert await fallback(make_context("/empty/")) is CONTINUE
        assert fake_helper.watched == ["site/empty/index.html"]


class TestPassThrough:
    @pytest.mark.parametrize("path", ["/app.js", "/style.css", "/assets/logo.png"])
    async def test_non_html_extensions_continue_without_watching(
        self, path: str, fallback: HTMLFallback, fake_helper: FakeHelper
    ) -> None:
        assert await fallback(make_context(path)) is CONTINUE
        assert fake_helper.watched == []

    async def test_post_continues(self, fallback: HTMLFallback) -> None:
        assert await fallback(make_context("/about.html", method="POST")) is CONTINUE

    async def test_traversal_outside_root_continues(
        self, site: Path, fallback: HTMLFallback, fake_helper: FakeHelper
    ) -> None:
        (site.parent / "secret.html").write_text("nope")
        assert await fallback(make_context("/../secret.html")) is CONTINUE
        assert fake_helper.watched == []

    async def test_nul_byte_in_path_continues(self, fallback: HTMLFallback) -> None:
        assert await fallback(make_context("/a\x00b")) is CONTINUE
        assert await fallback(make_context("/a\x00b.html")) is CONTINUE
