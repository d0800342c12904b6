"""Tests for pipeline assembly in development and production modes."""

from pathlib import Path

import pytest

from nos.assemble import assemble
from nos.config import ServeConfig
from nos.errors import ConfigurationError
from nos.handlers import (
    DevHelper,
    DirectoryListing,
    HTMLFallback,
    ProxyForward,
    StaticFiles,
    access_log,
)
from nos.watch import ReloadBroadcaster, WatchRegistry


@pytest.fixture
def helper(tmp_path: Path) -> DevHelper:
    return DevHelper(WatchRegistry(tmp_path), ReloadBroadcaster())


def _kinds(pipeline) -> list[type]:
    return [type(handler) for handler in pipeline]


class TestDevelopment:
    def test_order(self, site: Path, helper: DevHelper) -> None:
        pipeline = assemble(ServeConfig(root=site), helper=helper)
        handlers = list(pipeline)
        assert handlers[0] is access_log
        assert handlers[1] is helper
        assert _kinds(pipeline)[2:] == [HTMLFallback, StaticFiles, DirectoryListing]

    def test_proxy_is_last(self, site: Path, helper: DevHelper) -> None:
        pipeline = assemble(ServeConfig(root=site, proxy_to="8000"), helper=helper)
        last = list(pipeline)[-1]
        assert isinstance(last, ProxyForward)
        assert last.target == "http://127.0.0.1:8000"
        assert len(pipeline) == 6

    def test_requires_helper(self, site: Path) -> None:
        with pytest.raises(ConfigurationError, match="DevHelper"):
            assemble(ServeConfig(root=site))


class TestProduction:
    def test_order(self, site: Path) -> None:
        pipeline = assemble(ServeConfig(root=site, production=True))
        assert list(pipeline)[0] is access_log
        assert _kinds(pipeline)[1:] == [StaticFiles, DirectoryListing]

    def test_no_live_reload(self, site: Path, helper: DevHelper) -> None:
        # A helper handed to production assembly is ignored
        pipeline = assemble(ServeConfig(root=site, production=True), helper=helper)
        assert helper not in list(pipeline)
        assert HTMLFallback not in _kinds(pipeline)

    def test_proxy_is_last(self, site: Path) -> None:
        pipeline = assemble(ServeConfig(root=site, production=True, proxy_to="api:9000"))
        assert _kinds(pipeline)[-1] is ProxyForward


class TestInvalidProxy:
    def test_empty_target(self, site: Path) -> None:
        with pytest.raises(ConfigurationError, match="proxy target"):
            assemble(ServeConfig(root=site, production=True, proxy_to="   "))
