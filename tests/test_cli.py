"""Tests for nos.cli — argument parsing and the serve entrypoint."""

from pathlib import Path
from unittest.mock import patch

import pytest

from nos.app import App
from nos.cli import build_parser, main
from nos.cli._run import config_from_args
from nos.handlers import ProxyForward


class TestCLIHelp:
    def test_help_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "statically serve a folder" in out
        assert "--proxy-to" in out


class TestParser:
    def test_defaults(self) -> None:
        args = build_parser().parse_args([])
        config = config_from_args(args)
        assert config.root == "."
        assert config.port == 8080
        assert config.host == "0.0.0.0"
        assert config.proxy_to is None
        assert config.open_browser is True
        assert config.production is False

    def test_all_options(self) -> None:
        args = build_parser().parse_args(
            [
                "site",
                "-p",
                "3000",
                "--host",
                "127.0.0.1",
                "-t",
                "127.0.0.1:8000",
                "--open-browser",
                "off",
                "--production",
                "--log-level",
                "debug",
            ]
        )
        config = config_from_args(args)
        assert config.root == "site"
        assert config.port == 3000
        assert config.host == "127.0.0.1"
        assert config.proxy_to == "127.0.0.1:8000"
        assert config.open_browser is False
        assert config.production is True
        assert config.log_level == "debug"

    def test_open_browser_rejects_other_values(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--open-browser", "maybe"])
        assert exc_info.value.code == 2

    def test_port_must_be_int(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["-p", "eighty"])
        assert exc_info.value.code == 2


class TestServe:
    def test_missing_directory_exits_one(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("nos.server.dev.run_server") as run_server:
            with pytest.raises(SystemExit) as exc_info:
                main([str(tmp_path / "nope"), "--open-browser", "off"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err
        run_server.assert_not_called()

    def test_invalid_proxy_exits_one(
        self, site: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("nos.server.dev.run_server") as run_server:
            with pytest.raises(SystemExit) as exc_info:
                main([str(site), "-t", " ", "--open-browser", "off"])
        assert exc_info.value.code == 1
        assert "Invalid proxy target" in capsys.readouterr().err
        run_server.assert_not_called()

    def test_starts_server_with_config(self, site: Path) -> None:
        with patch("nos.server.dev.run_server") as run_server:
            main([str(site), "-p", "9123", "-t", "8000", "--open-browser", "off"])

        run_server.assert_called_once()
        app, host, port = run_server.call_args.args
        assert isinstance(app, App)
        assert (host, port) == ("0.0.0.0", 9123)
        assert run_server.call_args.kwargs == {"log_level": "info"}
        assert app.config.port == 9123
        assert isinstance(list(app.pipeline)[-1], ProxyForward)

    async def test_open_browser_runs_on_startup(self, site: Path) -> None:
        with patch("nos.server.dev.run_server") as run_server:
            main([str(site), "--production"])
        app = run_server.call_args.args[0]

        with patch("webbrowser.open") as open_browser:
            await app.startup()
        open_browser.assert_called_once_with("http://127.0.0.1:8080")
        await app.shutdown()

    async def test_open_browser_off_registers_nothing(self, site: Path) -> None:
        with patch("nos.server.dev.run_server") as run_server:
            main([str(site), "--production", "--open-browser", "off"])
        app = run_server.call_args.args[0]

        with patch("webbrowser.open") as open_browser:
            await app.startup()
        open_browser.assert_not_called()
        await app.shutdown()
