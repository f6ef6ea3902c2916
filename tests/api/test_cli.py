"""
Tests for the API command line.
"""

import logging
from unittest.mock import patch

from api.cli import apply_args, create_parser, main, setup_logging
from core.config import Settings


class TestParser:
    """Test argument parsing and overlay on settings."""

    def test_no_arguments_keep_settings(self):
        args = create_parser().parse_args([])
        settings = apply_args(Settings(host="10.0.0.1", port=9000), args)

        assert settings.host == "10.0.0.1"
        assert settings.port == 9000
        assert args.reload is False
        assert args.init_db is False

    def test_arguments_override_settings(self):
        args = create_parser().parse_args(
            ["--host", "0.0.0.0", "--port", "8080", "--log-level", "DEBUG", "--log-format", "json"]
        )
        settings = apply_args(Settings(), args)

        assert settings.host == "0.0.0.0"
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"
        assert settings.log_format == "json"


class TestMain:
    """Test the entry point."""

    def test_init_db(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite://")
        assert main(["--init-db"]) == 0

    def test_bad_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("API_PORT", "eighty")

        assert main([]) == 2
        assert "API_PORT" in capsys.readouterr().err

    def test_runs_app_factory(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite://")

        with patch("api.cli.uvicorn.run") as run:
            assert main(["--port", "8081"]) == 0

        run.assert_called_once()
        assert run.call_args.args == ("api.main:create_app",)
        assert run.call_args.kwargs["factory"] is True
        assert run.call_args.kwargs["port"] == 8081

    def test_setup_logging_sets_level(self):
        setup_logging("warning", "json")
        assert logging.getLogger().level == logging.WARNING
        setup_logging("INFO", "text")
