"""
tests/test_startup.py -- a bad settings file stops the service before it listens.

Covers:
  - CLI entry point returns 1 and never calls uvicorn.run on missing/malformed config
  - CLI entry point runs uvicorn on the configured port with a valid config
  - create_app() without a config raises ConfigError during startup
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.__main__ import main
from app.ad import ConfigError
from app.main import create_app

from test_config import VALID


class TestCliEntryPoint:
    def test_missing_config_exits_before_listening(self, env, tmp_path) -> None:
        env.setenv("CHECKAUTH_CONFIG", str(tmp_path / "settings.yaml"))
        with patch("app.__main__.uvicorn.run") as run:
            assert main() == 1
        run.assert_not_called()

    def test_malformed_config_exits_before_listening(self, env, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("server: [unclosed", encoding="utf-8")
        env.setenv("CHECKAUTH_CONFIG", str(path))
        with patch("app.__main__.uvicorn.run") as run:
            assert main() == 1
        run.assert_not_called()

    def test_valid_config_starts_uvicorn(self, env, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text(VALID, encoding="utf-8")
        env.setenv("CHECKAUTH_CONFIG", str(path))
        with patch("app.__main__.uvicorn.run") as run:
            assert main() == 0
        run.assert_called_once()
        app = run.call_args.args[0]
        assert app.state.directory_config.base_dn == "DC=corp,DC=example,DC=com"
        assert run.call_args.kwargs["port"] == 5000


class TestAppStartup:
    def test_missing_config_aborts_startup(self, env, tmp_path) -> None:
        env.setenv("CHECKAUTH_CONFIG", str(tmp_path / "settings.yaml"))
        with pytest.raises(ConfigError, match="Could not open"):
            with TestClient(create_app(static_dir=str(tmp_path))):
                pass

    def test_valid_config_loaded_on_startup(self, env, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text(VALID, encoding="utf-8")
        env.setenv("CHECKAUTH_CONFIG", str(path))
        app = create_app(static_dir=str(tmp_path))
        with TestClient(app):
            assert app.state.directory_config.search_attr == "uidNumber"
