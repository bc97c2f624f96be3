import importlib
import io
from unittest.mock import AsyncMock, patch

import pytest
from rich.console import Console

from inspector_relay.cli import load_config, main, print_banner
from inspector_relay.supervisor import Supervisor
from inspector_relay.utils import RelayConfig

cli_main = importlib.import_module("inspector_relay.cli.main")


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "WS_PORT",
        "UI_PORT",
        "UI_PATH",
        "INSPECTOR_HOST",
        "INSPECTOR_LOG_LEVEL",
        "INSPECTOR_LOG_FILE",
        "INSPECTOR_RICH_LOGGING",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_load_config_defaults(clean_env):
    config = load_config([])
    assert config.ws_port == 8080
    assert config.ui_port == 3001
    assert config.ui_path == "/ui"


def test_flags_override_environment(clean_env):
    clean_env.setenv("WS_PORT", "9000")
    clean_env.setenv("UI_PORT", "9001")

    config = load_config(["--ws-port", "8081", "--ui-path", "/inspect"])
    assert config.ws_port == 8081
    assert config.ui_port == 9001
    assert config.ui_path == "/inspect"


def test_mode_flags(clean_env):
    assert load_config(["--ui-only"]).ui_only is True
    assert load_config(["--ws-only"]).ws_only is True


def test_mode_flags_are_exclusive(clean_env):
    with pytest.raises(SystemExit) as exc_info:
        load_config(["--ui-only", "--ws-only"])
    assert exc_info.value.code == 2


def test_invalid_environment_port(clean_env):
    clean_env.setenv("UI_PORT", "abc")
    with pytest.raises(SystemExit) as exc_info:
        load_config([])
    assert exc_info.value.code == 2


def test_print_banner():
    output = io.StringIO()
    config = RelayConfig(ws_port=8081, ui_port=3002)

    print_banner(config, Console(file=output, width=100))

    text = output.getvalue()
    assert "http://localhost:3002/ui" in text
    assert "http://localhost:3002/api/logs" in text
    assert "ws://localhost:8081" in text


def test_print_banner_ws_only():
    output = io.StringIO()
    print_banner(RelayConfig(ws_only=True), Console(file=output, width=100))

    text = output.getvalue()
    assert "ws://localhost:8080" in text
    assert "/api/logs" not in text


def test_main_returns_supervisor_status(clean_env):
    with patch.object(cli_main, "configure_logging"), patch.object(
        Supervisor, "run", new=AsyncMock(return_value=0)
    ):
        assert main(["--ws-only"]) == 0


def test_main_reports_failure(clean_env):
    with patch.object(cli_main, "configure_logging"), patch.object(
        Supervisor, "run", new=AsyncMock(side_effect=RuntimeError("boom"))
    ):
        assert main([]) == 1
