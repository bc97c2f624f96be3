import pytest

from inspector_relay.utils import RelayConfig


def test_defaults():
    config = RelayConfig.from_env({})

    assert config.host == "localhost"
    assert config.ws_port == 8080
    assert config.ui_port == 3001
    assert config.ui_path == "/ui"
    assert config.heartbeat_interval == 30.0
    assert config.log_level == "INFO"
    assert config.log_file is None
    assert config.enable_rich_logging is True
    assert not config.ui_only and not config.ws_only


def test_from_env():
    config = RelayConfig.from_env(
        {
            "WS_PORT": "9001",
            "UI_PORT": "9002",
            "UI_PATH": "/monitor",
            "INSPECTOR_HOST": "0.0.0.0",
            "INSPECTOR_LOG_LEVEL": "DEBUG",
            "INSPECTOR_LOG_FILE": "relay.log",
            "INSPECTOR_RICH_LOGGING": "False",
        }
    )

    assert config.ws_port == 9001
    assert config.ui_port == 9002
    assert config.ui_path == "/monitor"
    assert config.host == "0.0.0.0"
    assert config.log_level == "DEBUG"
    assert config.log_file == "relay.log"
    assert config.enable_rich_logging is False


def test_invalid_port_raises():
    with pytest.raises(ValueError):
        RelayConfig.from_env({"WS_PORT": "eighty"})


def test_update_skips_none_and_keeps_unknown_keys():
    config = RelayConfig()
    config.update(ws_port=9100, ui_port=None, theme="dark")

    assert config.ws_port == 9100
    assert config.ui_port == 3001
    assert config.custom == {"theme": "dark"}
    assert config.get("theme") == "dark"
    assert config.get("missing", "fallback") == "fallback"


def test_to_dict():
    config = RelayConfig(ws_port=1234)
    config.update(extra=1)

    data = config.to_dict()
    assert data["ws_port"] == 1234
    assert data["ui_path"] == "/ui"
    assert data["extra"] == 1
