"""Inspector Relay configuration

Configuration priority: command line > environment variables > defaults.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class RelayConfig:
    """Relay configuration

    Holds the options of every component: relay hub, UI server and logging.
    """

    # Relay hub
    host: str = "localhost"
    ws_port: int = 8080
    heartbeat_interval: float = 30.0
    close_timeout: float = 2.0

    # UI server
    ui_port: int = 3001
    ui_path: str = "/ui"

    # Which servers to start
    ui_only: bool = False
    ws_only: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    enable_rich_logging: bool = True

    custom: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "RelayConfig":
        """Create a configuration from environment variables

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            Configuration with environment overrides applied

        Raises:
            ValueError: if a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        config = cls()

        config.host = env.get("INSPECTOR_HOST", config.host)
        config.ws_port = int(env.get("WS_PORT", str(config.ws_port)))
        config.ui_port = int(env.get("UI_PORT", str(config.ui_port)))
        config.ui_path = env.get("UI_PATH", config.ui_path)

        config.log_level = env.get("INSPECTOR_LOG_LEVEL", config.log_level)
        config.log_file = env.get("INSPECTOR_LOG_FILE", config.log_file)
        config.enable_rich_logging = (
            env.get("INSPECTOR_RICH_LOGGING", "true").lower() == "true"
        )

        return config

    def update(self, **kwargs) -> None:
        """Update options, ignoring ``None`` values

        Args:
            **kwargs: Options to set; unknown keys go to ``custom``
        """
        for key, value in kwargs.items():
            if value is None:
                continue
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                self.custom[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        if hasattr(self, key):
            return getattr(self, key)
        return self.custom.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "host": self.host,
            "ws_port": self.ws_port,
            "heartbeat_interval": self.heartbeat_interval,
            "close_timeout": self.close_timeout,
            "ui_port": self.ui_port,
            "ui_path": self.ui_path,
            "ui_only": self.ui_only,
            "ws_only": self.ws_only,
            "log_level": self.log_level,
            "log_file": self.log_file,
            "enable_rich_logging": self.enable_rich_logging,
        }
        result.update(self.custom)
        return result
