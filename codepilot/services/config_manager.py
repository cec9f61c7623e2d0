"""
Configuration Manager - Handle backend settings persistence
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manage configuration persistence"""

    _instance = None
    _config_file = None

    def __init__(self, config_dir: str | None = None):
        # 1st: explicit argument or environment variable
        config_dir = config_dir or os.environ.get("CODEPILOT_CONFIG_DIR")

        # 2nd: ~/.codepilot
        if not config_dir:
            config_dir = os.path.expanduser("~/.codepilot")

        config_path = Path(config_dir)
        try:
            config_path.mkdir(parents=True, exist_ok=True)
            self._config_file = config_path / "config.json"
        except OSError as e:
            logger.warning("[Config] Cannot write to %s: %s", config_dir, e)
            self._config_file = None

        # Last resort: temp dir
        if not self._config_file:
            tmp_dir = Path(tempfile.gettempdir()) / "codepilot"
            tmp_dir.mkdir(parents=True, exist_ok=True)
            self._config_file = tmp_dir / "config.json"
            logger.info("[Config] Using temporary config path: %s", self._config_file)

        self._config = self._load_config()

    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = ConfigManager()
        return cls._instance

    @property
    def config_file(self) -> Path:
        return self._config_file

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file, layered over the defaults"""
        config = self._default_config()
        if not self._config_file.exists():
            return config

        try:
            with open(self._config_file) as f:
                stored = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("[Config] Error loading config: %s", e)
            return config

        for key, value in stored.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key] = {**config[key], **value}
            else:
                config[key] = value
        return config

    def _default_config(self) -> dict[str, Any]:
        """Get default configuration"""
        return {
            "provider": "gemini",
            "gemini": {"apiKey": "", "model": "gemini-1.5-flash"},
            "openai": {"apiKey": "", "model": "gpt-4"},
            "vllm": {
                "endpoint": "http://localhost:8000",
                "apiKey": "",
                "model": "meta-llama/Llama-2-7b-chat-hf",
            },
            "gateway": {"timeoutSeconds": 30},
            "suggestions": {"quietPeriodMs": 2000},
            "sessions": {"idleTimeoutSeconds": 1800, "maxSessions": 1000},
            "server": {"host": "0.0.0.0", "port": 8000},
        }

    def get_config(self) -> dict[str, Any]:
        """Get current configuration"""
        # Reload config from file to ensure we have the latest
        self._config = self._load_config()
        return self._config.copy()

    def save_config(self, config: dict[str, Any]):
        """Save configuration to file"""
        self._config.update(config)

        self._config_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self._config_file, "w") as f:
                json.dump(self._config, f, indent=2)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}")

    def get(self, key: str, default=None):
        """Get specific config value"""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set specific config value"""
        self._config[key] = value
        self.save_config(self._config)

    @property
    def quiet_period_seconds(self) -> float:
        """Suggestion debounce window"""
        return float(self._config.get("suggestions", {}).get("quietPeriodMs", 2000)) / 1000.0

    @property
    def session_limits(self) -> tuple[float, int]:
        """(idle timeout in seconds, maximum live sessions)"""
        cfg = self._config.get("sessions", {})
        return float(cfg.get("idleTimeoutSeconds", 1800)), int(cfg.get("maxSessions", 1000))
