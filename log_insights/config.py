import copy
import logging
import os

import yaml

logger = logging.getLogger(__name__)


class Config:
    """Configuration manager that loads from YAML and merges with defaults."""

    DEFAULTS = {
        "server": {
            "host": "0.0.0.0",
            "port": 5000,
            "debug": False,
        },
        "ingestion": {
            "encoding": "utf-8-sig",
        },
        "analytics": {
            "top_companies_limit": 10,
            "max_workers": None,
        },
        "summarizer": {
            "enabled": True,
            "model": "gemini-2.5-flash",
            "base_url": "https://generativelanguage.googleapis.com/v1beta/models",
            "api_key_env": "API_KEY",
            "timeout_seconds": 120,
            "sample_size": 150,
            "min_content_length": 5,
        },
        "logging": {
            "level": "INFO",
        },
    }

    def __init__(self, config_path=None):
        self._config = copy.deepcopy(self.DEFAULTS)

        if config_path is not None:
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    user_config = yaml.safe_load(f)

                if user_config and isinstance(user_config, dict):
                    self._config = self._deep_merge(self._config, user_config)
            except FileNotFoundError:
                logger.info("Config file %s not found, using defaults", config_path)
            except yaml.YAMLError:
                logger.warning("Invalid YAML in %s, using defaults", config_path)

    @classmethod
    def from_env(cls, default_path="config.yaml"):
        """Load from $CONFIG_PATH, falling back to default_path."""
        return cls(os.environ.get("CONFIG_PATH", default_path))

    @staticmethod
    def _deep_merge(base, override):
        """Recursively merge override dict into base dict."""
        result = copy.deepcopy(base)
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def get(self, key, default=None):
        """Get a top-level config key."""
        return self._config.get(key, default)

    def __getitem__(self, key):
        return self._config[key]

    def __contains__(self, key):
        return key in self._config
