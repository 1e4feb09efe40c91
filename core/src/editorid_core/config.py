"""Configuration management for editorid"""

import copy
import os
from pathlib import Path
from typing import Dict, Any, Optional
import yaml
from appdirs import user_config_dir
from dotenv import load_dotenv

from .results import RefreshOptions
from .variants import ApplicationVariant


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries.

    For nested dicts, recursively merge instead of overwriting, so a
    config file can set refresh.clear_workspace without losing the other
    refresh defaults.

    Args:
        base: Base configuration dict
        override: Override values to merge in

    Returns:
        Merged dictionary (base is modified in place and returned)
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class Config:
    """Manage editorid configuration"""

    def __init__(self, config_path: Optional[Path] = None):
        # Load environment variables
        load_dotenv()

        self.app_name = "editorid"
        self.config_dir = Path(user_config_dir(self.app_name))

        self.config_path = Path(config_path) if config_path else self.config_dir / "config.yaml"

        # Defaults plus the config file; this is what save() writes
        self._stored = self._load_stored()
        self._config = self._apply_env(copy.deepcopy(self._stored))

    def _load_stored(self) -> Dict[str, Any]:
        """Load configuration from defaults and the config file"""
        config = self._get_defaults()

        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                file_config = yaml.safe_load(f) or {}
                _deep_merge(config, file_config)

        return config

    def _apply_env(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply EDITORID_* environment overrides"""
        env_overrides = {
            'home_directory': os.getenv('EDITORID_HOME'),
            'variant': os.getenv('EDITORID_VARIANT'),
        }
        for key, value in env_overrides.items():
            if value:
                config[key] = value

        user_id = os.getenv('EDITORID_USER_ID')
        if user_id:
            config['cache']['user_id'] = user_id

        log_level = os.getenv('EDITORID_LOG_LEVEL')
        if log_level:
            config['logging']['level'] = log_level.upper()

        return config

    def _get_defaults(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            'home_directory': None,  # None means the current user's home
            'variant': None,  # None means detect from the environment

            'refresh': {
                'reset_identifiers': True,
                'clean_telemetry': True,
                'clear_workspace': False,
                'clear_cache': True,
            },

            'cache': {
                'user_id': None,
            },

            'store': {
                'atomic_writes': True,
                'detect_concurrent_writes': True,
            },

            'logging': {
                'level': 'WARNING',
            },
        }

    def save(self):
        """Save configuration to file (environment overrides are not saved)"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            yaml.dump(self._stored, f, default_flow_style=False)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with dot notation support"""
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """Set configuration value with dot notation support"""
        keys = key.split('.')

        for config in (self._stored, self._config):
            for k in keys[:-1]:
                if k not in config or not isinstance(config[k], dict):
                    config[k] = {}
                config = config[k]
            config[keys[-1]] = value

        self.save()

    def as_dict(self) -> Dict[str, Any]:
        """Get a copy of the merged configuration"""
        return yaml.safe_load(yaml.safe_dump(self._config))

    @property
    def home_directory(self) -> Optional[Path]:
        """Get the home directory override, if any"""
        value = self.get('home_directory')
        return Path(value).expanduser() if value else None

    @property
    def variant(self) -> Optional[ApplicationVariant]:
        """Get the configured editor variant, if any"""
        value = self.get('variant')
        return ApplicationVariant.from_name(value) if value else None

    @property
    def user_id(self) -> Optional[str]:
        """Get the user whose cache entry a refresh clears"""
        value = self.get('cache.user_id')
        return str(value) if value else None

    @property
    def atomic_writes(self) -> bool:
        """Whether storage.json is replaced via a temporary file"""
        return bool(self.get('store.atomic_writes', True))

    @property
    def detect_concurrent_writes(self) -> bool:
        """Whether to refuse saving over a storage.json changed since load"""
        return bool(self.get('store.detect_concurrent_writes', True))

    @property
    def log_level(self) -> str:
        """Get the logging level name"""
        return str(self.get('logging.level', 'WARNING')).upper()

    def refresh_options(self) -> RefreshOptions:
        """Build refresh options from the configured defaults"""
        return RefreshOptions(
            reset_identifiers=bool(self.get('refresh.reset_identifiers', True)),
            clean_telemetry=bool(self.get('refresh.clean_telemetry', True)),
            clear_workspace=bool(self.get('refresh.clear_workspace', False)),
            clear_cache=bool(self.get('refresh.clear_cache', True)),
            user_id=self.user_id,
        )
