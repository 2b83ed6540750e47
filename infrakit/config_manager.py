"""
config_manager.py: module for managing multiple configuration sources
"""
import os
import logging
from pathlib import Path
import yaml
from dotenv import dotenv_values
from typing import Dict, Any, Optional
from enum import Enum

from .errors import ConfigError

logger = logging.getLogger("infrakit.config")

ENV_PREFIX = "INFRAKIT_"

def coerce_name(value: Any, what: str) -> str:
    """
    coerce_name: returns a config value usable as a name. YAML turns bare
    numbers into ints (`cluster: 2024`), those are read back as strings.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{what} must be a non-empty string, got {value!r}")
    return value

class ConfigSource(Enum):
    """Enumeration of configuration sources"""
    DEFAULTS = "defaults"
    GLOBAL_CONFIG = "global_config"  # ~/.config/infrakit/config.yaml
    PROJECT_CONFIG = "project_config"  # ./infra.yaml or ./.infrakit.yaml in project
    DOTENV = "dotenv"  # .env file in current directory
    ENVIRONMENT = "environment"  # INFRAKIT_* environment variables
    COMMAND_LINE = "command_line"  # Command line arguments

class ConfigManager:
    """
    ConfigManager: class that manages multiple configuration sources with priority order
    """

    def __init__(self, project_dir: Optional[Path] = None, global_dir: Optional[Path] = None):
        self.project_dir = project_dir or Path.cwd()
        self.global_dir = global_dir or Path.home() / ".config" / "infrakit"
        self.command_line = {}
        self.config_data = {}
        self.priority_order = [
            ConfigSource.DEFAULTS,
            ConfigSource.GLOBAL_CONFIG,
            ConfigSource.PROJECT_CONFIG,
            ConfigSource.DOTENV,
            ConfigSource.ENVIRONMENT,
            ConfigSource.COMMAND_LINE
        ]

    def load_config(self, config_source: ConfigSource = None):
        """
        Load configuration from specified source or use default priority order
        """
        if config_source is not None:
            return self._load_single_source(config_source)
        else:
            return self._load_with_priority()

    def _load_with_priority(self):
        """Load configuration following priority order"""
        self.config_data = {}
        for source in self.priority_order:
            try:
                source_config = self._load_single_source(source)
            except (OSError, yaml.YAMLError) as e:
                # A broken source must not hide the remaining ones
                logger.warning(f"Ignoring {source.value} configuration: {e}")
                continue
            if source_config:
                self._merge_config(self.config_data, source_config)

        return self.config_data

    def _load_single_source(self, source: ConfigSource):
        """Load configuration from a single source"""
        if source == ConfigSource.DEFAULTS:
            return self._get_defaults()

        elif source == ConfigSource.GLOBAL_CONFIG:
            return self._load_yaml(self.global_dir / "config.yaml")

        elif source == ConfigSource.PROJECT_CONFIG:
            return self._load_project_config()

        elif source == ConfigSource.DOTENV:
            return self._load_dotenv_config()

        elif source == ConfigSource.ENVIRONMENT:
            return self._from_variables(os.environ)

        elif source == ConfigSource.COMMAND_LINE:
            return dict(self.command_line)

        return None

    def _get_defaults(self):
        """Get default configuration values"""
        return {
            "cluster": "default",
            "manifest": "nodes.yaml",
            "log_level": "INFO",
            "hypervisors": [],
        }

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise yaml.YAMLError(f"{path} does not contain a mapping")
        return data

    def _load_project_config(self):
        """Load project-specific config from the project directory"""
        project_config_paths = [
            self.project_dir / "infra.yaml",
            self.project_dir / ".infrakit.yaml",
        ]

        for config_path in project_config_paths:
            if config_path.exists():
                return self._load_yaml(config_path)
        return {}

    def _load_dotenv_config(self):
        """Load configuration from .env file"""
        dotenv_path = self.project_dir / ".env"
        if not dotenv_path.exists():
            return {}
        return self._from_variables(dotenv_values(dotenv_path))

    def _from_variables(self, variables) -> Dict[str, Any]:
        """Map INFRAKIT_* variables to config keys (INFRAKIT_LOG_LEVEL -> log_level)"""
        env_mapping = {
            f"{ENV_PREFIX}CLUSTER": "cluster",
            f"{ENV_PREFIX}MANIFEST": "manifest",
            f"{ENV_PREFIX}LOG_LEVEL": "log_level",
        }

        env_config = {}
        for env_key, config_key in env_mapping.items():
            value = variables.get(env_key)
            if value:
                env_config[config_key] = value
        return env_config

    def _merge_config(self, base: Dict[str, Any], update: Dict[str, Any]):
        """Merge update config into base config (nested merge)"""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def get_config(self, key: str, default: Any = None):
        """Get a specific configuration value"""
        keys = key.split('.')
        current = self.config_data

        for k in keys:
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return default
        return current

    def set_config(self, key: str, value: Any, config_data: Dict[str, Any] = None):
        """Set a specific configuration value, in the merged view unless config_data is given"""
        keys = key.split('.')
        current = self.config_data if config_data is None else config_data

        for k in keys[:-1]:
            if k not in current:
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

    def save_config(self, source: ConfigSource, config_data: Dict[str, Any] = None):
        """Save configuration to a specific source"""
        if config_data is None:
            config_data = self.config_data

        if source == ConfigSource.GLOBAL_CONFIG:
            self.global_dir.mkdir(parents=True, exist_ok=True)
            config_path = self.global_dir / "config.yaml"
        elif source == ConfigSource.PROJECT_CONFIG:
            config_path = self.project_dir / "infra.yaml"
        else:
            raise ValueError(f"Cannot save configuration to {source.value}")

        with open(config_path, 'w') as f:
            yaml.dump(config_data, f, indent=2, default_flow_style=False)
