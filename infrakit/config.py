"""
config.py: module for handling infrakit configuration
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .config_manager import ConfigManager, ConfigSource, coerce_name
from .errors import ConfigError
from .hypervisors import HypervisorList, hypervisor_from_config, hypervisors_from_config

# Keys `infrakit config set` may write; hypervisors go through `hypervisor add`
SETTABLE_KEYS = ("cluster", "manifest", "log_level")

def normalize_log_level(value: Any) -> str:
    """
    normalize_log_level: returns the upper-cased level name if logging knows it
    """
    level = str(value).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Unknown log_level: {value!r}")
    return level

class InfraConfig:
    """
    InfraConfig: class that encapsulate the merged configuration and the
    objects built from it (hypervisor pool, manifest location)
    """
    def __init__(self, project_dir: Optional[Path] = None, global_dir: Optional[Path] = None):
        self.config_manager = ConfigManager(project_dir, global_dir)
        self.data = {}

    def load(self, overrides: Dict[str, Any] = None):
        """
        load: loads configuration following priority order, command line
        overrides last
        """
        self.config_manager.command_line = {
            k: v for k, v in (overrides or {}).items() if v is not None
        }
        self.data = self.config_manager.load_config()
        self._validate(self.data)
        return self

    def _validate(self, data: Dict[str, Any]):
        """Check and normalize the keys the rest of infrakit relies on, in place"""
        if not isinstance(data.get("hypervisors"), list):
            raise ConfigError("'hypervisors' must be a list")
        data["cluster"] = coerce_name(data.get("cluster"), "cluster")
        data["manifest"] = coerce_name(data.get("manifest"), "manifest")
        data["log_level"] = normalize_log_level(data.get("log_level"))

    def get(self, key: str, default: Any = None):
        return self.config_manager.get_config(key, default)

    def hypervisors(self) -> HypervisorList:
        return hypervisors_from_config(self.data.get("hypervisors"))

    def manifest_path(self) -> Path:
        manifest = Path(self.data["manifest"]).expanduser()
        if not manifest.is_absolute():
            manifest = self.config_manager.project_dir / manifest
        return manifest

    def _load_source(self, source: ConfigSource) -> Dict[str, Any]:
        try:
            return self.config_manager.load_config(source)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read {source.value} configuration: {e}") from e

    def add_hypervisor(self, entry: Dict[str, Any]) -> bool:
        """
        add_hypervisor: records a hypervisor in the project infra.yaml
        :return: False if a hypervisor with that name is already configured
        """
        hypervisor = hypervisor_from_config(entry)  # validate before writing
        if hypervisor.name in self.hypervisors().names():
            return False

        # Only the project source is rewritten, not the merged view
        project = self._load_source(ConfigSource.PROJECT_CONFIG)
        project.setdefault("hypervisors", []).append(entry)
        self.config_manager.save_config(ConfigSource.PROJECT_CONFIG, project)
        self.data.setdefault("hypervisors", []).append(entry)
        return True

    def set_value(self, key: str, value: Any, global_config: bool = False):
        """
        set_value: writes one setting to the project infra.yaml, or to the
        global config file when global_config is set
        """
        if key not in SETTABLE_KEYS:
            raise ConfigError(f"Cannot set '{key}', settable keys: {', '.join(SETTABLE_KEYS)}")
        if key == "log_level":
            value = normalize_log_level(value)
        else:
            value = coerce_name(value, key)

        source = ConfigSource.GLOBAL_CONFIG if global_config else ConfigSource.PROJECT_CONFIG
        source_data = self._load_source(source)
        self.config_manager.set_config(key, value, source_data)
        self.config_manager.save_config(source, source_data)
        return self.load(self.config_manager.command_line)
