from typing import Any, Dict, List
from ..config_manager import coerce_name
from ..errors import ConfigError
from .base import Hypervisor, HypervisorList
from .docker import DockerHypervisor

BACKENDS = {
    "docker": DockerHypervisor,
}

def hypervisor_from_config(entry: Dict[str, Any]) -> Hypervisor:
    """
    Build a hypervisor handle from a config entry such as
    {"name": "hv-a", "backend": "docker", "endpoint": "ssh://root@10.0.0.2"}
    """
    if not isinstance(entry, dict):
        raise ConfigError(f"Invalid hypervisor entry: {entry!r}")
    name = coerce_name(entry.get("name"), "hypervisor name")
    backend = entry.get("backend", "docker")
    if backend not in BACKENDS:
        raise ConfigError(f"Unknown backend '{backend}' for hypervisor '{name}'")
    kwargs = {k: v for k, v in entry.items() if k in ("endpoint", "prefix")}
    return BACKENDS[backend](name, **kwargs)

def hypervisors_from_config(entries: List[Dict[str, Any]]) -> HypervisorList:
    hypervisors = HypervisorList(hypervisor_from_config(entry) for entry in entries or [])
    names = hypervisors.names()
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate hypervisor names: {', '.join(duplicates)}")
    return hypervisors

__all__ = ['Hypervisor', 'HypervisorList', 'DockerHypervisor',
           'hypervisor_from_config', 'hypervisors_from_config']
