from dataclasses import dataclass
from typing import Dict, List
from enum import Enum

class ComponentType(Enum):
    KUBE_API_SERVER = "kube-apiserver"
    KUBE_CONTROLLER_MANAGER = "kube-controller-manager"
    KUBE_SCHEDULER = "kube-scheduler"

# Reconciliation order: controller manager and scheduler need a reachable API server
COMPONENTS = (
    ComponentType.KUBE_API_SERVER,
    ComponentType.KUBE_CONTROLLER_MANAGER,
    ComponentType.KUBE_SCHEDULER,
)

class NodeRole(Enum):
    CONTROL_PLANE = "control-plane"

@dataclass(frozen=True)
class ComponentSpec:
    """
    Immutable description of a control-plane component as a hypervisor runs it.
    Hypervisor-agnostic; used as input to Hypervisor.ensure_component().
    """
    name: str                           # Host-level name (e.g., "kube-apiserver")
    image: str                          # OCI image reference
    command: List[str] = None
    args: List[str] = None
    environment: Dict[str, str] = None

    def __post_init__(self):
        if not self.name or not self.image:
            raise ValueError("Component name and image are required.")
        if self.command is None:
            object.__setattr__(self, 'command', [])
        if self.args is None:
            object.__setattr__(self, 'args', [])
        if self.environment is None:
            object.__setattr__(self, 'environment', {})
