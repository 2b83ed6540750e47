import random
from abc import ABC, abstractmethod
from typing import List, Optional
from ..errors import EmptyHypervisorPoolError
from ..models import ComponentSpec

class Hypervisor(ABC):
    """
    Abstract interface for an execution host that runs control-plane components.
    Concrete implementations handle backend-specific details (Docker, ...).
    Nodes only hold a reference to a hypervisor and never manage its lifecycle.
    """

    def __init__(self, name: str):
        if not name:
            raise ValueError("Hypervisor name is required.")
        self.name = name

    @abstractmethod
    def ensure_component(self, spec: ComponentSpec) -> None:
        """
        Create or start the component so that it runs as described by spec.
        Idempotent: safe to call multiple times.
        Raises HypervisorError when the host-level action fails.
        """
        pass

    @abstractmethod
    def remove_component(self, component_name: str) -> None:
        """Remove the component by its host-level name. No-op if absent."""
        pass

    @abstractmethod
    def component_state(self, component_name: str) -> Optional[str]:
        """
        Get the current state of a component.
        Returns: 'Running', 'Stopped', 'Paused', or None if not found.
        """
        pass

    @abstractmethod
    def list_components(self) -> List[str]:
        """Return host-level names of the components present on this hypervisor."""
        pass

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"


class HypervisorList(list):
    """
    HypervisorList: pool of candidate hypervisors a node can be placed on
    """

    def sample(self) -> Hypervisor:
        """Pick one hypervisor uniformly at random"""
        if not self:
            raise EmptyHypervisorPoolError("no hypervisors available to sample from")
        return random.choice(self)

    def by_name(self, name: str) -> Optional[Hypervisor]:
        for hypervisor in self:
            if hypervisor.name == name:
                return hypervisor
        return None

    def names(self) -> List[str]:
        return [hypervisor.name for hypervisor in self]
