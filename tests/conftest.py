import pytest

from infrakit.errors import HypervisorError
from infrakit.hypervisors import Hypervisor, HypervisorList


class FakeHypervisor(Hypervisor):
    """In-memory hypervisor recording the components it was asked to run."""

    def __init__(self, name, fail_on=()):
        super().__init__(name)
        self.fail_on = set(fail_on)
        self.ensured = []
        self.components = {}

    def ensure_component(self, spec):
        self.ensured.append(spec.name)
        if spec.name in self.fail_on:
            raise HypervisorError(self.name, f"cannot start {spec.name}")
        self.components[spec.name] = spec

    def remove_component(self, component_name):
        self.components.pop(component_name, None)

    def component_state(self, component_name):
        return "Running" if component_name in self.components else None

    def list_components(self):
        return list(self.components)


@pytest.fixture
def hypervisor():
    return FakeHypervisor("hv-a")


@pytest.fixture
def hypervisors():
    return HypervisorList([FakeHypervisor("hv-a"), FakeHypervisor("hv-b"), FakeHypervisor("hv-c")])
