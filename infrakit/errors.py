"""
errors.py: exception types raised by infrakit.

The node core never returns errors as values:
- MissingHypervisorError: node cannot be reconciled until a hypervisor is bound
- UnknownComponentError: component type outside the known set (programming/config error)
- ComponentReconcileError: a component failed on its hypervisor, surfaced as raised
- EncodingFailedError: a node could not be serialized to its versioned document
"""


class InfrakitError(Exception):
    """Base exception for infrakit."""
    pass


class MissingHypervisorError(InfrakitError):
    """
    Node has no resolved hypervisor.

    Fatal for the current reconciliation attempt; retryable once the node is
    restored with a hypervisor bound.
    """

    def __init__(self, node_name: str):
        self.node_name = node_name
        super().__init__(f'node "{node_name}" is missing a hypervisor')


class UnknownComponentError(InfrakitError):
    """Requested component type is not one of the known control-plane components."""

    def __init__(self, component_type):
        self.component_type = component_type
        super().__init__(f"unknown component: {component_type!r}")


class ComponentReconcileError(InfrakitError):
    """A component failed to converge on its hypervisor."""

    def __init__(self, component, message: str):
        self.component = component
        super().__init__(message)


class EncodingFailedError(InfrakitError):
    """A node could not be encoded to its versioned document."""

    def __init__(self, node_name):
        self.node_name = node_name
        super().__init__(f'could not encode node "{node_name}"')


class DecodingError(InfrakitError):
    """A document is not a valid versioned node."""
    pass


class HypervisorError(InfrakitError):
    """A host-level command failed on a hypervisor."""

    def __init__(self, hypervisor: str, message: str):
        self.hypervisor = hypervisor
        super().__init__(f"hypervisor {hypervisor}: {message}")


class EmptyHypervisorPoolError(InfrakitError):
    """A hypervisor was requested from an empty pool."""
    pass


class ConfigError(InfrakitError):
    """Configuration could not be loaded or is invalid."""
    pass
