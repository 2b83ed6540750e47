"""
infrakit: reconciles control-plane nodes on hypervisors and exports them as
versioned documents
"""
from .codec import VersionedNodeSpec
from .components import Component, component_for
from .errors import (
    InfrakitError,
    MissingHypervisorError,
    UnknownComponentError,
    ComponentReconcileError,
    EncodingFailedError,
)
from .hypervisors import Hypervisor, HypervisorList
from .models import ComponentType, COMPONENTS
from .node import Node, NodeList

__version__ = "0.1.0"

__all__ = [
    'Node',
    'NodeList',
    'VersionedNodeSpec',
    'Component',
    'component_for',
    'ComponentType',
    'COMPONENTS',
    'Hypervisor',
    'HypervisorList',
    'InfrakitError',
    'MissingHypervisorError',
    'UnknownComponentError',
    'ComponentReconcileError',
    'EncodingFailedError',
]
