"""
node.py: control-plane node bound to a hypervisor
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional
import yaml

from . import codec
from .components import Component, component_for
from .errors import EncodingFailedError, MissingHypervisorError
from .hypervisors.base import Hypervisor, HypervisorList
from .models import COMPONENTS, NodeRole

logger = logging.getLogger("infrakit.node")


@dataclass(frozen=True)
class Node:
    """
    Node: a control-plane node of a cluster.
    The hypervisor is only referenced, never owned. A node restored from its
    versioned document without a hypervisor cannot be reconciled.
    """
    name: str
    hypervisor_name: str
    cluster_name: str
    hypervisor: Optional[Hypervisor] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        # Same fields codec.from_dict requires, so every node can be read back
        for field_name in ("name", "hypervisor_name", "cluster_name"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value:
                raise ValueError(f"Node {field_name} must be a non-empty string, got {value!r}")
        if self.hypervisor is not None and self.hypervisor.name != self.hypervisor_name:
            raise ValueError(
                f"Node '{self.name}' names hypervisor '{self.hypervisor_name}' "
                f"but is bound to '{self.hypervisor.name}'"
            )

    @classmethod
    def with_random_hypervisor(cls, name: str, cluster_name: str,
                               hypervisors: HypervisorList) -> "Node":
        """
        Create a node placed on a hypervisor sampled from the given pool
        """
        hypervisor = hypervisors.sample()
        return cls(
            name=name,
            hypervisor_name=hypervisor.name,
            cluster_name=cluster_name,
            hypervisor=hypervisor,
        )

    @classmethod
    def from_versioned(cls, node_spec: codec.VersionedNodeSpec,
                       hypervisor: Optional[Hypervisor] = None) -> "Node":
        """
        Restore a node from its versioned document, optionally binding the
        hypervisor the caller resolved from node_spec.hypervisor
        """
        return cls(
            name=node_spec.name,
            hypervisor_name=node_spec.hypervisor,
            cluster_name=node_spec.cluster,
            hypervisor=hypervisor,
        )

    def is_ready(self) -> bool:
        return self.hypervisor is not None

    def component(self, component_type) -> Component:
        return component_for(component_type)

    def reconcile(self) -> None:
        """
        Reconcile every control-plane component on the node's hypervisor, in
        order. Stops at the first failure and raises it unchanged; components
        reconciled before it are left as they are.
        """
        if self.hypervisor is None:
            raise MissingHypervisorError(self.name)

        for component_type in COMPONENTS:
            component = self.component(component_type)
            component.reconcile(self.hypervisor)
        logger.info(f"Node {self.name} reconciled on {self.hypervisor_name}")

    def export(self) -> codec.VersionedNodeSpec:
        return codec.VersionedNodeSpec(
            name=self.name,
            hypervisor=self.hypervisor_name,
            cluster=self.cluster_name,
            role=NodeRole.CONTROL_PLANE.value,
        )

    def specs(self) -> str:
        """Versioned YAML document of this node"""
        try:
            return codec.encode(self.export())
        except yaml.YAMLError as e:
            raise EncodingFailedError(self.name) from e


class NodeList(list):
    """
    NodeList: ordered nodes, exported together as one YAML stream
    """

    @classmethod
    def from_specs(cls, text: str, hypervisors: Optional[HypervisorList] = None) -> "NodeList":
        """
        Restore nodes from a YAML stream. Hypervisors are resolved by name from
        the given pool; nodes whose hypervisor is not found are not ready.
        """
        nodes = cls()
        for node_spec in codec.decode_all(text):
            hypervisor = hypervisors.by_name(node_spec.hypervisor) if hypervisors else None
            if hypervisors is not None and hypervisor is None:
                logger.warning(f"Hypervisor '{node_spec.hypervisor}' of node "
                               f"'{node_spec.name}' is not known")
            nodes.append(Node.from_versioned(node_spec, hypervisor))
        return nodes

    def by_name(self, name: str) -> Optional[Node]:
        for node in self:
            if node.name == name:
                return node
        return None

    def export(self) -> List[codec.VersionedNodeSpec]:
        return [node.export() for node in self]

    def specs(self) -> str:
        """
        Versioned YAML stream of all nodes. Nodes that fail to encode are
        left out of the stream.
        """
        res = ""
        for node in self:
            try:
                node_spec = node.specs()
            except EncodingFailedError as e:
                logger.warning(f"Skipping node in export: {e}")
                continue
            res += f"{codec.DOCUMENT_SEPARATOR}{node_spec}"
        return res
