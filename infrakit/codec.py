"""
codec.py: versioned document form of a node.

A node is persisted and transported as:

    apiVersion: cluster.infrakit.dev/v1alpha1
    kind: Node
    metadata:
      name: <name>
    spec:
      hypervisor: <hypervisor name>
      cluster: <cluster name>
      role: control-plane

Several nodes form a YAML stream, each document introduced by a '---' line.
"""
from dataclasses import dataclass
from typing import Any, Dict, List
import yaml

from .errors import DecodingError
from .models import NodeRole

API_GROUP = "cluster.infrakit.dev"
API_VERSION = f"{API_GROUP}/v1alpha1"
KIND = "Node"
DOCUMENT_SEPARATOR = "---\n"


@dataclass(frozen=True)
class VersionedNodeSpec:
    """
    Immutable v1alpha1 representation of a node.
    """
    name: str
    hypervisor: str
    cluster: str
    role: str = NodeRole.CONTROL_PLANE.value
    api_version: str = API_VERSION
    kind: str = KIND

    def to_dict(self) -> Dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": {
                "name": self.name,
            },
            "spec": {
                "hypervisor": self.hypervisor,
                "cluster": self.cluster,
                "role": self.role,
            },
        }

    @classmethod
    def from_dict(cls, data: Any) -> "VersionedNodeSpec":
        if not isinstance(data, dict):
            raise DecodingError(f"expected a mapping, got {type(data).__name__}")
        if data.get("apiVersion") != API_VERSION:
            raise DecodingError(f"unsupported apiVersion: {data.get('apiVersion')!r}")
        if data.get("kind") != KIND:
            raise DecodingError(f"unsupported kind: {data.get('kind')!r}")

        metadata = data.get("metadata") or {}
        spec = data.get("spec") or {}
        if not isinstance(metadata, dict) or not isinstance(spec, dict):
            raise DecodingError("metadata and spec must be mappings")
        for section, key in (("metadata", "name"), ("spec", "hypervisor"), ("spec", "cluster")):
            value = (metadata if section == "metadata" else spec).get(key)
            if not isinstance(value, str) or not value:
                raise DecodingError(f"{section}.{key} must be a non-empty string")

        return cls(
            name=metadata["name"],
            hypervisor=spec["hypervisor"],
            cluster=spec["cluster"],
            role=spec.get("role", NodeRole.CONTROL_PLANE.value),
        )


def encode(node_spec: VersionedNodeSpec) -> str:
    """
    encode: serializes a versioned node to a YAML document
    Raises yaml.YAMLError if a field cannot be represented.
    """
    return yaml.safe_dump(node_spec.to_dict(), default_flow_style=False, sort_keys=False)


def decode(text: str) -> VersionedNodeSpec:
    """
    decode: parses a single YAML document into a versioned node
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DecodingError(f"invalid YAML: {e}") from e
    return VersionedNodeSpec.from_dict(data)


def decode_all(text: str) -> List[VersionedNodeSpec]:
    """
    decode_all: parses a '---' separated YAML stream, skipping empty documents
    """
    try:
        documents = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise DecodingError(f"invalid YAML: {e}") from e
    return [VersionedNodeSpec.from_dict(doc) for doc in documents if doc is not None]
