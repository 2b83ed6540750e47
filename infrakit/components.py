"""
components.py: control-plane components and the registry that resolves them.

Components carry no state of their own: component_for() builds a fresh
instance on every call, and each instance only knows how to describe itself
to a hypervisor and ask for it to be running.
"""
import abc
import logging
from typing import Dict, List, Type

from .errors import ComponentReconcileError, HypervisorError, UnknownComponentError
from .hypervisors.base import Hypervisor
from .models import ComponentSpec, ComponentType

DEFAULT_KUBERNETES_VERSION = "v1.30.0"
IMAGE_REGISTRY = "registry.k8s.io"
KUBERNETES_DIR = "/etc/kubernetes"

logger = logging.getLogger("infrakit.components")


class Component(abc.ABC):
    """
    Component: a control-plane service that can be reconciled on a hypervisor
    """

    component_type: ComponentType = None

    def __init__(self, kubernetes_version: str = DEFAULT_KUBERNETES_VERSION):
        self.kubernetes_version = kubernetes_version

    @property
    def name(self) -> str:
        return self.component_type.value

    @property
    def image(self) -> str:
        return f"{IMAGE_REGISTRY}/{self.name}:{self.kubernetes_version}"

    @abc.abstractmethod
    def flags(self) -> List[str]:
        """Command line flags the component binary is started with"""
        pass

    def spec(self) -> ComponentSpec:
        return ComponentSpec(
            name=self.name,
            image=self.image,
            command=[self.name],
            args=self.flags(),
        )

    def reconcile(self, hypervisor: Hypervisor) -> None:
        """
        Make sure this component runs on the given hypervisor
        :param hypervisor: execution host the component must run on
        :raises ComponentReconcileError: when the host-level action fails
        """
        logger.debug(f"Reconciling {self.name} on hypervisor {hypervisor.name}")
        try:
            hypervisor.ensure_component(self.spec())
        except HypervisorError as e:
            raise ComponentReconcileError(
                self.component_type, f"could not reconcile {self.name}: {e}"
            ) from e

    def __repr__(self):
        return f"{type(self).__name__}()"


class KubeAPIServer(Component):
    component_type = ComponentType.KUBE_API_SERVER

    def flags(self) -> List[str]:
        return [
            "--secure-port=6443",
            "--service-cluster-ip-range=10.96.0.0/12",
            f"--client-ca-file={KUBERNETES_DIR}/pki/ca.crt",
            f"--tls-cert-file={KUBERNETES_DIR}/pki/apiserver.crt",
            f"--tls-private-key-file={KUBERNETES_DIR}/pki/apiserver.key",
            f"--service-account-key-file={KUBERNETES_DIR}/pki/sa.pub",
            f"--service-account-signing-key-file={KUBERNETES_DIR}/pki/sa.key",
            "--service-account-issuer=https://kubernetes.default.svc.cluster.local",
            "--etcd-servers=https://127.0.0.1:2379",
            "--authorization-mode=Node,RBAC",
        ]


class KubeControllerManager(Component):
    component_type = ComponentType.KUBE_CONTROLLER_MANAGER

    def flags(self) -> List[str]:
        return [
            f"--kubeconfig={KUBERNETES_DIR}/controller-manager.conf",
            f"--cluster-signing-cert-file={KUBERNETES_DIR}/pki/ca.crt",
            f"--cluster-signing-key-file={KUBERNETES_DIR}/pki/ca.key",
            f"--service-account-private-key-file={KUBERNETES_DIR}/pki/sa.key",
            "--use-service-account-credentials=true",
            "--leader-elect=true",
        ]


class KubeScheduler(Component):
    component_type = ComponentType.KUBE_SCHEDULER

    def flags(self) -> List[str]:
        return [
            f"--kubeconfig={KUBERNETES_DIR}/scheduler.conf",
            "--leader-elect=true",
        ]


COMPONENT_CLASSES: Dict[ComponentType, Type[Component]] = {
    ComponentType.KUBE_API_SERVER: KubeAPIServer,
    ComponentType.KUBE_CONTROLLER_MANAGER: KubeControllerManager,
    ComponentType.KUBE_SCHEDULER: KubeScheduler,
}


def component_for(component_type) -> Component:
    """
    component_for: returns a new component of the given type
    :raises UnknownComponentError: if the type is not a known component
    """
    try:
        component_class = COMPONENT_CLASSES[component_type]
    except (KeyError, TypeError):
        raise UnknownComponentError(component_type) from None
    return component_class()
