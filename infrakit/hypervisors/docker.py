import subprocess
import logging
from typing import List, Optional
from ..errors import HypervisorError
from ..models import ComponentSpec
from .base import Hypervisor
from ..utils import run

logger = logging.getLogger("infrakit.hypervisors.docker")

class DockerHypervisor(Hypervisor):
    def __init__(self, name: str, endpoint: str = None, prefix: str = "infrakit"):
        super().__init__(name)
        self.endpoint = endpoint
        self.prefix = prefix

    def _docker(self, *args) -> List[str]:
        cmd = ["docker"]
        if self.endpoint:
            cmd.extend(["--host", self.endpoint])
        cmd.extend(args)
        return cmd

    def _container_name(self, component_name: str) -> str:
        return f"{self.prefix}-{component_name}"

    def _component_name(self, container_name: str) -> str:
        """Extract component name from container name"""
        if container_name.startswith(f"{self.prefix}-"):
            return container_name[len(self.prefix)+1:]
        return container_name

    def _run(self, cmd: List[str]):
        try:
            return run(cmd, check=True, silent=True)
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise HypervisorError(self.name, f"{' '.join(cmd)}: {detail}") from e
        except OSError as e:
            # docker binary missing or not executable
            raise HypervisorError(self.name, str(e)) from e

    def ensure_component(self, spec: ComponentSpec) -> None:
        container_name = self._container_name(spec.name)
        state = self.component_state(spec.name)
        if state == "Running":
            logger.debug(f"{container_name} already running on {self.name}")
            return
        if state is not None:
            logger.info(f"Starting existing {container_name} on {self.name}")
            self._run(self._docker("start", container_name))
            return

        # Control-plane components talk to each other over the host network
        cmd = self._docker("run", "-d", "--name", container_name,
                           "--network", "host", "--restart", "unless-stopped")
        for key, value in spec.environment.items():
            cmd.extend(["-e", f"{key}={value}"])
        if spec.command:
            cmd.extend(["--entrypoint", spec.command[0]])
        cmd.append(spec.image)
        cmd.extend(spec.command[1:])
        cmd.extend(spec.args)

        logger.info(f"Creating {container_name} on {self.name} from {spec.image}")
        self._run(cmd)

    def remove_component(self, component_name: str) -> None:
        if self.component_state(component_name) is None:
            return
        self._run(self._docker("rm", "-f", self._container_name(component_name)))

    def component_state(self, component_name: str) -> Optional[str]:
        container_name = self._container_name(component_name)
        try:
            result = run(self._docker("inspect", "-f", "{{.State.Status}}", container_name),
                         silent=True, check=False)
        except OSError as e:
            raise HypervisorError(self.name, str(e)) from e
        if result.returncode == 0:
            status = result.stdout.strip()
            # Map Docker states to standard states
            if status in ["running", "paused"]:
                return status.capitalize()
            elif status in ["exited", "created"]:
                return "Stopped"
            return status.capitalize()
        return None

    def list_components(self) -> List[str]:
        result = self._run(self._docker("ps", "-a", "--format", "{{.Names}}"))
        all_containers = result.stdout.strip().split('\n') if result.stdout.strip() else []
        return [
            self._component_name(name)
            for name in all_containers
            if name.startswith(f"{self.prefix}-")
        ]
