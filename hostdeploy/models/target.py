"""
Deployment Target Models

The immutable description of what to deploy and where.
"""

import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

from hostdeploy.constants import (
    DEFAULT_APP_DIR_FORMAT,
    DEFAULT_BRANCH,
    DEFAULT_CONTAINER_NAME,
    DEFAULT_SERVER_NAME,
    DEFAULT_SSH_PORT,
)
from hostdeploy.models.results import ValidationResult
from hostdeploy.models.ssh import SSHConfig, SSHConnection


class ProxyTopology(Enum):
    """Where the Nginx reverse proxy runs."""

    CONTAINER = "container"
    HOST = "host"


class ContainerRuntime(Enum):
    """How the application container is started."""

    COMPOSE = "compose"
    DOCKER_RUN = "docker-run"


# Names docker accepts for containers and images
CONTAINER_NAME_PATTERN = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9_.-]*")

REQUIRED_FIELDS = (
    "repo_url",
    "ssh_user",
    "server_address",
    "ssh_key_path",
    "app_port",
)


@dataclass(frozen=True)
class DeploymentTarget:
    """Everything collected from the operator for a single run."""

    repo_url: str
    auth_token: str
    ssh_user: str
    server_address: str
    ssh_key_path: str
    app_port: int
    branch: str = DEFAULT_BRANCH
    ssh_port: int = DEFAULT_SSH_PORT
    app_dir: Optional[str] = None
    container_name: str = DEFAULT_CONTAINER_NAME
    server_name: str = DEFAULT_SERVER_NAME
    topology: ProxyTopology = ProxyTopology.CONTAINER
    runtime: ContainerRuntime = ContainerRuntime.COMPOSE
    reset_workdir: bool = True

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @property
    def remote_dir(self) -> str:
        """Application directory on the remote host."""
        if self.app_dir:
            return self.app_dir.rstrip("/")
        return DEFAULT_APP_DIR_FORMAT.format(user=self.ssh_user)

    @property
    def proxy_container_name(self) -> str:
        return f"{self.container_name}-nginx"

    @property
    def ssh_connection(self) -> SSHConnection:
        return SSHConnection(
            host=self.server_address,
            config=SSHConfig(
                key_path=self.ssh_key_path, user=self.ssh_user, port=self.ssh_port
            ),
        )

    @property
    def public_url(self) -> str:
        return f"http://{self.server_address}"

    def validate(self) -> ValidationResult:
        """
        Check that the target is complete and internally consistent.

        Returns:
            ValidationResult with one error per problem found
        """
        result = ValidationResult(is_valid=True)

        for name in REQUIRED_FIELDS:
            if getattr(self, name) in (None, ""):
                result.add_error(f"Missing required value: {name}")

        if not isinstance(self.app_port, int) or not 0 < self.app_port < 65536:
            result.add_error(f"Invalid application port: {self.app_port}")

        if not isinstance(self.ssh_port, int) or not 0 < self.ssh_port < 65536:
            result.add_error(f"Invalid SSH port: {self.ssh_port}")

        if not self.branch:
            result.add_error("Branch must not be empty")

        if not CONTAINER_NAME_PATTERN.fullmatch(self.container_name or ""):
            result.add_error(
                f"Invalid container name: {self.container_name!r} "
                "(letters, digits, '_', '.', '-'; must start with a letter or digit)"
            )

        if (
            self.runtime is ContainerRuntime.DOCKER_RUN
            and self.topology is not ProxyTopology.HOST
        ):
            result.add_error(
                "The docker-run runtime publishes the app on the host and "
                "requires the host proxy topology"
            )

        if self.repo_url and not self.repo_url.startswith(("https://", "http://")):
            result.add_warning(
                "Repository URL is not HTTP(S); the token will not be embedded"
            )

        return result

    def __repr__(self) -> str:
        # Never leak the token through repr()
        return (
            f"DeploymentTarget(repo={self.repo_url}, branch={self.branch}, "
            f"host={self.ssh_user}@{self.server_address}, port={self.app_port}, "
            f"topology={self.topology.value}, runtime={self.runtime.value})"
        )
