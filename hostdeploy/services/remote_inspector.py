"""Read-only checks of what already exists on the remote host."""

import posixpath
import shlex

from hostdeploy.exceptions import ProvisionError
from hostdeploy.models.results import RemoteState
from hostdeploy.services.ssh_service import SSHService


class RemoteInspector:
    """
    Observes remote state; nothing is cached between calls.

    Each check returns RemoteState.PRESENT or RemoteState.ABSENT.
    """

    def __init__(self, ssh_service: SSHService):
        self.ssh = ssh_service

    def repository(self, app_dir: str) -> RemoteState:
        """Whether a git working tree exists in app_dir."""
        marker = posixpath.join(app_dir, ".git")
        result = self.ssh.execute_command(f"test -d {shlex.quote(marker)}")

        if result.returncode == 0:
            return RemoteState.PRESENT
        if result.returncode == 1:
            return RemoteState.ABSENT

        raise ProvisionError(
            "inspect", f"Could not inspect {marker}", context=result.output
        )

    def container(self, name: str) -> RemoteState:
        """Whether a container (running or stopped) holds the given name."""
        result = self.ssh.execute_command(
            f"docker ps -a --filter {shlex.quote(f'name=^/{name}$')} "
            "--format '{{.Names}}'"
        )

        if result.is_failure:
            raise ProvisionError(
                "inspect",
                f"Could not list containers named {name}",
                context=result.output,
            )

        names = result.stdout.split()
        return RemoteState.PRESENT if name in names else RemoteState.ABSENT
