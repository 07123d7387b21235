"""
Target Command Base Class

Base class for commands that act on a remote deployment target.
Provides automatic service initialization.
"""

from pathlib import Path
from typing import Optional

from .base_command import BaseCommand
from hostdeploy.models.target import DeploymentTarget
from hostdeploy.services import Provisioner, SSHService


class TargetCommand(BaseCommand):
    """
    Base class for commands bound to one DeploymentTarget.

    Provides:
    - Logger with the target's token masked
    - Pre-configured SSH service and provisioner
    """

    def __init__(
        self,
        target: DeploymentTarget,
        verbose: bool = False,
        json_output: bool = False,
        log_dir: Optional[Path] = None,
        timeout: Optional[int] = None,
    ):
        super().__init__(verbose=verbose, json_output=json_output, log_dir=log_dir)
        self.target = target
        self.timeout = timeout
        self.ssh_service: Optional[SSHService] = None

    @property
    def target_details(self) -> dict:
        return {
            "Host": self.target.ssh_connection.connection_string,
            "Repository": self.target.repo_url,
            "Branch": self.target.branch,
            "Topology": self.target.topology.value,
            "Runtime": self.target.runtime.value,
        }

    def init_target_logger(self, operation: str):
        logger = self.init_logger(operation, secrets=[self.target.auth_token])
        logger.log(repr(self.target))
        for warning in self.target.validate().warnings:
            logger.warning(warning)
        return logger

    def ensure_ssh_service(self) -> SSHService:
        """
        Ensure SSHService is initialized.

        Returns:
            SSHService instance
        """
        if self.ssh_service is None:
            self.ssh_service = SSHService(
                self.target.ssh_connection, logger=self.logger, timeout=self.timeout
            )
        return self.ssh_service

    def create_provisioner(self) -> Provisioner:
        return Provisioner(self.target, self.ensure_ssh_service(), logger=self.logger)

    def check_key(self) -> None:
        """Warn early when the SSH key does not exist locally."""
        key = self.target.ssh_connection.config
        if not key.key_exists and self.logger:
            self.logger.warning(f"SSH key not found: {key.key_path_expanded}")
