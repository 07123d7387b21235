"""
SSH Configuration Models

Dataclass models for SSH operations.
"""

from dataclasses import dataclass
from pathlib import Path

from hostdeploy.constants import DEFAULT_SSH_PORT


@dataclass(frozen=True)
class SSHConfig:
    """SSH configuration for connecting to the target host."""

    key_path: str
    user: str
    port: int = DEFAULT_SSH_PORT

    @property
    def key_path_expanded(self) -> Path:
        """Get expanded key path (resolves ~)."""
        return Path(self.key_path).expanduser()

    @property
    def key_exists(self) -> bool:
        """Check if private key file exists."""
        return self.key_path_expanded.exists()

    def __repr__(self) -> str:
        return f"SSHConfig(user={self.user}, key={self.key_path}, port={self.port})"


@dataclass(frozen=True)
class SSHConnection:
    """SSH connection details for a specific host."""

    host: str
    config: SSHConfig

    @property
    def connection_string(self) -> str:
        """Get SSH connection string (user@host)."""
        return f"{self.config.user}@{self.host}"

    @property
    def ssh_command_prefix(self) -> list[str]:
        """Get SSH command prefix for subprocess."""
        return [
            "ssh",
            "-i",
            str(self.config.key_path_expanded),
            "-p",
            str(self.config.port),
            "-o",
            "StrictHostKeyChecking=no",
            "-o",
            "LogLevel=QUIET",
            self.connection_string,
        ]

    def build_command(self, remote_command: str) -> list[str]:
        """Build full SSH command with remote command."""
        return self.ssh_command_prefix + [remote_command]

    def __repr__(self) -> str:
        return f"SSHConnection(host={self.host}, user={self.config.user})"
