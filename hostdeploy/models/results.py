"""
Result Models

Dataclass models for operation results and remote observations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RemoteState(Enum):
    """Observed state of a remote resource."""

    ABSENT = "absent"
    PRESENT = "present"


class SyncAction(Enum):
    """What source sync did on the remote host."""

    CLONED = "cloned"
    PULLED = "pulled"


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if validation has errors."""
        return len(self.errors) > 0

    @property
    def has_warnings(self) -> bool:
        """Check if validation has warnings."""
        return len(self.warnings) > 0

    def add_error(self, error: str) -> None:
        """Add an error to the validation result."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning to the validation result."""
        self.warnings.append(warning)

    def __repr__(self) -> str:
        return f"ValidationResult(valid={self.is_valid}, errors={len(self.errors)}, warnings={len(self.warnings)})"


@dataclass
class SSHResult:
    """Result of an SSH command execution."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    host: str = ""
    command: str = ""
    duration_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        """Check if SSH command succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if SSH command failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"SSHResult(host={self.host}, returncode={self.returncode}, duration={self.duration_seconds:.2f}s)"


@dataclass(frozen=True)
class RenderedConfig:
    """The two generated descriptors and where they go on the remote host."""

    compose_file: str
    proxy_file: str
    compose_path: str
    proxy_path: str


@dataclass
class ValidationReport:
    """Informational output of the post-deploy checks."""

    containers: str = ""
    probe_ok: bool = False
    probe_output: str = ""


@dataclass
class DeploymentOutcome:
    """Summary of a completed deployment."""

    host: str
    url: str
    sync_action: SyncAction
    replaced_container: bool = False
    report: Optional[ValidationReport] = None

    def to_dict(self) -> dict:
        return {
            "host": self.host,
            "url": self.url,
            "sync_action": self.sync_action.value,
            "replaced_container": self.replaced_container,
            "probe_ok": self.report.probe_ok if self.report else False,
        }


@dataclass
class CleanupOutcome:
    """Summary of a teardown."""

    host: str
    removed_paths: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "host": self.host,
            "removed_paths": list(self.removed_paths),
            "warnings": list(self.warnings),
        }
