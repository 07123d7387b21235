"""
hostdeploy Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .results import (
    CleanupOutcome,
    DeploymentOutcome,
    RemoteState,
    RenderedConfig,
    SSHResult,
    SyncAction,
    ValidationReport,
    ValidationResult,
)
from .ssh import (
    SSHConfig,
    SSHConnection,
)
from .target import (
    ContainerRuntime,
    DeploymentTarget,
    ProxyTopology,
)

__all__ = [
    # Results
    "CleanupOutcome",
    "DeploymentOutcome",
    "RemoteState",
    "RenderedConfig",
    "SSHResult",
    "SyncAction",
    "ValidationReport",
    "ValidationResult",
    # SSH
    "SSHConfig",
    "SSHConnection",
    # Target
    "ContainerRuntime",
    "DeploymentTarget",
    "ProxyTopology",
]
