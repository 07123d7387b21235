"""Services layer for hostdeploy."""

from .ssh_service import SSHService
from .config_renderer import ConfigRenderer
from .remote_inspector import RemoteInspector
from .provisioner import Provisioner

__all__ = [
    "SSHService",
    "ConfigRenderer",
    "RemoteInspector",
    "Provisioner",
]
