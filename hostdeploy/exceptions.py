"""
hostdeploy Exception Hierarchy

Clean exception hierarchy for consistent error handling across the CLI.
"""

from typing import Optional


class HostDeployError(Exception):
    """Base exception for all hostdeploy errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(HostDeployError):
    """Raised when the deployment target is invalid or incomplete."""

    pass


class SSHError(HostDeployError):
    """Raised when the SSH transport fails (unreachable host, bad key)."""

    pass


class ProvisionError(HostDeployError):
    """Raised when a remote provisioning step fails."""

    def __init__(self, step: str, message: str, context: Optional[str] = None):
        self.step = step
        super().__init__(f"[{step}] {message}", context)


class ProxyValidationError(ProvisionError):
    """Raised when the rendered reverse-proxy config fails `nginx -t`."""

    def __init__(self, output: str):
        super().__init__(
            "proxy",
            "Reverse-proxy configuration failed validation, proxy not reloaded",
            context=output or None,
        )
