"""hostdeploy - single-host Docker deployments over SSH."""

__version__ = "1.0.0"
