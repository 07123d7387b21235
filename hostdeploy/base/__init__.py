"""
hostdeploy CLI Base Command Classes

Abstract base classes for consistent command structure.
"""

from .base_command import BaseCommand
from .target_command import TargetCommand

__all__ = [
    "BaseCommand",
    "TargetCommand",
]
