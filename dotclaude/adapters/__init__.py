"""Adapters — the installer's only contact with the host machine.

Public re-exports for convenient access.
"""

from dotclaude.adapters.base import CommandResult, SystemAdapter
from dotclaude.adapters.mock import MockSystemAdapter
from dotclaude.adapters.registry import PackageInstallerRegistry
from dotclaude.adapters.shell.command import ShellSystemAdapter

__all__ = [
    "CommandResult",
    "MockSystemAdapter",
    "PackageInstallerRegistry",
    "ShellSystemAdapter",
    "SystemAdapter",
]
