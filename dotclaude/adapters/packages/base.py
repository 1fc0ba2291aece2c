"""
PackageInstaller base — install a ToolSpec through one package manager.

Each variant knows its manager id (the key into ``ToolSpec.packages``),
the binary that must be on PATH for it to be usable, whether it needs
root, and how to spell an install command.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from dotclaude.adapters.base import INSTALL_TIMEOUT, CommandResult, SystemAdapter
from dotclaude.core.models.settings import ToolSpec

logger = logging.getLogger(__name__)


class PackageInstaller(ABC):
    """Abstract package manager."""

    #: Key into ``ToolSpec.packages`` / ``setup`` / ``post_paths``.
    id: str = ""
    #: Binary that must resolve for this manager to be usable.
    binary: str = ""
    #: Human-readable name for messages.
    label: str = ""
    #: Whether install commands run through sudo.
    needs_sudo: bool = False

    def __init__(self, system: SystemAdapter):
        self._system = system

    def is_available(self) -> bool:
        return self._system.has(self.binary)

    @abstractmethod
    def install_command(self, packages: list[str]) -> list[str]:
        """Command that installs ``packages`` non-interactively."""

    def prepare_commands(self) -> list[list[str]]:
        """Commands to run once before the first install (index refresh)."""
        return []

    def install(self, tool: ToolSpec) -> CommandResult:
        """Install ``tool``; returns the first failing result or the last one."""
        packages = tool.packages.get(self.id)
        if not packages:
            return CommandResult(
                returncode=1,
                error=f"No {self.label} package known for {tool.label}",
            )

        commands = self.prepare_commands() + tool.setup.get(self.id, []) + [
            self.install_command(packages)
        ]
        result = CommandResult()
        for cmd in commands:
            logger.info("%s: %s", self.label, " ".join(cmd))
            result = self._system.run(cmd, sudo=self.needs_sudo, timeout=INSTALL_TIMEOUT)
            if not result.ok:
                logger.warning("%s failed: %s", " ".join(cmd), result.describe_error())
                return result

        for directory in tool.post_paths.get(self.id, []):
            self._system.prepend_path(directory)
        return result

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id!r}>"
