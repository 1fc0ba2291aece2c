"""
Package installer registry — pick the package manager for this host.

Candidates are looked up by detected OS; the first whose binary is on
PATH wins. Stages ask the registry, never branch on OS themselves.
"""

from __future__ import annotations

import logging

from dotclaude.adapters.base import SystemAdapter
from dotclaude.adapters.packages import (
    AptInstaller,
    DnfInstaller,
    HomebrewInstaller,
    PackageInstaller,
    PacmanInstaller,
)

logger = logging.getLogger(__name__)

# OS kind → installer classes, in preference order.
DEFAULT_CANDIDATES: dict[str, tuple[type[PackageInstaller], ...]] = {
    "macos": (HomebrewInstaller,),
    "linux": (AptInstaller, DnfInstaller, PacmanInstaller),
}


class PackageInstallerRegistry:
    """Lookup table from OS kind to package installers."""

    def __init__(
        self,
        system: SystemAdapter,
        candidates: dict[str, tuple[type[PackageInstaller], ...]] | None = None,
    ):
        self._system = system
        self._installers: dict[str, list[PackageInstaller]] = {}
        self._selected: dict[str, PackageInstaller | None] = {}
        for os_kind, classes in (candidates or DEFAULT_CANDIDATES).items():
            for cls in classes:
                self.register(os_kind, cls(system))

    def register(self, os_kind: str, installer: PackageInstaller) -> None:
        """Append ``installer`` to the candidates for ``os_kind``."""
        self._installers.setdefault(os_kind, []).append(installer)
        self._selected.pop(os_kind, None)
        logger.debug("Registered %r for %s", installer, os_kind)

    def candidates(self, os_kind: str) -> list[PackageInstaller]:
        return list(self._installers.get(os_kind, []))

    def select(self, os_kind: str) -> PackageInstaller | None:
        """First available installer for ``os_kind``, cached per run."""
        if os_kind not in self._selected:
            chosen = next(
                (i for i in self._installers.get(os_kind, []) if i.is_available()),
                None,
            )
            if chosen is None:
                logger.warning("No supported package manager found for %s", os_kind)
            else:
                logger.info("Using package manager: %s", chosen.label)
            self._selected[os_kind] = chosen
        return self._selected[os_kind]

    def status(self, os_kind: str) -> dict[str, bool]:
        """Availability of every candidate for ``os_kind``."""
        return {i.id: i.is_available() for i in self._installers.get(os_kind, [])}
