"""
StageContext — everything a stage function receives.

Built once by the driver after OS detection. Stages read flags and
paths from ``config`` and reach the host only through ``system`` and
``packages``; they ask questions through ``confirmer`` and report
through ``console``.
"""

from __future__ import annotations

from dataclasses import dataclass

from dotclaude.adapters.base import SystemAdapter
from dotclaude.adapters.registry import PackageInstallerRegistry
from dotclaude.core.models.settings import InstallConfig
from dotclaude.core.models.state import InstallState
from dotclaude.core.observability.console import Console
from dotclaude.core.prompts import Confirmer


@dataclass(frozen=True)
class StageContext:
    config: InstallConfig
    system: SystemAdapter
    confirmer: Confirmer
    console: Console
    packages: PackageInstallerRegistry
    state: InstallState
    os_kind: str = "unknown"

    @property
    def is_macos(self) -> bool:
        return self.os_kind == "macos"

    @property
    def is_linux(self) -> bool:
        return self.os_kind == "linux"
