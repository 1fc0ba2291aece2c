"""
OS detection — the first stage, and the only one that runs before
a StageContext exists.
"""

from __future__ import annotations

import logging
from typing import Literal

from dotclaude.adapters.base import SystemAdapter
from dotclaude.core.models.receipt import Receipt
from dotclaude.core.observability.console import Console

logger = logging.getLogger(__name__)

OSKind = Literal["macos", "linux", "unknown"]

_SYSTEM_MAP: dict[str, OSKind] = {
    "Darwin": "macos",
    "Linux": "linux",
}

STAGE = "detect_os"


def detect_os(system: SystemAdapter) -> OSKind:
    """Map the kernel name to ``macos``, ``linux`` or ``unknown``."""
    return _SYSTEM_MAP.get(system.platform_system(), "unknown")


def detect_os_stage(system: SystemAdapter, console: Console) -> Receipt:
    """Detect the OS; an unsupported platform is an environment error."""
    os_kind = detect_os(system)
    console.info(f"Detected OS: {os_kind}")
    logger.debug("platform.system() = %s", system.platform_system())

    if os_kind == "unknown":
        name = system.platform_system() or "unknown"
        console.error(f"Unsupported operating system: {name}")
        console.info("This installer supports macOS and Linux only")
        return Receipt.failure(
            STAGE,
            f"Unsupported operating system: {name}",
            kind="environment",
            metadata={"os": os_kind, "system": name},
        )

    return Receipt.success(STAGE, output=os_kind, metadata={"os": os_kind})
