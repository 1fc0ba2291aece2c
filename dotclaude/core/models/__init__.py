"""
Domain models — Pydantic types for the installer.

    from dotclaude.core.models import InstallConfig, Receipt, InstallState
"""

from dotclaude.core.models.receipt import ErrorKind, Receipt
from dotclaude.core.models.settings import (
    ApiKeySpec,
    InstallConfig,
    InstallerSettings,
    ToolSpec,
)
from dotclaude.core.models.state import InstallState, RunRecord

__all__ = [
    "ApiKeySpec",
    "ErrorKind",
    "InstallConfig",
    "InstallState",
    "InstallerSettings",
    "Receipt",
    "RunRecord",
    "ToolSpec",
]
