"""
InstallState — what the installer remembers between runs.

Serialized to ``<source>/.state/install.json``. It's disposable:
delete it and the next run only loses the ability to recognise its
own previously rendered MCP file.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class RunRecord(BaseModel):
    """Summary of the last installer run."""

    started_at: str = ""
    ended_at: str = ""
    status: str = ""  # ok, failed
    failed_stage: str | None = None
    deferred: list[str] = Field(default_factory=list)


class InstallState(BaseModel):
    """Root state model."""

    schema_version: int = 1

    created_at: str = Field(default_factory=_now_iso)
    updated_at: str = Field(default_factory=_now_iso)

    # sha256 of the last MCP file this installer wrote
    mcp_rendered_sha256: str | None = None

    # Every backup ever created, oldest first
    backups: list[str] = Field(default_factory=list)

    last_run: RunRecord = Field(default_factory=RunRecord)

    metadata: dict[str, Any] = Field(default_factory=dict)

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = _now_iso()
