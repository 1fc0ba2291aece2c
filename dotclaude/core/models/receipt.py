"""
Receipt model — the outcome of one installer stage.

Stages never raise for expected failures. They return a Receipt with
``status="failed"`` and an ``error_kind`` that the driver maps to a
process exit code.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ErrorKind = Literal[
    "environment",          # unsupported OS, no package manager, missing files
    "missing_dependency",   # required tool absent or failed to install
    "state_conflict",       # unsafe to replace existing configuration
    "validation",           # post-install checks failed
]


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of running a single stage."""

    stage: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    error_kind: ErrorKind | None = None

    # Steps the user declined; reported at the end, never fatal.
    deferred: list[str] = Field(default_factory=list)

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the stage succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the stage failed."""
        return self.status == "failed"

    @classmethod
    def success(cls, stage: str, output: str = "", **kwargs: Any) -> Receipt:
        """Create a success receipt."""
        return cls(stage=stage, status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        stage: str,
        error: str,
        kind: ErrorKind,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(stage=stage, status="failed", error=error, error_kind=kind, **kwargs)

    @classmethod
    def skip(cls, stage: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Create a skip receipt."""
        return cls(stage=stage, status="skipped", output=reason, **kwargs)
