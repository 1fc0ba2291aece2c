"""
Installer driver — runs the stages in order and stops at the first failure.

Flow:
    detect OS → dependencies → backup → config tree → CLI → MCP config → validate

Every stage returns a Receipt. A failed receipt ends the run and its
error kind decides the exit code. Unexpected OS errors inside a stage
are turned into an ``environment`` failure here, so nothing escapes as
a traceback.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from dotclaude.adapters.base import SystemAdapter
from dotclaude.adapters.registry import PackageInstallerRegistry
from dotclaude.core.engine.context import StageContext
from dotclaude.core.models.receipt import ErrorKind, Receipt
from dotclaude.core.models.settings import InstallConfig
from dotclaude.core.models.state import InstallState, RunRecord
from dotclaude.core.observability.console import Console
from dotclaude.core.persistence.state_file import load_state, save_state
from dotclaude.core.prompts import Confirmer, confirmer_for
from dotclaude.core.services.backup import backup_stage
from dotclaude.core.services.cli_install import install_cli
from dotclaude.core.services.config_deploy import deploy_mcp_config
from dotclaude.core.services.dependencies import dependencies_stage
from dotclaude.core.services.platform_detect import detect_os_stage
from dotclaude.core.services.symlink import install_config_tree
from dotclaude.core.services.validation import validate_stage

logger = logging.getLogger(__name__)

Stage = Callable[[StageContext], Receipt]

STAGES: list[tuple[str, Stage]] = [
    ("dependencies", dependencies_stage),
    ("backup", backup_stage),
    ("install_config", install_config_tree),
    ("install_cli", install_cli),
    ("deploy_mcp_config", deploy_mcp_config),
    ("validate", validate_stage),
]

EXIT_OK = 0
EXIT_CODES: dict[ErrorKind, int] = {
    "environment": 1,
    "missing_dependency": 1,
    "state_conflict": 1,
    "validation": 1,
}


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass
class InstallReport:
    """Result of one installer run."""

    receipts: list[Receipt] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return bool(self.receipts) and not any(r.failed for r in self.receipts)

    @property
    def failure(self) -> Receipt | None:
        return next((r for r in self.receipts if r.failed), None)

    @property
    def exit_code(self) -> int:
        failure = self.failure
        if failure is None:
            return EXIT_OK
        return EXIT_CODES.get(failure.error_kind, 1) if failure.error_kind else 1

    @property
    def deferred(self) -> list[str]:
        return [d for r in self.receipts for d in r.deferred]

    @property
    def validation(self) -> dict | None:
        for r in self.receipts:
            if r.stage == "validate":
                return r.metadata.get("validation")
        return None

    def get(self, stage: str) -> Receipt | None:
        return next((r for r in self.receipts if r.stage == stage), None)

    def to_dict(self) -> dict:
        failure = self.failure
        return {
            "status": "ok" if self.ok else "failed",
            "exit_code": self.exit_code,
            "failed_stage": failure.stage if failure else None,
            "error": failure.error if failure else None,
            "error_kind": failure.error_kind if failure else None,
            "deferred": self.deferred,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


def _run_stage(name: str, stage: Stage, ctx: StageContext) -> Receipt:
    started = _now_iso()
    start = time.monotonic()
    try:
        receipt = stage(ctx)
    except (OSError, UnicodeError) as e:
        logger.exception("Stage %s raised", name)
        ctx.console.error(f"{name}: {e}")
        receipt = Receipt.failure(name, f"{name}: {e}", kind="environment")
    elapsed_ms = int((time.monotonic() - start) * 1000)
    return receipt.model_copy(update={
        "started_at": started,
        "ended_at": _now_iso(),
        "duration_ms": elapsed_ms,
    })


def build_context(
    config: InstallConfig,
    system: SystemAdapter,
    console: Console,
    confirmer: Confirmer | None = None,
    packages: PackageInstallerRegistry | None = None,
    state: InstallState | None = None,
) -> tuple[Receipt, StageContext | None]:
    """Detect the OS and assemble the context stages run in.

    Returns the detection receipt and, unless it failed, the context.
    State is loaded from disk only after the OS check passed. Without an
    explicit ``confirmer`` the one matching ``--yes`` is used.
    """
    detected = detect_os_stage(system, console)
    if detected.failed:
        return detected, None
    if state is None:
        state = load_state(config.state_path)
    return detected, StageContext(
        config=config,
        system=system,
        confirmer=confirmer if confirmer is not None else confirmer_for(config.assume_yes),
        console=console,
        packages=packages or PackageInstallerRegistry(system),
        state=state,
        os_kind=detected.output,
    )


def run_install(
    config: InstallConfig,
    system: SystemAdapter,
    console: Console,
    confirmer: Confirmer | None = None,
    packages: PackageInstallerRegistry | None = None,
) -> InstallReport:
    """Run the whole installer and return its report."""
    report = InstallReport()

    console.header("dotclaude Installation")
    console.info("Installing Claude Code configuration with MCP servers")
    console.info(f"Installation directory: {config.source_root}")
    console.echo()

    detected, ctx = build_context(config, system, console, confirmer, packages)
    report.receipts.append(detected)
    if ctx is None:
        return report

    state = ctx.state
    run = RunRecord(started_at=_now_iso())

    for name, stage in STAGES:
        logger.info("Stage: %s", name)
        receipt = _run_stage(name, stage, ctx)
        report.receipts.append(receipt)
        if receipt.failed:
            logger.warning("Stage %s failed (%s): %s", name, receipt.error_kind, receipt.error)
            break

    failure = report.failure
    run.ended_at = _now_iso()
    run.status = "ok" if failure is None else "failed"
    run.failed_stage = failure.stage if failure else None
    run.deferred = report.deferred
    state.last_run = run
    try:
        save_state(state, config.state_path)
    except OSError as e:
        logger.warning("Could not save installer state: %s", e)

    return report
