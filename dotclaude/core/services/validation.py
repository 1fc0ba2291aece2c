"""
Validation — re-check the final filesystem state after an install.

Reports, never remediates. Required checks decide pass/fail;
advisory checks only add warnings to the summary.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field

from dotclaude.adapters.base import SystemAdapter
from dotclaude.core.engine.context import StageContext
from dotclaude.core.models.receipt import Receipt
from dotclaude.core.models.settings import InstallConfig
from dotclaude.core.observability.console import Console
from dotclaude.core.services.mcp_setup import find_unresolved

logger = logging.getLogger(__name__)

STAGE = "validate"


class ValidationCheck(BaseModel):
    name: str
    passed: bool
    required: bool = True
    detail: str = ""
    hint: str = ""


class ValidationReport(BaseModel):
    checks: list[ValidationCheck] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks if c.required)

    def get(self, name: str) -> ValidationCheck | None:
        return next((c for c in self.checks if c.name == name), None)

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "checks": [c.model_dump() for c in self.checks],
        }


def _mcp_content_checks(mcp_file: Path, env_local: str) -> list[ValidationCheck]:
    """Placeholder and JSON checks on an existing MCP file."""
    try:
        text = mcp_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return [ValidationCheck(
            name="mcp_placeholders",
            passed=False,
            required=False,
            detail=f"{mcp_file} is not readable as UTF-8: {e}",
            hint="Run 'dotclaude mcp setup' to regenerate it",
        )]

    unresolved = find_unresolved(text)
    checks = [ValidationCheck(
        name="mcp_placeholders",
        passed=not unresolved,
        required=False,
        detail=(
            f"{mcp_file} contains unsubstituted variables: {', '.join(unresolved)}"
            if unresolved else f"{mcp_file} properly configured"
        ),
        hint=f"Edit {env_local} and run: dotclaude mcp setup" if unresolved else "",
    )]

    try:
        data = json.loads(text)
        parsed = isinstance(data, dict) and isinstance(data.get("mcpServers"), dict)
        json_detail = f"{mcp_file} has an mcpServers mapping" if parsed else f"{mcp_file} has no mcpServers mapping"
    except json.JSONDecodeError as e:
        parsed = False
        json_detail = f"{mcp_file} is not valid JSON: {e}"
    checks.append(ValidationCheck(
        name="mcp_json",
        passed=parsed,
        required=False,
        detail=json_detail,
        hint="" if parsed else "Run 'dotclaude mcp setup' to regenerate it",
    ))
    return checks


def validate_installation(config: InstallConfig, system: SystemAdapter) -> ValidationReport:
    """Inspect the configuration dir, MCP file, CLI and GNU Stow."""
    report = ValidationReport()
    config_dir = config.config_dir
    mcp_file = config.mcp_file
    settings = config.settings

    report.checks.append(ValidationCheck(
        name="config_dir",
        passed=config_dir.is_dir(),
        detail=f"{config_dir} directory exists" if config_dir.is_dir() else f"{config_dir} directory not found",
    ))

    if mcp_file.is_file():
        report.checks.append(ValidationCheck(
            name="mcp_file", passed=True, required=False, detail=f"{mcp_file} file exists",
        ))
        report.checks.extend(_mcp_content_checks(mcp_file, settings.env_local))
    else:
        report.checks.append(ValidationCheck(
            name="mcp_file",
            passed=False,
            required=False,
            detail=f"{mcp_file} not found",
            hint="Run 'dotclaude mcp setup' to deploy MCP configuration",
        ))

    cli_path = system.which(settings.cli_binary)
    if cli_path:
        version = system.run([settings.cli_binary, "--version"])
        label = (version.first_line if version.ok else "") or "unknown"
        cli_detail = f"Claude Code CLI installed: {label}"
    else:
        cli_detail = "Claude Code CLI not installed"
    report.checks.append(ValidationCheck(
        name="cli",
        passed=cli_path is not None,
        required=False,
        detail=cli_detail,
        hint="" if cli_path else "Install with: dotclaude cli install",
    ))

    stow = system.has("stow")
    report.checks.append(ValidationCheck(
        name="stow",
        passed=stow,
        detail="GNU Stow installed" if stow else "GNU Stow not installed",
    ))

    logger.debug("Validation: %s", report.to_dict())
    return report


def print_report(report: ValidationReport, console: Console) -> None:
    for check in report.checks:
        if check.passed:
            console.success(check.detail)
        elif check.required:
            console.error(check.detail)
        else:
            console.warning(check.detail)
        if check.hint:
            console.info(check.hint)


def validate_stage(ctx: StageContext) -> Receipt:
    ctx.console.header("Validating Installation")
    report = validate_installation(ctx.config, ctx.system)
    print_report(report, ctx.console)

    if not report.passed:
        ctx.console.error("Validation failed")
        failed = [c.name for c in report.checks if c.required and not c.passed]
        return Receipt.failure(
            STAGE,
            f"Validation failed: {', '.join(failed)}",
            kind="validation",
            metadata={"validation": report.to_dict()},
        )

    ctx.console.success("Installation validation passed")
    return Receipt.success(STAGE, output="passed", metadata={"validation": report.to_dict()})
