"""
Dependency stage — make sure GNU Stow, gettext and Node.js are present.

Probes are read-only (``which`` through the system adapter). Missing
tools are installed through the package manager the registry selects
for this OS, after the user confirms. With ``--skip-deps`` nothing is
installed: presence is only asserted.
"""

from __future__ import annotations

import logging

from dotclaude.adapters.base import SystemAdapter
from dotclaude.core.engine.context import StageContext
from dotclaude.core.models.receipt import Receipt
from dotclaude.core.models.settings import ToolSpec

logger = logging.getLogger(__name__)

STAGE = "dependencies"


def missing_binaries(system: SystemAdapter, tool: ToolSpec) -> list[str]:
    """Binaries of ``tool`` that do not resolve on PATH."""
    return [b for b in tool.binaries if not system.has(b)]


def tool_version(system: SystemAdapter, tool: ToolSpec) -> str | None:
    """First line of the tool's version command, if it has one."""
    if not tool.version_cmd:
        return None
    result = system.run(tool.version_cmd)
    return result.first_line if result.ok and result.first_line else None


def _present_message(ctx: StageContext, tool: ToolSpec, prefix: str = "installed") -> str:
    version = tool_version(ctx.system, tool)
    return f"{tool.label} {prefix}: {version}" if version else f"{tool.label} {prefix}"


def ensure_tool(ctx: StageContext, tool: ToolSpec) -> Receipt:
    """Check one tool and install it if the user agrees."""
    console = ctx.console
    console.info(f"Checking for {tool.label}...")

    if not missing_binaries(ctx.system, tool):
        console.success(_present_message(ctx, tool, prefix="already installed"))
        return Receipt.success(STAGE, output=f"{tool.id} present", metadata={"tool": tool.id})

    console.warning(f"{tool.label} not found")
    if tool.purpose:
        console.info(f"{tool.label} is needed for {tool.purpose}")

    if not ctx.confirmer.confirm(f"Install {tool.label}?"):
        if tool.required:
            console.error(f"{tool.label} is required for {tool.purpose or 'installation'}")
            return Receipt.failure(
                STAGE,
                f"{tool.label} is required but installation was declined",
                kind="missing_dependency",
                metadata={"tool": tool.id},
            )
        console.warning(f"Skipping {tool.label} installation")
        console.info("Note: Some features may not work without it")
        return Receipt.skip(
            STAGE,
            reason=f"{tool.id} declined",
            deferred=[f"Install {tool.label}"],
            metadata={"tool": tool.id},
        )

    installer = ctx.packages.select(ctx.os_kind)
    if installer is None:
        if ctx.is_macos:
            console.error("Homebrew not found. Please install Homebrew first:")
            console.info("Visit: https://brew.sh")
        else:
            console.error(f"Could not detect package manager. Please install {tool.label} manually.")
        return Receipt.failure(
            STAGE,
            f"No supported package manager found to install {tool.label}",
            kind="environment",
            metadata={"tool": tool.id, "os": ctx.os_kind},
        )

    console.info(f"Installing {tool.label} via {installer.label}...")
    result = installer.install(tool)
    if not result.ok:
        console.error(f"Failed to install {tool.label}")
        return Receipt.failure(
            STAGE,
            f"Installing {tool.label} failed: {result.describe_error()}",
            kind="missing_dependency",
            metadata={"tool": tool.id, "manager": installer.id},
        )

    still_missing = missing_binaries(ctx.system, tool)
    if still_missing:
        console.error(f"{tool.label} installed but not found on PATH: {', '.join(still_missing)}")
        return Receipt.failure(
            STAGE,
            f"{tool.label} not on PATH after install",
            kind="missing_dependency",
            metadata={"tool": tool.id, "missing": still_missing},
        )

    console.success(f"{tool.label} installed")
    return Receipt.success(
        STAGE,
        output=f"{tool.id} installed",
        metadata={"tool": tool.id, "manager": installer.id},
    )


def ensure_binary(ctx: StageContext, binary: str) -> Receipt:
    """Make ``binary`` available through the configured tool that provides it."""
    tool = next((t for t in ctx.config.settings.tools if binary in t.binaries), None)
    if tool is None:
        if ctx.system.has(binary):
            return Receipt.success(STAGE, output=f"{binary} present")
        ctx.console.error(f"{binary} not found and no configured tool provides it")
        return Receipt.failure(
            STAGE,
            f"{binary} not found and no configured tool provides it",
            kind="missing_dependency",
        )
    return ensure_tool(ctx, tool)


def install_dependencies(ctx: StageContext) -> Receipt:
    """Ensure every configured tool, stopping at the first fatal one."""
    ctx.console.header("Installing Dependencies")

    installed: list[str] = []
    deferred: list[str] = []
    for tool in ctx.config.settings.tools:
        receipt = ensure_tool(ctx, tool)
        if receipt.failed:
            return receipt
        deferred.extend(receipt.deferred)
        if receipt.ok and receipt.metadata.get("manager"):
            installed.append(tool.id)

    ctx.console.success("All dependencies checked")
    return Receipt.success(
        STAGE,
        output=f"{len(installed)} installed",
        deferred=deferred,
        metadata={"installed": installed},
    )


def check_dependencies(ctx: StageContext) -> Receipt:
    """Assert presence only; never invokes a package manager."""
    console = ctx.console
    console.header("Checking Dependencies")

    missing_required: list[str] = []
    deferred: list[str] = []
    for tool in ctx.config.settings.tools:
        if not missing_binaries(ctx.system, tool):
            console.success(_present_message(ctx, tool))
        elif tool.required:
            console.error(f"{tool.label} not installed")
            missing_required.append(tool.id)
        else:
            console.warning(f"{tool.label} not installed (needed for {tool.purpose})")
            deferred.append(f"Install {tool.label}")

    if missing_required:
        console.error("Required dependencies missing")
        console.info("Remove --skip-deps to install dependencies")
        return Receipt.failure(
            STAGE,
            f"Missing required dependencies: {', '.join(missing_required)}",
            kind="missing_dependency",
            metadata={"missing": missing_required},
        )

    return Receipt.success(STAGE, output="all required present", deferred=deferred)


def dependencies_stage(ctx: StageContext) -> Receipt:
    if ctx.config.skip_deps:
        ctx.console.info("Skipping dependency installation (--skip-deps)")
        return check_dependencies(ctx)
    return install_dependencies(ctx)
