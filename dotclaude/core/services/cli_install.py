"""
CLI stage — install or update the Claude Code command-line tool.

macOS goes through the Homebrew tap, Linux through a global npm
install. Every decline is non-fatal and lands in ``deferred``; only a
missing channel (no brew / no npm) or a failing install aborts.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotclaude.adapters.base import INSTALL_TIMEOUT
from dotclaude.core.engine.context import StageContext
from dotclaude.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

STAGE = "install_cli"


def cli_version(ctx: StageContext) -> str:
    """First line of ``claude --version``, or ``unknown``."""
    result = ctx.system.run([ctx.config.settings.cli_binary, "--version"])
    return (result.first_line if result.ok else "") or "unknown"


def npm_package_dir(ctx: StageContext) -> Path | None:
    """Where the global npm install of the CLI lives, if npm can tell."""
    result = ctx.system.run(["npm", "root", "-g"])
    root = result.stdout.strip() if result.ok else ""
    if not root:
        return None
    return Path(root) / ctx.config.settings.cli_npm_package


def _update(ctx: StageContext) -> Receipt:
    console = ctx.console
    settings = ctx.config.settings

    if ctx.is_macos:
        result = ctx.system.run(
            ["brew", "upgrade", settings.cli_brew_formula], timeout=INSTALL_TIMEOUT,
        )
        if not result.ok:
            console.warning("Failed to update (may already be latest)")
            return Receipt.success(STAGE, output="update failed", metadata={"updated": False})
        console.success("Claude Code updated")
        return Receipt.success(STAGE, output="updated", metadata={"updated": True})

    cmd = ["npm", "install", "-g", f"{settings.cli_npm_package}@latest"]
    sudo = False
    pkg_dir = npm_package_dir(ctx)
    if pkg_dir is not None and pkg_dir.is_dir() and not os.access(pkg_dir, os.W_OK):
        console.warning("Claude Code is installed globally and requires elevated permissions")
        if not ctx.confirmer.confirm("Use sudo to update?"):
            console.warning("Skipping update")
            return Receipt.skip(
                STAGE,
                reason="sudo update declined",
                deferred=["Update Claude Code (needs sudo)"],
            )
        sudo = True

    result = ctx.system.run(cmd, sudo=sudo, timeout=INSTALL_TIMEOUT)
    if not result.ok:
        console.warning("Failed to update Claude Code")
        return Receipt.success(
            STAGE,
            output="update failed",
            deferred=["Update Claude Code"],
            metadata={"updated": False, "error": result.describe_error()},
        )
    console.success("Claude Code updated")
    return Receipt.success(STAGE, output="updated", metadata={"updated": True, "sudo": sudo})


def _install_macos(ctx: StageContext) -> Receipt | None:
    console = ctx.console
    settings = ctx.config.settings

    if not ctx.system.has("brew"):
        console.error("Homebrew not found. Please install Homebrew first:")
        console.info("Visit: https://brew.sh")
        return Receipt.failure(STAGE, "Homebrew is required to install Claude Code", kind="missing_dependency")

    console.info("Installing Claude Code via Homebrew...")
    taps = ctx.system.run(["brew", "tap"])
    if settings.cli_brew_tap not in taps.stdout:
        tap = ctx.system.run(["brew", "tap", settings.cli_brew_tap], timeout=INSTALL_TIMEOUT)
        if not tap.ok:
            console.error(f"Could not add tap {settings.cli_brew_tap}")
            return Receipt.failure(STAGE, tap.describe_error(), kind="missing_dependency")

    result = ctx.system.run(["brew", "install", settings.cli_brew_formula], timeout=INSTALL_TIMEOUT)
    if not result.ok:
        console.error("Failed to install Claude Code")
        return Receipt.failure(STAGE, result.describe_error(), kind="missing_dependency")
    return None


def _install_linux(ctx: StageContext) -> Receipt | None:
    console = ctx.console

    if not ctx.system.has("npm"):
        console.error("npm is required to install Claude Code")
        console.info("Please install Node.js/npm first")
        return Receipt.failure(STAGE, "npm is required to install Claude Code", kind="missing_dependency")

    console.info("Installing Claude Code via npm...")
    result = ctx.system.run(
        ["npm", "install", "-g", ctx.config.settings.cli_npm_package], timeout=INSTALL_TIMEOUT,
    )
    if not result.ok:
        console.error("Failed to install Claude Code")
        return Receipt.failure(STAGE, result.describe_error(), kind="missing_dependency")
    return None


def _authenticate(ctx: StageContext) -> list[str]:
    console = ctx.console
    binary = ctx.config.settings.cli_binary
    console.echo()
    console.info("Claude Code requires authentication with your Anthropic API key")
    if ctx.confirmer.confirm(f"Run '{binary} auth' now to authenticate?"):
        result = ctx.system.run([binary, "auth"], interactive=True, timeout=None)
        if result.ok:
            return []
        console.warning(f"'{binary} auth' did not complete")
    else:
        console.warning(f"Remember to run '{binary} auth' before using Claude Code")
    return [f"Run '{binary} auth'"]


def install_cli(ctx: StageContext) -> Receipt:
    console = ctx.console
    binary = ctx.config.settings.cli_binary
    console.header("Installing Claude Code CLI")

    if ctx.system.has(binary):
        console.success(f"Claude Code already installed: {cli_version(ctx)}")
        if ctx.confirmer.confirm("Update Claude Code to latest version?"):
            return _update(ctx)
        return Receipt.success(STAGE, output="present", metadata={"updated": False})

    console.warning("Claude Code not installed")
    console.info("Claude Code is the official CLI for agentic coding with Claude")

    if not ctx.confirmer.confirm("Install Claude Code?"):
        console.warning("Skipping Claude Code installation")
        console.info("You can install it later with: dotclaude cli install")
        return Receipt.skip(STAGE, reason="install declined", deferred=["Install Claude Code"])

    installer = _install_macos if ctx.is_macos else _install_linux
    failed = installer(ctx)
    if failed is not None:
        return failed

    console.success("Claude Code installed")
    deferred = _authenticate(ctx)
    return Receipt.success(STAGE, output="installed", deferred=deferred, metadata={"installed": True})
