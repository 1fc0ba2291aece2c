"""
Symlink stage — link the configuration tree into home with GNU Stow.

The target is cleared first: an old symlink is always removed, a real
directory only when it was backed up (or ``--no-backup`` waives the
backup). Afterwards the target must be a symlink into the stow package
or an ordinary directory.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from dotclaude.core.engine.context import StageContext
from dotclaude.core.models.receipt import Receipt
from dotclaude.core.models.settings import InstallConfig

logger = logging.getLogger(__name__)

STAGE = "install_config"


def stow_command(config: InstallConfig) -> list[str]:
    return [
        "stow",
        "-v",
        "-d", str(config.source_root),
        "-t", str(config.home),
        config.settings.stow_package,
    ]


def verify_config_link(config: InstallConfig) -> tuple[bool, str]:
    """Check the post-condition on the configuration directory.

    Returns:
        (ok, detail). A symlink must resolve inside the stow package;
        a plain directory is accepted as is.
    """
    target = config.config_dir
    if target.is_symlink():
        resolved = target.resolve()
        if not resolved.exists():
            return False, f"{target} is a broken symlink"
        if not resolved.is_relative_to(config.package_dir.resolve()):
            return False, f"{target} points outside {config.package_dir}: {resolved}"
        return True, f"{target} → {resolved}"
    if target.is_dir():
        return True, f"Configuration directory exists: {target}"
    return False, f"Failed to create {target}"


def _clear_target(ctx: StageContext, target: Path) -> Receipt | None:
    """Remove what stands in the way; a failed Receipt if that's unsafe."""
    console = ctx.console

    if target.is_symlink():
        console.info(f"Found existing symlink at {target}, removing...")
        target.unlink()
        return None

    if not target.exists():
        return None

    if not ctx.config.no_backup:
        console.error(f"{target} exists but was not backed up")
        console.info("Run with --no-backup to force removal, or remove it manually")
        return Receipt.failure(
            STAGE,
            f"{target} exists but was not backed up",
            kind="state_conflict",
            metadata={"path": str(target)},
        )

    console.warning(f"Removing existing {target}")
    if target.is_dir():
        shutil.rmtree(target)
    else:
        target.unlink()
    return None


def install_config_tree(ctx: StageContext) -> Receipt:
    console = ctx.console
    config = ctx.config
    console.header("Installing Claude Configuration")

    if not config.package_dir.is_dir():
        console.error(f"Configuration package not found: {config.package_dir}")
        return Receipt.failure(
            STAGE,
            f"Configuration package not found: {config.package_dir}",
            kind="environment",
        )

    blocked = _clear_target(ctx, config.config_dir)
    if blocked is not None:
        return blocked

    console.info("Creating symlinks with GNU Stow...")
    result = ctx.system.run(stow_command(config))
    if not result.ok:
        console.error("GNU Stow failed")
        return Receipt.failure(
            STAGE,
            f"stow failed: {result.describe_error()}",
            kind="state_conflict",
            metadata={"command": result.cmd},
        )

    linked = "LINK" in result.combined_output
    if linked:
        console.success(f"Claude configuration symlinked: {config.config_dir}")
    else:
        # Judged by the post-condition below, not by stow's chatter.
        console.warning("No new symlinks created (may already exist)")

    ok, detail = verify_config_link(config)
    if not ok:
        console.error(detail)
        return Receipt.failure(
            STAGE,
            detail,
            kind="state_conflict",
            metadata={"linked": linked},
        )

    console.success(f"Verified: {detail}")
    return Receipt.success(STAGE, output=detail, metadata={"linked": linked})
