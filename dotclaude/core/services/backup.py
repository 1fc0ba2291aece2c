"""
Backup stage — copy an existing configuration aside before it is replaced.

Backups are sibling copies named ``PATH.backup.YYYYmmdd-HHMMSS`` and are
never deleted by the installer. The original is removed only after its
copy succeeded. Symlinks are left alone: they point at a previous
install and are replaced in the symlink stage.
"""

from __future__ import annotations

import filecmp
import hashlib
import logging
import re
import shutil
import time
from pathlib import Path

from dotclaude.core.engine.context import StageContext
from dotclaude.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

STAGE = "backup"

BACKUP_MARKER = ".backup."
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
_STAMP_RE = re.compile(r"^(\d{8}-\d{6})(?:-(\d+))?$")


def backup_path_for(path: Path, timestamp: str | None = None) -> Path:
    """Free backup location for ``path``.

    Two backups within the same second get ``-1``, ``-2``, ... suffixes.
    """
    ts = timestamp or time.strftime(TIMESTAMP_FORMAT)
    candidate = path.with_name(f"{path.name}{BACKUP_MARKER}{ts}")
    n = 1
    while candidate.exists() or candidate.is_symlink():
        candidate = path.with_name(f"{path.name}{BACKUP_MARKER}{ts}-{n}")
        n += 1
    return candidate


def _backup_order(prefix: str, backup: Path) -> tuple[str, int]:
    """Sort key: timestamp, then numeric collision suffix (-2 before -10)."""
    stamp = backup.name[len(prefix):]
    m = _STAMP_RE.match(stamp)
    if m is None:
        return stamp, 0
    return m.group(1), int(m.group(2) or 0)


def list_backups(path: Path) -> list[Path]:
    """Existing backups of ``path``, oldest first."""
    if not path.parent.is_dir():
        return []
    prefix = f"{path.name}{BACKUP_MARKER}"
    return sorted(
        path.parent.glob(f"{prefix}*"),
        key=lambda p: _backup_order(prefix, p),
    )


def backup_file(path: Path, timestamp: str | None = None) -> Path:
    """Copy ``path`` to a timestamped sibling and return the copy's location.

    Directories are copied recursively with inner symlinks preserved.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        OSError: If the copy fails.
    """
    if not path.exists():
        raise FileNotFoundError(path)

    dest = backup_path_for(path, timestamp)
    if path.is_dir():
        shutil.copytree(path, dest, symlinks=True)
    else:
        shutil.copy2(path, dest)
    logger.info("Backed up %s → %s", path, dest)
    return dest


def file_sha256(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def _needs_backup(ctx: StageContext, path: Path) -> tuple[bool, str]:
    """Whether a regular file's content is already safe elsewhere."""
    if path.is_dir():
        return True, ""

    if path == ctx.config.mcp_file and ctx.state.mcp_rendered_sha256:
        if file_sha256(path) == ctx.state.mcp_rendered_sha256:
            return False, "generated by a previous install"

    previous = list_backups(path)
    if previous and previous[-1].is_file() and filecmp.cmp(path, previous[-1], shallow=False):
        return False, f"unchanged since {previous[-1].name}"

    return True, ""


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def backup_existing_config(ctx: StageContext) -> Receipt:
    """Back up and remove the configuration directory and MCP file."""
    console = ctx.console
    console.header("Backing Up Existing Configuration")

    home = ctx.config.home
    created: list[str] = []

    for target in (ctx.config.config_dir, ctx.config.mcp_file):
        label = f"~/{target.relative_to(home)}" if target.is_relative_to(home) else str(target)

        if target.is_symlink():
            console.info(f"{label} is a symlink from a previous install, preserving")
            continue

        if not target.exists():
            console.info(f"No existing {label} found")
            continue

        needed, reason = _needs_backup(ctx, target)
        if needed:
            try:
                dest = backup_file(target)
            except OSError as e:
                console.error(f"Could not back up {label}: {e}")
                return Receipt.failure(
                    STAGE,
                    f"Backup of {target} failed: {e}",
                    kind="state_conflict",
                    metadata={"path": str(target), "backups": created},
                )
            created.append(str(dest))
            ctx.state.backups.append(str(dest))
            console.success(f"Backed up: {label} → {dest}")
        else:
            console.info(f"{label} needs no new backup ({reason})")

        try:
            _remove(target)
        except OSError as e:
            console.error(f"Could not remove {label}: {e}")
            return Receipt.failure(
                STAGE,
                f"Removing {target} failed: {e}",
                kind="state_conflict",
                metadata={"path": str(target), "backups": created},
            )
        console.info(f"Removed original {label}")

    if not created:
        console.info("No existing configuration to back up")

    return Receipt.success(
        STAGE,
        output=f"{len(created)} backup(s)",
        metadata={"backups": created},
    )


def backup_stage(ctx: StageContext) -> Receipt:
    if ctx.config.no_backup:
        ctx.console.warning("Skipping backup (--no-backup)")
        return Receipt.skip(STAGE, reason="--no-backup")
    return backup_existing_config(ctx)
