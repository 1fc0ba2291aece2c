"""
MCP setup — render ``~/.mcp.json`` from the template.

Values come from ``.env.mcp.local`` in the source checkout (created
from ``.env.mcp`` on first run) layered over the process environment.
Optional API keys left at their shipped placeholder are blanked, so
the servers that need them are simply unavailable. Substitution is
done by ``envsubst``, which is why gettext is a required dependency.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
from pathlib import Path

from dotclaude.adapters.base import SystemAdapter
from dotclaude.core.data.mcp_catalog import RUNTIME_LAUNCHERS
from dotclaude.core.models.receipt import Receipt
from dotclaude.core.models.settings import InstallConfig
from dotclaude.core.models.state import InstallState
from dotclaude.core.observability.console import Console
from dotclaude.core.services.backup import file_sha256

logger = logging.getLogger(__name__)

STAGE = "mcp_setup"

# ${VAR} left behind after substitution
_PLACEHOLDER_RE = re.compile(r"\$\{[^}]*\}")


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file into a key/value dict.

    Handles:
    - KEY=value
    - KEY="value"
    - KEY='value'
    - export KEY=value
    - Comments (#)
    - Empty lines
    """
    result: dict[str, str] = {}
    if not path.is_file():
        return result

    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("export "):
            line = line[7:].strip()

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]

        if key:
            result[key] = value

    return result


def find_unresolved(text: str) -> list[str]:
    """Template placeholders still present in ``text``."""
    return sorted(set(_PLACEHOLDER_RE.findall(text)))


def configured_servers(path: Path) -> list[str]:
    """Server names under ``mcpServers``; empty if unreadable."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Cannot read MCP servers from %s: %s", path, e)
        return []
    servers = data.get("mcpServers", {}) if isinstance(data, dict) else {}
    return sorted(servers) if isinstance(servers, dict) else []


def check_runtime_launchers(system: SystemAdapter, console: Console) -> list[str]:
    """Warn about missing ``npx``/``uvx``; returns the missing launchers."""
    console.info("Checking for required runtime tools...")
    missing = [name for name in RUNTIME_LAUNCHERS if not system.has(name)]
    if not missing:
        console.success("All required runtime tools found")
        return missing

    console.warning("Some runtime tools are missing:")
    for name in missing:
        launcher = RUNTIME_LAUNCHERS[name]
        console.echo(f"  ✗ {launcher['label']}")
        console.echo(f"    affects: {', '.join(launcher['servers'])}")
    console.info("Config will be deployed but these servers won't work until tools are installed")
    return missing


def ensure_env_local(config: InstallConfig, console: Console) -> Path | None:
    """Return the local env file, creating it from the template if needed."""
    local = config.env_local_path
    if local.is_file():
        return local

    console.warning(f"{local.name} not found")
    template = config.env_template_path
    if not template.is_file():
        console.error(f"Env template not found: {template}")
        return None

    console.info("Creating from template...")
    shutil.copy2(template, local)
    console.success(f"Created {local.name} from template")
    console.info("Note: Using placeholder API keys - some servers may not work")
    console.info(f"Edit {local.name} and re-run 'dotclaude mcp setup' to enable all servers")
    return local


def resolve_api_keys(
    config: InstallConfig,
    values: dict[str, str],
    console: Console,
) -> tuple[dict[str, str], list[str]]:
    """Blank optional keys that are unset or still placeholders.

    Returns:
        (values with blanks applied, names of unconfigured keys)
    """
    resolved = dict(values)
    missing: list[str] = []
    for key in config.settings.api_keys:
        current = resolved.get(key.name, os.environ.get(key.name, ""))
        if current and current != key.placeholder:
            continue
        missing.append(key.name)
        resolved[key.name] = ""
        console.warning(f"{key.name} not configured - {key.server} server will not be available")
        console.info(f"To enable {key.server} later: add {key.name} to {config.settings.env_local} and re-run setup")
        if key.hint:
            console.info(f"  • {key.hint}")
    return resolved, missing


def setup_mcp(
    config: InstallConfig,
    system: SystemAdapter,
    console: Console,
    state: InstallState | None = None,
) -> Receipt:
    """Render the MCP configuration into the home directory."""
    console.header("Setting up MCP Server Configuration")

    template = config.mcp_template_path
    if not template.is_file():
        console.error(f"MCP template not found: {template}")
        return Receipt.failure(STAGE, f"MCP template not found: {template}", kind="environment")

    missing_launchers = check_runtime_launchers(system, console)

    env_local = ensure_env_local(config, console)
    if env_local is None:
        return Receipt.failure(
            STAGE,
            f"Env template not found: {config.env_template_path}",
            kind="environment",
        )

    console.info(f"Loading environment variables from {env_local.name}...")
    values, missing_keys = resolve_api_keys(config, parse_env_file(env_local), console)

    if not system.has("envsubst"):
        console.error("envsubst not found (install gettext)")
        return Receipt.failure(STAGE, "envsubst is required to render the MCP template", kind="missing_dependency")

    try:
        template_text = template.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        console.error(f"MCP template is not valid UTF-8: {template}")
        return Receipt.failure(
            STAGE,
            f"MCP template is not valid UTF-8: {template} ({e.reason} at byte {e.start})",
            kind="environment",
        )

    target = config.mcp_file
    if target.is_symlink():
        console.warning(f"Found symlink at {target}, removing...")
        target.unlink()

    console.info(f"Generating {target} from template...")
    result = system.run(
        ["envsubst"],
        input_text=template_text,
        env=values,
        capture_limit=None,
    )
    if not result.ok:
        console.error("Template substitution failed")
        return Receipt.failure(STAGE, result.describe_error(), kind="environment")

    target.write_text(result.stdout, encoding="utf-8")
    console.success(f"MCP configuration deployed to {target}")

    unresolved = find_unresolved(result.stdout)
    if unresolved:
        console.warning("Some environment variables may not have been substituted")
        console.info(f"Remaining: {', '.join(unresolved)}")
    else:
        console.success("All environment variables substituted successfully")

    servers = configured_servers(target)
    if servers:
        console.info("Configured MCP servers:")
        for name in servers:
            console.echo(f"  - {name}")

    if state is not None:
        state.mcp_rendered_sha256 = file_sha256(target)

    return Receipt.success(
        STAGE,
        output=str(target),
        metadata={
            "servers": servers,
            "unresolved": unresolved,
            "missing_keys": missing_keys,
            "missing_launchers": missing_launchers,
        },
    )
