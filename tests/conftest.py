"""
Shared test fixtures and configuration.

``system`` is a MockSystemAdapter that behaves like a healthy Linux
box: every tool present, a stow that really creates symlinks inside
the temp home, and an envsubst that really substitutes.
"""

import json
import os
import re
import textwrap
from pathlib import Path

import pytest

from dotclaude.adapters.base import CommandResult
from dotclaude.adapters.mock import MockCall, MockSystemAdapter
from dotclaude.adapters.registry import PackageInstallerRegistry
from dotclaude.core.engine.context import StageContext
from dotclaude.core.models.settings import InstallConfig
from dotclaude.core.models.state import InstallState
from dotclaude.core.observability.console import Console
from dotclaude.core.prompts import ScriptedConfirmer

MCP_TEMPLATE = {
    "mcpServers": {
        "context7": {
            "command": "npx",
            "args": ["-y", "@upstash/context7-mcp"],
            "env": {"CONTEXT7_API_KEY": "${CONTEXT7_API_KEY}"},
        },
        "sequential-thinking": {
            "command": "npx",
            "args": ["-y", "@modelcontextprotocol/server-sequential-thinking"],
        },
        "taskmaster": {
            "command": "npx",
            "args": ["-y", "task-master-ai"],
            "env": {"ANTHROPIC_API_KEY": "${ANTHROPIC_API_KEY}"},
        },
    }
}

ENV_TEMPLATE = textwrap.dedent("""\
    # MCP server API keys
    CONTEXT7_API_KEY=your_api_key_here
    ANTHROPIC_API_KEY=your_anthropic_api_key_here
""")

ALL_BINARIES = (
    "apt-get", "stow", "envsubst", "node", "npm", "npx", "uvx", "claude",
)

_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def fake_envsubst(call: MockCall) -> CommandResult:
    """Substitute $VAR / ${VAR} like gettext's envsubst."""
    def _sub(m: re.Match) -> str:
        name = m.group(1) or m.group(2)
        return call.env.get(name, os.environ.get(name, ""))

    return CommandResult(cmd=call.cmd, stdout=_VAR_RE.sub(_sub, call.input_text or ""))


def fake_stow(call: MockCall) -> CommandResult:
    """Link every top-level entry of the package into the target dir."""
    args = call.cmd[1:]
    stow_dir = Path(args[args.index("-d") + 1])
    target = Path(args[args.index("-t") + 1])
    package = args[-1]

    lines = []
    for entry in sorted((stow_dir / package).iterdir()):
        dest = target / entry.name
        if dest.is_symlink() and dest.resolve() == entry.resolve():
            continue
        if dest.exists() or dest.is_symlink():
            return CommandResult(
                cmd=call.cmd,
                returncode=1,
                stderr=f"WARNING! stowing {package} would cause conflicts:\n"
                       f"  * existing target is neither a link nor a directory: {entry.name}",
            )
        dest.symlink_to(os.path.relpath(entry, target))
        lines.append(f"LINK: {entry.name} => {os.path.relpath(entry, target)}")
    return CommandResult(cmd=call.cmd, stderr="\n".join(lines))


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """An empty home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """A source checkout with the stow package, MCP template and env template."""
    root = tmp_path / "dotclaude"
    tree = root / "claude" / ".claude"
    (tree / "docs").mkdir(parents=True)
    (tree / "CLAUDE.md").write_text("# Orchestration rules\n")
    (tree / "docs" / "tdd.md").write_text("# TDD workflow\n")

    (root / "mcp").mkdir()
    (root / "mcp" / "mcp.json.template").write_text(json.dumps(MCP_TEMPLATE, indent=2))
    (root / ".env.mcp").write_text(ENV_TEMPLATE)
    return root


@pytest.fixture
def config(home: Path, source_root: Path) -> InstallConfig:
    return InstallConfig(home=home, source_root=source_root)


@pytest.fixture
def system() -> MockSystemAdapter:
    mock = MockSystemAdapter(system="Linux", binaries=ALL_BINARIES)
    mock.set_handler("stow", fake_stow)
    mock.set_handler("envsubst", fake_envsubst)
    mock.set_response("node --version", stdout="v20.11.0\n")
    mock.set_response("claude --version", stdout="1.0.0 (Claude Code)\n")
    return mock


@pytest.fixture
def console() -> Console:
    return Console()


@pytest.fixture
def confirmer() -> ScriptedConfirmer:
    """Says yes to everything except running ``claude auth``."""
    return ScriptedConfirmer(answers={"auth": False, "Update Claude Code": False})


@pytest.fixture
def make_ctx(config, system, confirmer, console):
    """Build a StageContext; keyword overrides replace any field."""
    def _make(**overrides) -> StageContext:
        sys_ = overrides.pop("system", system)
        fields = {
            "config": config,
            "system": sys_,
            "confirmer": confirmer,
            "console": console,
            "packages": PackageInstallerRegistry(sys_),
            "state": InstallState(),
            "os_kind": "macos" if sys_.platform_system() == "Darwin" else "linux",
        }
        fields.update(overrides)
        return StageContext(**fields)

    return _make


@pytest.fixture
def mac_system() -> MockSystemAdapter:
    """The same healthy host, but macOS with Homebrew."""
    mock = MockSystemAdapter(system="Darwin", binaries=ALL_BINARIES + ("brew",))
    mock.set_handler("stow", fake_stow)
    mock.set_handler("envsubst", fake_envsubst)
    mock.set_response("claude --version", stdout="1.0.0 (Claude Code)\n")
    return mock
