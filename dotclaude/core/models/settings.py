"""
Installer settings and the per-run install configuration.

``InstallerSettings`` is what ``dotclaude.yml`` may override.
``InstallConfig`` is the immutable record built once per run from the
settings plus CLI flags, and passed explicitly to every stage.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from dotclaude.core.data.mcp_catalog import DEFAULT_API_KEYS
from dotclaude.core.data.tools import DEFAULT_TOOLS


class ToolSpec(BaseModel):
    """An external tool the dependency stage checks and installs."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    binaries: list[str]
    required: bool = True
    purpose: str = ""
    version_cmd: list[str] | None = None
    packages: dict[str, list[str]] = Field(default_factory=dict)
    setup: dict[str, list[list[str]]] = Field(default_factory=dict)
    post_paths: dict[str, list[str]] = Field(default_factory=dict)


class ApiKeySpec(BaseModel):
    """An optional API key consumed by one MCP server."""

    model_config = ConfigDict(frozen=True)

    name: str
    placeholder: str = ""
    server: str = ""
    hint: str = ""


def _default_tools() -> list[ToolSpec]:
    return [ToolSpec.model_validate(t) for t in DEFAULT_TOOLS]


def _default_api_keys() -> list[ApiKeySpec]:
    return [ApiKeySpec.model_validate(k) for k in DEFAULT_API_KEYS]


class InstallerSettings(BaseModel):
    """Overridable installer settings (``dotclaude.yml``)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Home-relative targets
    config_dir_name: str = ".claude"
    mcp_file_name: str = ".mcp.json"

    # Stow package inside the source checkout
    stow_package: str = "claude"

    # Assistant CLI
    cli_binary: str = "claude"
    cli_npm_package: str = "@anthropic-ai/claude-code"
    cli_brew_formula: str = "claude"
    cli_brew_tap: str = "anthropics/claude"

    # MCP setup (relative to the source checkout)
    mcp_template: str = "mcp/mcp.json.template"
    env_template: str = ".env.mcp"
    env_local: str = ".env.mcp.local"
    api_keys: list[ApiKeySpec] = Field(default_factory=_default_api_keys)

    tools: list[ToolSpec] = Field(default_factory=_default_tools)


class InstallConfig(BaseModel):
    """Everything one installer run needs to know, fixed at startup."""

    model_config = ConfigDict(frozen=True)

    home: Path
    source_root: Path
    skip_deps: bool = False
    no_backup: bool = False
    assume_yes: bool = False
    settings: InstallerSettings = Field(default_factory=InstallerSettings)

    @property
    def config_dir(self) -> Path:
        """The home-relative configuration directory (``~/.claude``)."""
        return self.home / self.settings.config_dir_name

    @property
    def mcp_file(self) -> Path:
        """The rendered MCP configuration (``~/.mcp.json``)."""
        return self.home / self.settings.mcp_file_name

    @property
    def package_dir(self) -> Path:
        """The stow package holding the configuration tree."""
        return self.source_root / self.settings.stow_package

    @property
    def mcp_template_path(self) -> Path:
        return self.source_root / self.settings.mcp_template

    @property
    def env_template_path(self) -> Path:
        return self.source_root / self.settings.env_template

    @property
    def env_local_path(self) -> Path:
        return self.source_root / self.settings.env_local

    @property
    def state_path(self) -> Path:
        """Installer state file inside the source checkout."""
        return self.source_root / ".state" / "install.json"
