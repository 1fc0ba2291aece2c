"""
MCP tool discovery — what servers ``~/.mcp.json`` configures and which
tool names they are expected to expose.

The catalogue is static; the authoritative list only exists inside a
running Claude Code session (``/mcp``).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from dotclaude.core.data.mcp_catalog import KNOWN_TOOLS

logger = logging.getLogger(__name__)


class McpConfigError(Exception):
    """Raised when the MCP configuration is missing or malformed."""


@dataclass
class ServerInfo:
    name: str
    command: str = ""
    args: list[str] = field(default_factory=list)
    label: str = ""
    tools: list[str] = field(default_factory=list)
    note: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "command": self.command,
            "args": self.args,
            "label": self.label,
            "tools": self.tools,
            "note": self.note,
        }


def tool_name(server: str, tool: str) -> str:
    return f"mcp__{server}__{tool}"


def load_servers(path: Path) -> dict[str, dict]:
    """Read the ``mcpServers`` mapping.

    Raises:
        McpConfigError: If the file is missing or not valid MCP JSON.
    """
    if not path.is_file():
        raise McpConfigError(f"{path} not found. Run 'dotclaude mcp setup' first.")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise McpConfigError(f"{path} is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise McpConfigError(f"Invalid JSON in {path}: {e}") from e

    servers = data.get("mcpServers") if isinstance(data, dict) else None
    if not isinstance(servers, dict):
        raise McpConfigError(f"No 'mcpServers' mapping in {path}")
    return servers


def describe_servers(path: Path) -> list[ServerInfo]:
    """Configured servers with their launch command and known tools."""
    result: list[ServerInfo] = []
    for name, spec in sorted(load_servers(path).items()):
        spec = spec if isinstance(spec, dict) else {}
        info = ServerInfo(
            name=name,
            command=str(spec.get("command", spec.get("url", ""))),
            args=[str(a) for a in spec.get("args", [])],
        )
        known = KNOWN_TOOLS.get(name)
        if known is None:
            info.note = "Unknown server; run '/mcp' in Claude Code to list its tools"
        else:
            info.label = known["label"]
            info.tools = [tool_name(name, t) for t in known["tools"]]
            if not known["tools"]:
                info.note = "Tools require runtime query; run '/mcp' in Claude Code"
            elif known.get("partial"):
                info.note = "Run '/mcp' in Claude Code to see all tools"
        result.append(info)
    return result
