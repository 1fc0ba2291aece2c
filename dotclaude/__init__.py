"""dotclaude — installer for the assistant configuration tree and MCP servers."""

__version__ = "0.1.0"
