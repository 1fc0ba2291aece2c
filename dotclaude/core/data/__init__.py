"""Static installer data — tool dispatch table and MCP catalogues."""
