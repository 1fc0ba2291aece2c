"""
Tool dispatch table — what the dependency stage installs and how.

Package names are keyed by package-manager id (``brew``, ``apt``,
``dnf``, ``pacman``). ``setup`` commands run before the install
command for that manager; ``post_paths`` are prepended to the search
path after a successful install (keg-only Homebrew formulas).
"""

from __future__ import annotations

DEFAULT_TOOLS: list[dict] = [
    {
        "id": "stow",
        "label": "GNU Stow",
        "binaries": ["stow"],
        "required": True,
        "purpose": "configuration management",
        "packages": {
            "brew": ["stow"],
            "apt": ["stow"],
            "dnf": ["stow"],
            "pacman": ["stow"],
        },
    },
    {
        "id": "gettext",
        "label": "gettext (envsubst)",
        "binaries": ["envsubst"],
        "required": True,
        "purpose": "MCP setup",
        "packages": {
            "brew": ["gettext"],
            "apt": ["gettext-base"],
            "dnf": ["gettext"],
            "pacman": ["gettext"],
        },
        "post_paths": {
            "brew": ["/usr/local/opt/gettext/bin", "/opt/homebrew/opt/gettext/bin"],
        },
    },
    {
        "id": "node",
        "label": "Node.js",
        "binaries": ["node", "npm"],
        "required": False,
        "purpose": "Claude Code installation and MCP servers (context7, sequential-thinking, playwright)",
        "version_cmd": ["node", "--version"],
        "packages": {
            "brew": ["node"],
            "apt": ["nodejs"],
            "dnf": ["nodejs", "npm"],
            "pacman": ["nodejs", "npm"],
        },
        "setup": {
            "apt": [
                ["bash", "-c", "curl -fsSL https://deb.nodesource.com/setup_lts.x | bash -"],
            ],
        },
    },
]
