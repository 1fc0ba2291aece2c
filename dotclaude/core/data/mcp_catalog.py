"""
MCP catalogue — optional API keys and known tool names per server.

Tool names follow ``mcp__<server>__<tool>``. Servers whose tools can
only be discovered at runtime carry an empty list and a note.
"""

from __future__ import annotations

DEFAULT_API_KEYS: list[dict] = [
    {
        "name": "CONTEXT7_API_KEY",
        "placeholder": "your_api_key_here",
        "server": "context7",
        "hint": "Get key from: https://console.upstash.com",
    },
    {
        "name": "ANTHROPIC_API_KEY",
        "placeholder": "your_anthropic_api_key_here",
        "server": "taskmaster",
    },
]

# Launchers the MCP servers are started with, and who needs them.
RUNTIME_LAUNCHERS: dict[str, dict] = {
    "npx": {
        "label": "npx (Node.js/npm)",
        "servers": ["context7", "sequential-thinking", "playwright"],
    },
    "uvx": {
        "label": "uvx (Python/uv)",
        "servers": ["aws-core", "aws-cdk"],
    },
}

KNOWN_TOOLS: dict[str, dict] = {
    "context7": {
        "label": "Context7 (Documentation Lookup)",
        "tools": ["resolve-library-id", "get-library-docs"],
    },
    "serena": {
        "label": "Serena (Semantic Code Retrieval)",
        "tools": [],
    },
    "sequential-thinking": {
        "label": "Sequential Thinking (Problem Solving)",
        "tools": ["sequentialthinking"],
    },
    "playwright": {
        "label": "Playwright (Browser Automation)",
        "tools": [
            "puppeteer_navigate",
            "puppeteer_screenshot",
            "puppeteer_click",
            "puppeteer_fill",
            "puppeteer_select",
            "puppeteer_hover",
            "puppeteer_evaluate",
        ],
        "partial": True,
    },
    "aws-core": {
        "label": "AWS Core (Foundation AWS Operations)",
        "tools": [],
    },
    "aws-cdk": {
        "label": "AWS CDK (Infrastructure as Code)",
        "tools": [],
    },
    "browser-tools": {
        "label": "Browser Tools (Browser Debugging & Auditing)",
        "tools": [
            "getConsoleLogs",
            "getConsoleErrors",
            "getNetworkErrors",
            "getNetworkLogs",
            "takeScreenshot",
            "getSelectedElement",
            "wipeLogs",
            "runAccessibilityAudit",
            "runPerformanceAudit",
            "runSEOAudit",
            "runNextJSAudit",
            "runDebuggerMode",
            "runAuditMode",
            "runBestPracticesAudit",
        ],
    },
}
