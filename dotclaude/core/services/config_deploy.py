"""
Config deployment stage — hand off to MCP setup and check it succeeded.
"""

from __future__ import annotations

from dotclaude.core.engine.context import StageContext
from dotclaude.core.models.receipt import Receipt
from dotclaude.core.services.mcp_setup import setup_mcp

STAGE = "deploy_mcp_config"


def deploy_mcp_config(ctx: StageContext) -> Receipt:
    console = ctx.console
    console.header("Deploying MCP Configuration")

    template = ctx.config.mcp_template_path
    if not template.is_file():
        console.error(f"MCP template not found: {template}")
        return Receipt.failure(STAGE, f"MCP template not found: {template}", kind="environment")

    console.info("Running MCP setup...")
    receipt = setup_mcp(ctx.config, ctx.system, console, state=ctx.state)
    if receipt.ok:
        console.success("MCP configuration deployed")
    return receipt.model_copy(update={"stage": STAGE})
