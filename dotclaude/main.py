"""
dotclaude — CLI entrypoint.

Usage:
    dotclaude install [--skip-deps] [--no-backup] [--yes]
    dotclaude validate [--json]
    dotclaude cli install [--yes]
    dotclaude mcp setup [--yes]
    dotclaude mcp list [--json]
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from dotclaude import __version__
from dotclaude.core.observability.logging_config import setup_from_env

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class InstallerGroup(click.Group):
    """Click group whose usage errors exit with 1 instead of click's 2."""

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@click.group(cls=InstallerGroup, context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="dotclaude")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--source",
    "-s",
    "source_path",
    type=click.Path(file_okay=False),
    default=None,
    help="Source checkout holding the configuration (default: $DOTCLAUDE_SOURCE or cwd).",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to dotclaude.yml (default: <source>/dotclaude.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    source_path: str | None,
    config_path: str | None,
) -> None:
    """dotclaude — install the Claude Code configuration and MCP servers."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["source_path"] = Path(source_path) if source_path else None
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_from_env(debug=debug, verbose=verbose, quiet=quiet)


def _load_config(ctx: click.Context, **flags):
    """Build the InstallConfig or exit 1 with the configuration error."""
    from dotclaude.core.config.loader import ConfigError, build_install_config

    try:
        return build_install_config(
            source_root=ctx.obj.get("source_path"),
            settings_path=ctx.obj.get("config_path"),
            home=ctx.obj.get("home"),
            **flags,
        )
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


def _system(ctx: click.Context):
    """The host adapter; tests inject a mock through ``obj``."""
    from dotclaude.adapters.shell.command import ShellSystemAdapter

    return ctx.obj.get("system") or ShellSystemAdapter()


def _console(ctx: click.Context):
    from dotclaude.core.observability.console import Console

    return Console(quiet=ctx.obj.get("quiet", False))


def _stage_context(ctx: click.Context, config):
    """Detect the OS and build a StageContext, or exit 1 on an unsupported OS."""
    from dotclaude.core.engine.installer import build_context

    detected, stage_ctx = build_context(
        config, _system(ctx), _console(ctx), confirmer=ctx.obj.get("confirmer"),
    )
    if stage_ctx is None:
        _exit_on_failure(detected)
    return stage_ctx


def _exit_on_failure(receipt) -> None:
    if receipt.failed:
        click.secho(f"❌ {receipt.error}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.option("--skip-deps", is_flag=True, help="Skip dependency installation (use if deps already installed).")
@click.option("--no-backup", is_flag=True, help="Skip backup creation (use with caution).")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to every prompt.")
@click.pass_context
def install(
    ctx: click.Context,
    skip_deps: bool,
    no_backup: bool,
    assume_yes: bool,
) -> None:
    """Run the full installation.

    Examples:

        dotclaude install                # full installation with all steps

        dotclaude install --skip-deps    # skip dependency installation

        dotclaude install --no-backup    # skip backup (not recommended)
    """
    from dotclaude.core.engine.installer import run_install

    config = _load_config(ctx, skip_deps=skip_deps, no_backup=no_backup, assume_yes=assume_yes)
    report = run_install(config, _system(ctx), _console(ctx), ctx.obj.get("confirmer"))

    failure = report.failure
    if failure is not None:
        click.echo()
        click.secho(f"❌ Installation failed at '{failure.stage}': {failure.error}", fg="red", err=True)
        sys.exit(report.exit_code)

    if report.deferred:
        click.echo()
        click.secho("⚠️  Deferred steps:", fg="yellow")
        for step in report.deferred:
            click.echo(f"   • {step}")

    _show_next_steps(config)


def _show_next_steps(config) -> None:
    configured = config.env_local_path.is_file() and config.mcp_file.is_file()

    click.echo()
    click.secho("✅ Claude Code configuration installed successfully!", fg="green", bold=True)
    click.echo()
    click.secho("Next steps:", fg="blue", bold=True)

    steps: list[tuple[str, list[str]]] = []
    if not configured:
        steps.append((
            "Configure API keys (optional):",
            [
                f"Edit {config.env_local_path} with your actual API keys",
                "Then run: dotclaude mcp setup",
            ],
        ))
    steps += [
        ("Test Claude Code:", ["claude --version"]),
        ("Verify MCP servers:", ["dotclaude mcp list", "Or in Claude Code: /mcp"]),
        ("Start using Claude Code:", ["claude"]),
    ]
    for n, (title, lines) in enumerate(steps, start=1):
        click.secho(f"{n}. {title}", fg="yellow")
        for line in lines:
            click.echo(f"   {line}")
        click.echo()

    click.secho("Configuration:", fg="blue", bold=True)
    click.echo(f"   • Claude config: {config.config_dir}")
    click.echo(f"   • MCP config: {config.mcp_file}")
    click.echo(f"   • API keys: {config.env_local_path}")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def validate(ctx: click.Context, as_json: bool) -> None:
    """Check the installed configuration without changing anything."""
    from dotclaude.core.services.validation import print_report, validate_installation

    config = _load_config(ctx)
    report = validate_installation(config, _system(ctx))

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(0 if report.passed else 1)

    console = _console(ctx)
    console.header("Validating Installation")
    print_report(report, console)
    if not report.passed:
        console.error("Validation failed")
        sys.exit(1)
    console.success("Installation validation passed")


@cli.group("cli")
def cli_commands() -> None:
    """Claude Code CLI commands."""


@cli_commands.command("install")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to every prompt.")
@click.pass_context
def cli_install(ctx: click.Context, assume_yes: bool) -> None:
    """Install or update the Claude Code CLI on its own."""
    from dotclaude.core.services.cli_install import install_cli

    config = _load_config(ctx, assume_yes=assume_yes)
    stage_ctx = _stage_context(ctx, config)

    receipt = install_cli(stage_ctx)
    _exit_on_failure(receipt)

    if receipt.deferred:
        click.echo()
        click.secho("⚠️  Deferred steps:", fg="yellow")
        for step in receipt.deferred:
            click.echo(f"   • {step}")


@cli.group()
def mcp() -> None:
    """MCP server configuration commands."""


@mcp.command("setup")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Install gettext without asking if envsubst is missing.")
@click.pass_context
def mcp_setup(ctx: click.Context, assume_yes: bool) -> None:
    """Render ~/.mcp.json from the template and .env.mcp.local."""
    from dotclaude.core.persistence.state_file import save_state
    from dotclaude.core.services.dependencies import ensure_binary
    from dotclaude.core.services.mcp_setup import setup_mcp

    config = _load_config(ctx, assume_yes=assume_yes)
    stage_ctx = _stage_context(ctx, config)

    if not stage_ctx.system.has("envsubst"):
        _exit_on_failure(ensure_binary(stage_ctx, "envsubst"))

    _exit_on_failure(setup_mcp(config, stage_ctx.system, stage_ctx.console, state=stage_ctx.state))

    save_state(stage_ctx.state, config.state_path)
    console = stage_ctx.console
    console.echo()
    console.success("MCP setup complete!")
    console.info("Next steps:")
    console.info("  1. Restart Claude Code to load new MCP servers")
    console.info("  2. Verify with: /mcp command in Claude Code")
    console.info(f"  3. Check logs if servers don't load: {config.config_dir / 'logs'}")


@mcp.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def mcp_list(ctx: click.Context, as_json: bool) -> None:
    """List configured MCP servers and their known tools."""
    from dotclaude.core.services.mcp_tools import McpConfigError, describe_servers

    config = _load_config(ctx)
    try:
        servers = describe_servers(config.mcp_file)
    except McpConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in servers], indent=2))
        return

    click.secho(f"\n🔌 MCP servers ({len(servers)}):", fg="cyan", bold=True)
    for s in servers:
        click.secho(f"   ✓ {s.name}", fg="green")
        click.echo(f"     Command: {' '.join([s.command] + s.args).strip()}")
    click.echo()

    click.secho("🧰 Known tools by server:", fg="cyan", bold=True)
    click.echo("   Tool names follow mcp__<server-name>__<tool-name>")
    for s in servers:
        click.echo()
        click.secho(f"   {s.label or s.name}", fg="white", bold=True)
        for tool in s.tools:
            click.echo(f"     • {tool}")
        if s.note:
            click.echo(f"     {s.note}")
    click.echo()
    click.echo("Run '/mcp' in a Claude Code session for the authoritative list.")


if __name__ == "__main__":
    cli()
