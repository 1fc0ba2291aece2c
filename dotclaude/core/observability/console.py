"""
Console — coloured status lines for the person running the installer.

This is user-facing progress output, separate from ``logging``:
logs are diagnostics on stderr, the console is the conversation.
Errors go to stderr, everything else to stdout.
"""

from __future__ import annotations

import click

_RULE = "━" * 66


class Console:
    """Status printer with ``info``/``success``/``warning``/``error`` lines."""

    def __init__(self, quiet: bool = False):
        self._quiet = quiet

    def header(self, title: str) -> None:
        if self._quiet:
            return
        click.echo()
        click.secho(_RULE, fg="blue")
        click.secho(title, fg="blue", bold=True)
        click.secho(_RULE, fg="blue")
        click.echo()

    def info(self, message: str) -> None:
        if self._quiet:
            return
        click.secho("ℹ ", fg="blue", nl=False)
        click.echo(message)

    def success(self, message: str) -> None:
        if self._quiet:
            return
        click.secho("✓ ", fg="green", nl=False)
        click.echo(message)

    def warning(self, message: str) -> None:
        click.secho("⚠ ", fg="yellow", nl=False)
        click.echo(message)

    def error(self, message: str) -> None:
        click.secho("✗ ", fg="red", nl=False, err=True)
        click.echo(message, err=True)

    def echo(self, message: str = "") -> None:
        if not self._quiet:
            click.echo(message)
