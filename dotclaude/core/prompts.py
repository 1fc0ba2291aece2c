"""
Confirmation providers — how the installer asks yes/no questions.

Stages only see the ``Confirmer`` protocol. The CLI picks the
interactive provider, or the auto-answer one for ``--yes``; tests use
``ScriptedConfirmer``.
"""

from __future__ import annotations

import logging
import sys
from typing import Protocol

import click

logger = logging.getLogger(__name__)


class Confirmer(Protocol):
    def confirm(self, prompt: str) -> bool: ...


class InteractiveConfirmer:
    """Ask on the terminal; default answer is No.

    Without a terminal on stdin every question is declined, so a
    non-interactive run never blocks.
    """

    def confirm(self, prompt: str) -> bool:
        if not sys.stdin.isatty():
            logger.info("Non-interactive stdin, declining: %s", prompt)
            return False
        return click.confirm(prompt, default=False)


class AutoConfirmer:
    """Answer every question the same way (``--yes``)."""

    def __init__(self, answer: bool = True):
        self._answer = answer

    def confirm(self, prompt: str) -> bool:
        logger.info("Auto-%s: %s", "accepting" if self._answer else "declining", prompt)
        return self._answer


class ScriptedConfirmer:
    """Deterministic answers for tests.

    ``answers`` maps a prompt substring to the reply; anything
    unmatched gets ``default``. Every prompt asked is recorded.
    """

    def __init__(self, answers: dict[str, bool] | None = None, default: bool = True):
        self._answers = answers or {}
        self._default = default
        self.asked: list[str] = []

    def confirm(self, prompt: str) -> bool:
        self.asked.append(prompt)
        for fragment, reply in self._answers.items():
            if fragment in prompt:
                return reply
        return self._default


def confirmer_for(assume_yes: bool) -> Confirmer:
    """``AutoConfirmer`` for ``--yes``, otherwise ask on the terminal."""
    return AutoConfirmer() if assume_yes else InteractiveConfirmer()
