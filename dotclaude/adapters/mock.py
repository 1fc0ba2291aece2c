"""
Mock system adapter — test double for the whole host.

Simulates which binaries exist and what commands print, and records
every command it is asked to run. Nothing touches the real machine.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from dotclaude.adapters.base import (
    OUTPUT_LIMIT,
    PROBE_TIMEOUT,
    CommandResult,
    SystemAdapter,
    trim_output,
)

Handler = Callable[["MockCall"], CommandResult | None]


@dataclass
class MockCall:
    """One recorded ``run`` invocation."""

    cmd: list[str]
    sudo: bool = False
    input_text: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    interactive: bool = False
    capture_limit: int | None = OUTPUT_LIMIT

    @property
    def line(self) -> str:
        return " ".join(self.cmd)


class MockSystemAdapter(SystemAdapter):
    """Configurable fake host.

    Responses are keyed by command prefix (``"brew install"``); the
    longest matching prefix wins. A handler may mutate the mock (add a
    binary, create files) and return a result, or None for the default.
    Unmatched commands succeed with empty output.
    """

    def __init__(
        self,
        system: str = "Linux",
        binaries: tuple[str, ...] | list[str] = (),
        root: bool = False,
    ):
        super().__init__()
        self._system = system
        self._binaries: set[str] = set(binaries)
        self._root = root
        self._responses: dict[str, CommandResult | Handler] = {}
        self._call_log: list[MockCall] = []
        self._probes: list[str] = []

    # ── SystemAdapter ───────────────────────────────────────────

    def platform_system(self) -> str:
        return self._system

    def which(self, binary: str) -> str | None:
        self._probes.append(binary)
        return f"/usr/bin/{binary}" if binary in self._binaries else None

    def is_root(self) -> bool:
        return self._root

    def run(
        self,
        cmd: list[str],
        *,
        sudo: bool = False,
        input_text: str | None = None,
        env: dict[str, str] | None = None,
        timeout: int | None = PROBE_TIMEOUT,
        interactive: bool = False,
        capture_limit: int | None = OUTPUT_LIMIT,
    ) -> CommandResult:
        call = MockCall(
            cmd=list(cmd),
            sudo=sudo and not self._root,
            input_text=input_text,
            env=dict(env or {}),
            interactive=interactive,
            capture_limit=capture_limit,
        )
        self._call_log.append(call)

        response = self._match(call.line)
        if response is None:
            result = None
        elif isinstance(response, CommandResult):
            result = response
        else:
            result = response(call)
        if result is None:
            return CommandResult(cmd=call.cmd)
        # Same tail-trimming as the real host
        return result.model_copy(update={
            "cmd": call.cmd,
            "stdout": trim_output(result.stdout, capture_limit),
            "stderr": trim_output(result.stderr, capture_limit),
        })

    # ── Configuration ───────────────────────────────────────────

    def add_binary(self, *binaries: str) -> None:
        self._binaries.update(binaries)

    def remove_binary(self, *binaries: str) -> None:
        self._binaries.difference_update(binaries)

    def set_response(
        self,
        prefix: str,
        stdout: str = "",
        returncode: int = 0,
        stderr: str = "",
    ) -> None:
        """Fix the output of every command starting with ``prefix``."""
        self._responses[prefix] = CommandResult(
            returncode=returncode, stdout=stdout, stderr=stderr,
        )

    def set_failure(self, prefix: str, stderr: str = "Mock failure", returncode: int = 1) -> None:
        """Make every command starting with ``prefix`` fail."""
        self.set_response(prefix, returncode=returncode, stderr=stderr)

    def set_handler(self, prefix: str, handler: Handler) -> None:
        """Run ``handler`` for every command starting with ``prefix``."""
        self._responses[prefix] = handler

    def provides(self, prefix: str, *binaries: str) -> None:
        """Commands starting with ``prefix`` make ``binaries`` appear."""

        def _install(call: MockCall) -> None:
            self.add_binary(*binaries)

        self.set_handler(prefix, _install)

    # ── Inspection ──────────────────────────────────────────────

    @property
    def call_log(self) -> list[MockCall]:
        """All commands this mock has run, in order."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def probes(self) -> list[str]:
        """Every binary name passed to ``which``."""
        return self._probes

    def calls_to(self, binary: str) -> list[MockCall]:
        """Recorded calls whose executable is ``binary``."""
        return [c for c in self._call_log if c.cmd and c.cmd[0] == binary]

    def ran(self, prefix: str) -> bool:
        return any(c.line.startswith(prefix) for c in self._call_log)

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()
        self._probes.clear()

    def _match(self, line: str) -> CommandResult | Handler | None:
        best: str | None = None
        for prefix in self._responses:
            if line == prefix or line.startswith(prefix + " "):
                if best is None or len(prefix) > len(best):
                    best = prefix
        return self._responses[best] if best is not None else None
