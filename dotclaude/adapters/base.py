"""
System adapter base — the contract between stages and the host.

Every subprocess call and every PATH probe the installer makes goes
through a ``SystemAdapter``. Stages never import ``subprocess`` or
``shutil.which`` themselves, so a test double can stand in for the
whole machine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

# Seconds. Package downloads are slow; probes are not.
INSTALL_TIMEOUT = 600
PROBE_TIMEOUT = 30

# Characters of stdout/stderr kept by default. Callers that consume the
# output itself pass capture_limit=None.
OUTPUT_LIMIT = 4000


def trim_output(text: str, limit: int | None) -> str:
    """Keep the last ``limit`` characters of ``text``; None keeps all."""
    if limit is None or len(text) <= limit:
        return text
    return text[-limit:]


class CommandResult(BaseModel):
    """Outcome of one command. Adapters return this, never raise."""

    cmd: list[str] = Field(default_factory=list)
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0
    error: str | None = None  # set when the command could not run at all

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and self.error is None

    @property
    def combined_output(self) -> str:
        """stdout and stderr together, like ``2>&1``."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)

    @property
    def first_line(self) -> str:
        lines = self.combined_output.strip().splitlines()
        return lines[0].strip() if lines else ""

    def describe_error(self) -> str:
        """Human-readable reason for a failed command."""
        if self.error:
            return self.error
        detail = self.stderr.strip() or self.stdout.strip()
        msg = f"Command failed (exit {self.returncode}): {' '.join(self.cmd)}"
        return f"{msg}\n{detail}" if detail else msg


class SystemAdapter(ABC):
    """Abstract access to the host: platform, binaries, commands.

    To create a new adapter:
        1. Subclass SystemAdapter
        2. Implement platform_system, which, is_root, run
    """

    def __init__(self) -> None:
        self._extra_path: list[str] = []

    @property
    def extra_path(self) -> list[str]:
        """Directories prepended to PATH for the rest of the run."""
        return list(self._extra_path)

    def prepend_path(self, directory: str) -> None:
        """Make binaries in ``directory`` visible to later probes and commands."""
        if directory not in self._extra_path:
            self._extra_path.insert(0, directory)

    def has(self, binary: str) -> bool:
        """Whether ``binary`` resolves on the search path."""
        return self.which(binary) is not None

    @abstractmethod
    def platform_system(self) -> str:
        """Kernel name as reported by ``platform.system()`` (Darwin, Linux, ...)."""

    @abstractmethod
    def which(self, binary: str) -> str | None:
        """Resolve ``binary`` on the search path. Must be side-effect free."""

    @abstractmethod
    def is_root(self) -> bool:
        """Whether the process already runs with root privileges."""

    @abstractmethod
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
        """Run ``cmd`` and return its result.

        Args:
            cmd: Command list.
            sudo: Prefix with ``sudo`` unless already root.
            input_text: Data piped to stdin.
            env: Extra environment variables layered over the process env.
            timeout: Seconds before giving up; None waits forever.
            interactive: Inherit the terminal instead of capturing output.
            capture_limit: Characters of captured output to keep (the tail);
                None keeps everything.

        MUST never raise. Failures are captured in the CommandResult.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} system={self.platform_system()!r}>"
