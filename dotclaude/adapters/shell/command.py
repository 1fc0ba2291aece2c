"""
Shell system adapter — the real host.

The SINGLE PLACE where ``subprocess.run`` and ``shutil.which`` are
called. Logging, sudo prefixing, PATH extension and error capture
are centralised here.
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess
import time

from dotclaude.adapters.base import (
    OUTPUT_LIMIT,
    PROBE_TIMEOUT,
    CommandResult,
    SystemAdapter,
    trim_output,
)

logger = logging.getLogger(__name__)


class ShellSystemAdapter(SystemAdapter):
    """Run commands on the local machine."""

    def platform_system(self) -> str:
        return platform.system()

    def which(self, binary: str) -> str | None:
        return shutil.which(binary, path=self._search_path())

    def is_root(self) -> bool:
        return hasattr(os, "geteuid") and os.geteuid() == 0

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
        if sudo and not self.is_root():
            cmd = ["sudo"] + cmd

        run_env = os.environ.copy()
        run_env["PATH"] = self._search_path()
        if env:
            run_env.update(env)

        logger.debug("Executing: %s", " ".join(cmd))
        start = time.monotonic()
        try:
            if interactive:
                proc = subprocess.run(cmd, env=run_env, timeout=timeout)
                stdout = stderr = ""
            else:
                proc = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    input=input_text,
                    env=run_env,
                    timeout=timeout,
                )
                stdout = trim_output(proc.stdout or "", capture_limit)
                stderr = trim_output(proc.stderr or "", capture_limit)
        except subprocess.TimeoutExpired:
            return CommandResult(cmd=cmd, returncode=-1, error=f"Command timed out ({timeout}s)")
        except FileNotFoundError:
            return CommandResult(cmd=cmd, returncode=127, error=f"Command not found: {cmd[0]}")
        except OSError as e:
            logger.exception("Subprocess error: %s", cmd)
            return CommandResult(cmd=cmd, returncode=-1, error=str(e))

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if proc.returncode != 0:
            logger.debug("Command exited %d: %s", proc.returncode, " ".join(cmd))
        return CommandResult(
            cmd=cmd,
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            elapsed_ms=elapsed_ms,
        )

    def _search_path(self) -> str:
        parts = self._extra_path + [os.environ.get("PATH", os.defpath)]
        return os.pathsep.join(p for p in parts if p)
