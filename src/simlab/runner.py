"""
Process spawning for every delegated tool.

run() inherits stdio and hands back the child's exit status untouched.
capture() is for short queries whose output simlab parses itself.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

from simlab.errors import ConfigError

Arg = Union[str, Path]


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _argv(argv: Sequence[Arg]) -> list[str]:
    return [str(a) for a in argv]


class ProcessRunner:
    """Blocking, one child at a time."""

    def run(
        self,
        argv: Sequence[Arg],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        quiet: bool = False,
    ) -> int:
        args = _argv(argv)
        out = subprocess.DEVNULL if quiet else None
        try:
            p = subprocess.run(
                args,
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env is not None else None,
                stdout=out,
            )
        except FileNotFoundError as e:
            raise ConfigError(f"Executable not found: '{args[0]}'") from e
        except PermissionError as e:
            raise ConfigError(f"Executable is not runnable: '{args[0]}'") from e
        return p.returncode

    def capture(
        self,
        argv: Sequence[Arg],
        *,
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        args = _argv(argv)
        try:
            r = subprocess.run(
                args,
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env is not None else None,
                capture_output=True,
                text=True,
            )
        except (FileNotFoundError, PermissionError):
            # Queries treat an unrunnable interpreter the same as a failed query.
            return CommandResult(returncode=127, stderr=f"not runnable: {args[0]}")
        return CommandResult(returncode=r.returncode, stdout=r.stdout, stderr=r.stderr)
