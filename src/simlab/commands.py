"""
Command-line parsing.

Only the leading flag of each command is interpreted. install/conda/venv take
one optional positional and parsing continues after it; every other command
takes the rest of argv verbatim and ends parsing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from simlab.errors import UsageError


class Command(Enum):
    HELP = ("-h", "--help")
    INSTALL = ("-i", "--install")
    FORMAT = ("-f", "--format")
    PYTHON = ("-p", "--python")
    SIM = ("-s", "--sim")
    TEST = ("-t", "--test")
    DOCKER = ("-o", "--docker")
    VSCODE = ("-v", "--vscode")
    DOCS = ("-d", "--docs")
    NEW = ("-n", "--new")
    CONDA = ("-c", "--conda")
    VENV = ("-e", "--venv")
    UNKNOWN = ()

    @property
    def flags(self) -> Tuple[str, ...]:
        return self.value

    @property
    def terminal(self) -> bool:
        return self not in _CHAINABLE

    @classmethod
    def from_flag(cls, flag: str) -> "Command":
        for cmd in cls:
            if flag in cmd.flags:
                return cmd
        return cls.UNKNOWN


_CHAINABLE = frozenset({Command.INSTALL, Command.CONDA, Command.VENV})


@dataclass(frozen=True)
class Invocation:
    command: Command
    args: Tuple[str, ...] = ()

    @property
    def arg(self) -> Optional[str]:
        return self.args[0] if self.args else None


def parse_args(argv: Sequence[str]) -> List[Invocation]:
    args = list(argv)
    if not args:
        raise UsageError("No arguments provided.")

    out: List[Invocation] = []
    i = 0
    while i < len(args):
        flag = args[i]
        cmd = Command.from_flag(flag)
        if cmd is Command.UNKNOWN:
            raise UsageError(f"Invalid argument provided: {flag}", flag=flag)
        if cmd is Command.HELP:
            raise UsageError(flag=flag)

        if cmd.terminal:
            out.append(Invocation(cmd, tuple(args[i + 1 :])))
            break

        nxt = args[i + 1] if i + 1 < len(args) else None
        if nxt is not None and not nxt.startswith("-"):
            out.append(Invocation(cmd, (nxt,)))
            i += 2
        else:
            out.append(Invocation(cmd))
            i += 1
    return out
