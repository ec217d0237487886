"""
Error taxonomy for the simlab launcher.

Every error raised by simlab itself derives from SimlabError and is turned into
an exit status in one place (simlab.cli.main). Failures of delegated tools are
not errors here: their exit status is passed through unchanged.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple


class SimlabError(RuntimeError):
    """Base class for failures detected by simlab itself."""

    exit_code = 1

    def detail(self) -> str:
        return str(self.args[0]) if self.args else type(self).__name__

    def render(self) -> str:
        return f"[ERROR] {self.detail()}"


class UsageError(SimlabError):
    """No arguments, an unknown flag, or an explicit request for help."""

    def __init__(self, message: str = "", flag: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.flag = flag


class ConfigError(SimlabError):
    """A required tool, file or setting is missing or malformed."""


class ResolutionError(ConfigError):
    """
    Interpreter or simulator lookup failed.

    Carries the probable causes so the rendered message lists them in order.
    """

    def __init__(self, summary: str, causes: Sequence[str] = ()) -> None:
        self.summary = summary
        self.causes: Tuple[str, ...] = tuple(causes)
        super().__init__(self.render())

    def detail(self) -> str:
        lines = [self.summary]
        if self.causes:
            lines.append("\tThis could be due to the following reasons:")
            for i, cause in enumerate(self.causes, start=1):
                lines.append(f"\t{i}. {cause}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()
