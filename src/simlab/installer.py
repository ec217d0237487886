from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Union

from simlab.context import EnvironmentContext
from simlab.runner import ProcessRunner

INSTALLABLE_MARKERS = ("setup.py", "pyproject.toml")


def extension_dirs(source_dir: Path) -> List[Path]:
    """First-level subdirectories (symlinks followed) that declare themselves installable."""
    if not source_dir.is_dir():
        return []
    out: List[Path] = []
    for p in sorted(source_dir.iterdir(), key=lambda x: x.name):
        if p.is_dir() and any((p / m).is_file() for m in INSTALLABLE_MARKERS):
            out.append(p)
    return out


def extras_target(path: Path, group: str) -> str:
    if group == "none":
        return str(path)
    return f"{path}[{group}]"


class Installer:
    """pip front-end: `uv pip` when uv is on PATH, else `<python> -m pip`."""

    def __init__(self, context: EnvironmentContext, runner: ProcessRunner) -> None:
        self.context = context
        self.runner = runner

    def command(self, python: Path) -> List[str]:
        uv = self.context.which("uv")
        if uv is not None:
            return [str(uv), "pip", "install", "--python", str(python)]
        return [str(python), "-m", "pip", "install"]

    def install(self, python: Path, args: Sequence[Union[str, Path]], quiet: bool = False) -> int:
        return self.runner.run([*self.command(python), *args], quiet=quiet)

    def install_editable(self, python: Path, target: Union[str, Path]) -> int:
        return self.install(python, ["--editable", str(target)])
