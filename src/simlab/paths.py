"""
Lab root + path utilities.

Root resolution priority:
1) SIMLAB_PATH env var (when it points at an existing directory)
2) Walk upwards from the start path to find a marker file
3) Fallback: two levels above this package (src-layout checkout)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from simlab.config import CONFIG_FILENAME, LabConfig

LAB_ROOT_ENV = "SIMLAB_PATH"
ROOT_MARKERS = (CONFIG_FILENAME, "environment.yml")


def resolve_lab_root(environ: Optional[Mapping[str, str]] = None, start: Optional[Path] = None) -> Path:
    env = (environ if environ is not None else os.environ).get(LAB_ROOT_ENV, "").strip()
    if env:
        p = Path(env).expanduser().resolve()
        if p.is_dir():
            return p

    base = (start or Path(__file__)).resolve()
    candidates = [base] + list(base.parents)

    for folder in candidates:
        if folder.is_dir() and any((folder / m).exists() for m in ROOT_MARKERS):
            return folder

    # <repo>/src/simlab/paths.py -> parents[2] == <repo>
    return Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class LabPaths:
    root: Path
    config: LabConfig

    @property
    def source_dir(self) -> Path:
        return self.root / self.config.extensions_dir

    @property
    def sim_dir(self) -> Path:
        return self.root / self.config.sim_dir_name

    @property
    def sim_python(self) -> Path:
        return self.sim_dir / self.config.sim_python

    @property
    def sim_setup_script(self) -> Path:
        return self.sim_dir / self.config.sim_setup_script

    @property
    def tools_dir(self) -> Path:
        return self.root / "tools"

    @property
    def template_dir(self) -> Path:
        return self.tools_dir / "template"

    @property
    def template_requirements(self) -> Path:
        return self.template_dir / "requirements.txt"

    @property
    def template_cli(self) -> Path:
        return self.template_dir / "cli.py"

    @property
    def docs_dir(self) -> Path:
        return self.root / "docs"

    @property
    def docs_requirements(self) -> Path:
        return self.docs_dir / "requirements.txt"

    @property
    def docs_build_dir(self) -> Path:
        return self.docs_dir / "_build" / "current"

    @property
    def docker_script(self) -> Path:
        return self.root / "docker" / "container.sh"

    @property
    def vscode_script(self) -> Path:
        return self.root / ".vscode" / "tools" / "setup_vscode.py"

    @property
    def environment_yml(self) -> Path:
        return self.root / "environment.yml"

    @property
    def pyproject(self) -> Path:
        return self.root / "pyproject.toml"

    @property
    def requirements(self) -> Path:
        return self.root / "requirements.txt"

    @property
    def launcher_script(self) -> Path:
        return self.tools_dir / "run_simlab.py"


def write_text_atomic(path: Path, content: str, executable: bool = False) -> None:
    path = path.resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(content, encoding="utf-8", newline="\n")
    if executable:
        tmp.chmod(0o755)
    tmp.replace(path)
