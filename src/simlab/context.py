"""
EnvironmentContext: the per-invocation snapshot of the process environment.

Built once at startup and passed to the resolver and dispatcher. Nothing in
simlab writes to os.environ; variables meant for a child process go into that
child's env map via child_env().
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from simlab.paths import resolve_lab_root


def _opt_path(v: Optional[str]) -> Optional[Path]:
    v = (v or "").strip()
    return Path(v) if v else None


def _read(p: Path) -> str:
    try:
        return p.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""


def detect_docker(root: Path = Path("/")) -> bool:
    if (root / ".dockerenv").exists():
        return True
    if "docker" in _read(root / "proc" / "1" / "cgroup"):
        return True
    if _read(root / "proc" / "1" / "comm").strip() == "containerd-shim":
        return True
    return "docker" in _read(root / "proc" / "mounts")


@dataclass(frozen=True)
class EnvironmentContext:
    lab_path: Path
    virtual_env: Optional[Path] = None
    conda_prefix: Optional[Path] = None
    conda_default_env: Optional[str] = None
    pythonpath: str = ""
    ld_library_path: str = ""
    search_path: str = ""
    in_docker: bool = False
    environ: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    @staticmethod
    def from_environ(
        environ: Optional[Mapping[str, str]] = None,
        start: Optional[Path] = None,
        in_docker: Optional[bool] = None,
    ) -> "EnvironmentContext":
        env = dict(os.environ if environ is None else environ)
        return EnvironmentContext(
            lab_path=resolve_lab_root(env, start),
            virtual_env=_opt_path(env.get("VIRTUAL_ENV")),
            conda_prefix=_opt_path(env.get("CONDA_PREFIX")),
            conda_default_env=(env.get("CONDA_DEFAULT_ENV") or "").strip() or None,
            pythonpath=env.get("PYTHONPATH", ""),
            ld_library_path=env.get("LD_LIBRARY_PATH", ""),
            search_path=env.get("PATH", ""),
            in_docker=detect_docker() if in_docker is None else in_docker,
            environ=MappingProxyType(env),
        )

    def which(self, name: str) -> Optional[Path]:
        found = shutil.which(name, path=self.search_path or os.defpath)
        return Path(found) if found else None

    def child_env(self, **overrides: Optional[str]) -> Dict[str, str]:
        env = dict(self.environ)
        for k, v in overrides.items():
            if v is None:
                env.pop(k, None)
            else:
                env[k] = v
        return env
