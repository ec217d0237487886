from __future__ import annotations

# Repo-under-test determinism:
# - Ensure this checkout's src/ wins over any globally installed/editable simlab.
# - Purge already-imported simlab modules that were loaded from elsewhere.

import stat
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

_REPO = Path(__file__).resolve().parents[1]
_SRC = (_REPO / "src").resolve()


def _is_under(child: Path, parent: Path) -> bool:
    try:
        child = child.resolve()
        parent = parent.resolve()
        return parent == child or parent in child.parents
    except OSError:
        return False


def _force_src_precedence() -> None:
    if str(_SRC) in sys.path:
        sys.path.remove(str(_SRC))
    sys.path.insert(0, str(_SRC))

    for name in list(sys.modules.keys()):
        if not (name == "simlab" or name.startswith("simlab.")):
            continue
        f = getattr(sys.modules.get(name), "__file__", None)
        if f and not _is_under(Path(f), _REPO):
            del sys.modules[name]


_force_src_precedence()


def pytest_configure(config):
    _force_src_precedence()


from simlab.runner import CommandResult  # noqa: E402


@dataclass
class Call:
    argv: List[str]
    cwd: Optional[Path] = None
    env: Optional[Dict[str, str]] = None
    quiet: bool = False


@dataclass
class FakeRunner:
    """Records every spawn; run() answers from `returncodes` (by argv[0] basename), default 0."""

    returncodes: Dict[str, int] = field(default_factory=dict)
    on_capture: Optional[Callable[[List[str]], CommandResult]] = None
    calls: List[Call] = field(default_factory=list)
    captures: List[List[str]] = field(default_factory=list)

    def run(self, argv, *, cwd=None, env=None, quiet=False) -> int:
        args = [str(a) for a in argv]
        self.calls.append(Call(args, cwd, dict(env) if env is not None else None, quiet))
        return self.returncodes.get(Path(args[0]).name, 0)

    def capture(self, argv, *, cwd=None, env=None) -> CommandResult:
        args = [str(a) for a in argv]
        self.captures.append(args)
        if self.on_capture is None:
            return CommandResult(returncode=1)
        return self.on_capture(args)

    @property
    def argvs(self) -> List[List[str]]:
        return [c.argv for c in self.calls]


def make_executable(path: Path, body: str = "#!/bin/sh\nexit 0\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def lab_root(tmp_path: Path) -> Path:
    root = tmp_path / "lab"
    root.mkdir()
    return root


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    d = tmp_path / "bin"
    d.mkdir()
    return d


@pytest.fixture
def environ(lab_root: Path, bin_dir: Path) -> Dict[str, str]:
    """A minimal environment: no venv/conda markers, PATH limited to an empty bin dir."""
    return {"SIMLAB_PATH": str(lab_root), "PATH": str(bin_dir)}


@pytest.fixture
def make_exe() -> Callable[..., Path]:
    return make_executable


@dataclass
class FakeMarkers:
    """Stands in for MarkerQuery: answers from sets keyed by interpreter path."""

    installed: set = field(default_factory=set)
    install_paths: Dict[str, Path] = field(default_factory=dict)

    def is_installed(self, python: Path) -> bool:
        return str(python) in self.installed

    def install_path(self, python: Path) -> Optional[Path]:
        return self.install_paths.get(str(python))


@pytest.fixture
def fake_markers() -> FakeMarkers:
    return FakeMarkers()


@pytest.fixture
def make_resolver(fake_markers: FakeMarkers):
    from simlab.config import LabConfig
    from simlab.context import EnvironmentContext
    from simlab.paths import LabPaths
    from simlab.resolver import Resolver

    def _make(env: Dict[str, str]) -> Resolver:
        ctx = EnvironmentContext.from_environ(env, in_docker=False)
        config = LabConfig()
        return Resolver(ctx, LabPaths(root=ctx.lab_path, config=config), config, fake_markers)

    return _make
