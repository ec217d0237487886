"""
Interpreter + simulator resolution.

Interpreter order (first match wins):
  1) <VIRTUAL_ENV>/bin/python
  2) <CONDA_PREFIX>/bin/python
  3) bundled <root>/_isaac_sim/python.sh
  4) `python` on PATH, only if the marker package is installed in it

Simulator order:
  1) bundled <root>/_isaac_sim (dir or symlink), else the install root the
     pip-installed simulator records for itself
  2) <sim dir>/isaac-sim.sh, else the package entry point when the marker
     package is installed

Resolution is a pure function of the context, the filesystem and the marker
query: nothing is cached between calls except the query's own answers.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from simlab.config import LabConfig
from simlab.context import EnvironmentContext
from simlab.errors import ResolutionError
from simlab.markers import MarkerQuery
from simlab.paths import LabPaths


class Resolver:
    def __init__(
        self,
        context: EnvironmentContext,
        paths: LabPaths,
        config: LabConfig,
        markers: MarkerQuery,
    ) -> None:
        self.context = context
        self.paths = paths
        self.config = config
        self.markers = markers

    def _interpreter_candidate(self) -> Path:
        ctx = self.context
        if ctx.virtual_env is not None:
            return ctx.virtual_env / "bin" / "python"
        if ctx.conda_prefix is not None:
            return ctx.conda_prefix / "bin" / "python"

        bundled = self.paths.sim_python
        if bundled.is_file():
            return bundled
        # Inside docker the simulator is often pip-installed into the system python.
        system = ctx.which("python")
        if system is not None and self.markers.is_installed(system):
            return system
        return bundled

    def resolve_interpreter(self) -> Path:
        exe = self._interpreter_candidate()
        if not exe.is_file():
            raise ResolutionError(
                f"Unable to find any Python executable at path: '{exe}'",
                [
                    "Virtual environment (venv) or Conda environment is not activated.",
                    f"Simulator pip package '{self.config.marker_package}' is not installed.",
                    f"Python executable is not available at the default path: {self.paths.sim_python}",
                ],
            )
        return exe

    def resolve_sim_path(self) -> Path:
        sim_path: Optional[Path] = self.paths.sim_dir
        if not sim_path.is_dir():
            try:
                python: Optional[Path] = self.resolve_interpreter()
            except ResolutionError:
                python = None
            if python is not None and self.markers.is_installed(python):
                sim_path = self.markers.install_path(python)
            else:
                sim_path = None

        if sim_path is None or not sim_path.is_dir():
            raise ResolutionError(
                f"Unable to find the simulator directory: '{sim_path or self.paths.sim_dir}'",
                [
                    "Conda environment is not activated.",
                    f"Simulator pip package '{self.config.marker_package}' is not installed.",
                    f"Simulator directory is not available at the default path: {self.paths.sim_dir}",
                ],
            )
        return sim_path

    def resolve_simulator(self) -> List[str]:
        """Command head used to launch the simulator (a path, or the entry point argv)."""
        failure: Optional[ResolutionError] = None
        try:
            launcher = self.resolve_sim_path() / self.config.sim_launcher
            if launcher.is_file():
                return [str(launcher)]
        except ResolutionError as e:
            failure = e
            launcher = self.paths.sim_dir / self.config.sim_launcher

        # A pip-installed simulator only exists inside a direct python environment.
        try:
            python = self.resolve_interpreter()
        except ResolutionError:
            python = None
        if python is not None and self.markers.is_installed(python):
            return list(self.config.sim_entry_point)

        if failure is not None:
            raise failure
        raise ResolutionError(
            f"No simulator executable found at path: {launcher}",
            [
                "Virtual environment (venv) or Conda environment is not activated.",
                f"Simulator pip package '{self.config.marker_package}' is not installed.",
                f"Simulator launcher is not available at the default path: {launcher}",
            ],
        )
