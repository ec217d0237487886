"""
Marker package detection.

The marker package is a pip distribution whose presence means the simulator
was installed through pip instead of as a bundled directory. Detection asks the
target interpreter for the distribution version via importlib.metadata, so the
answer comes from the packaging metadata and not from matching `pip list` text.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from simlab.config import LabConfig
from simlab.runner import ProcessRunner

_VERSION_SNIPPET = "import importlib.metadata as m, sys; print(m.version(sys.argv[1]))"
_PATH_SNIPPET = "import importlib, os, sys; importlib.import_module(sys.argv[1]); print(os.environ[sys.argv[2]])"


class MarkerQuery:
    def __init__(self, runner: ProcessRunner, config: LabConfig) -> None:
        self.runner = runner
        self.config = config
        self._installed: Dict[str, bool] = {}

    def version(self, python: Path) -> Optional[str]:
        r = self.runner.capture([python, "-c", _VERSION_SNIPPET, self.config.marker_package])
        if not r.ok:
            return None
        return r.stdout.strip() or None

    def is_installed(self, python: Path) -> bool:
        key = str(python)
        if key not in self._installed:
            self._installed[key] = self.version(python) is not None
        return self._installed[key]

    def install_path(self, python: Path) -> Optional[Path]:
        """Install root recorded by the pip-installed simulator module, if importable."""
        r = self.runner.capture([python, "-c", _PATH_SNIPPET, self.config.sim_module, self.config.sim_path_env])
        if not r.ok:
            return None
        lines = [ln for ln in r.stdout.splitlines() if ln.strip()]
        if not lines:
            return None
        # The simulator module may print banners on import; the path is the last line.
        return Path(lines[-1].strip())
