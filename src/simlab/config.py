"""
Launcher config (<root>/.simlab.json).

Every key is optional; a missing file means all defaults. Unknown keys are
rejected so a typo does not silently fall back to a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from simlab.errors import ConfigError

CONFIG_FILENAME = ".simlab.json"


class LabConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    marker_package: str = Field(
        "isaacsim-rl", description="Pip distribution whose presence means the simulator was pip-installed."
    )
    sim_module: str = Field("isaacsim", description="Module imported to query the pip-installed simulator path.")
    sim_path_env: str = Field("ISAAC_PATH", description="Env key the simulator module sets to its install root.")
    sim_dir_name: str = Field("_isaac_sim", description="Bundled simulator directory (or symlink) under the root.")
    sim_launcher: str = "isaac-sim.sh"
    sim_python: str = "python.sh"
    sim_setup_script: str = "setup_conda_env.sh"
    sim_entry_point: Tuple[str, ...] = ("isaacsim", "isaacsim.exp.full")
    sim_unset_vars: Tuple[str, ...] = ("CARB_APP_PATH", "EXP_PATH", "ISAAC_PATH")

    extensions_dir: str = "source"
    extras_packages: Tuple[str, ...] = ("simlab_rl", "simlab_mimic")
    default_extras: str = "all"

    default_conda_name: str = "env_simlab"
    default_venv_name: str = "venv_simlab"
    alias: str = "simlab"
    display_name: str = Field("IsaacSim", description="Exported as RESOURCE_NAME by the activation scripts.")

    def extras_paths(self, root: Path) -> List[Path]:
        return [root / self.extensions_dir / name for name in self.extras_packages]


def config_path(root: Path) -> Path:
    return root / CONFIG_FILENAME


def load_config(root: Path) -> LabConfig:
    p = config_path(root)
    if not p.exists():
        return LabConfig()
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read launcher config '{p}': {e}") from e
    try:
        return LabConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid launcher config '{p}':\n{e}") from e
