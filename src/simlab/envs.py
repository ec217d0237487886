"""
Conda / venv environment creation and the activation scripts written into them.

The scripts are the only place simlab "exports" anything: SIMLAB_PATH, the
`simlab` alias and RESOURCE_NAME are set when the user sources them, never in
the process that created them.
"""

from __future__ import annotations

import json
import shlex
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from simlab.config import LabConfig
from simlab.console import info
from simlab.context import EnvironmentContext
from simlab.errors import ConfigError
from simlab.installer import Installer
from simlab.paths import LAB_ROOT_ENV, LabPaths, write_text_atomic
from simlab.runner import ProcessRunner

SHEBANG = "#!/usr/bin/env bash"


def _q(v: Any) -> str:
    return shlex.quote(str(v))


def alias_line(paths: LabPaths, config: LabConfig) -> str:
    target = f"python {shlex.quote(str(paths.launcher_script))}"
    return f"alias {config.alias}={shlex.quote(target)}"


def _sim_exports(paths: LabPaths, config: LabConfig) -> List[str]:
    return [
        "# Set simlab environment variables",
        f"export {LAB_ROOT_ENV}={_q(paths.root)}",
        alias_line(paths, config),
        "",
        "# show icon if not running headless",
        f"export RESOURCE_NAME={_q(config.display_name)}",
        "",
    ]


def _sim_setup_source(paths: LabPaths) -> List[str]:
    # Only a bundled simulator ships the setup script that loads its binaries.
    if not paths.sim_setup_script.is_file():
        return []
    return ["# for the simulator", f"source {_q(paths.sim_setup_script)}", ""]


def render_venv_activate(venv_path: Path, paths: LabPaths, config: LabConfig) -> str:
    lines = [
        SHEBANG,
        "",
        "# Activate simlab virtual environment",
        f"source {_q(venv_path / 'bin' / 'activate')}",
        "",
        *_sim_exports(paths, config),
        *_sim_setup_source(paths),
    ]
    return "\n".join(lines) + "\n"


def render_conda_activate(paths: LabPaths, config: LabConfig) -> str:
    lines = [SHEBANG, "", *_sim_exports(paths, config), *_sim_setup_source(paths)]
    return "\n".join(lines) + "\n"


def render_conda_deactivate(context: EnvironmentContext, paths: LabPaths, config: LabConfig) -> str:
    lines = [
        SHEBANG,
        "",
        "# for simlab",
        f"unalias {config.alias} &>/dev/null",
        f"unset {LAB_ROOT_ENV}",
        "",
        "# restore paths",
        f"export PYTHONPATH={_q(context.pythonpath)}",
        f"export LD_LIBRARY_PATH={_q(context.ld_library_path)}",
        "",
        "# for the simulator",
        "unset RESOURCE_NAME",
    ]
    if paths.sim_setup_script.is_file():
        lines.extend(f"unset {v}" for v in config.sim_unset_vars)
    lines.append("")
    return "\n".join(lines) + "\n"


def load_environment_yml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Conda environment file not found: {path}")
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Conda environment file is not valid YAML: {path}\n{e}") from e
    if not isinstance(obj, dict):
        raise ConfigError(f"Conda environment file is not a mapping: {path}")
    return obj


def conda_env_prefix(runner: ProcessRunner, conda: Path, name: str) -> Optional[Path]:
    r = runner.capture([conda, "info", "--json"])
    if not r.ok:
        raise ConfigError(f"'conda info' failed (exit={r.returncode}): {r.stderr.strip()}")
    try:
        data = json.loads(r.stdout)
        envs = data.get("envs", [])
    except (ValueError, AttributeError) as e:
        raise ConfigError("'conda info --json' returned unexpected output.") from e
    # The root environment is listed by its install prefix, not by its name.
    if name == "base" and data.get("root_prefix"):
        return Path(data["root_prefix"])
    for p in envs:
        if Path(p).name == name:
            return Path(p)
    return None


def create_conda_env(
    name: str,
    *,
    context: EnvironmentContext,
    paths: LabPaths,
    config: LabConfig,
    runner: ProcessRunner,
) -> int:
    conda = context.which("conda")
    if conda is None:
        raise ConfigError("Conda could not be found. Please install conda and try again.")

    prefix = conda_env_prefix(runner, conda, name)
    if prefix is not None:
        info(f"Conda environment named '{name}' already exists.")
    else:
        load_environment_yml(paths.environment_yml)
        info(f"Creating conda environment named '{name}'...")
        info(f"Installing dependencies from {paths.environment_yml}")
        rc = runner.run([conda, "env", "create", "-y", "--file", paths.environment_yml, "-n", name])
        if rc != 0:
            return rc
        prefix = conda_env_prefix(runner, conda, name)
        if prefix is None:
            raise ConfigError(f"Conda environment '{name}' was created but could not be located.")

    hooks = prefix / "etc" / "conda"
    write_text_atomic(hooks / "activate.d" / "setenv.sh", render_conda_activate(paths, config))
    write_text_atomic(hooks / "deactivate.d" / "unsetenv.sh", render_conda_deactivate(context, paths, config))

    info(f"Added '{config.alias}' alias to conda environment for the simlab launcher.")
    info(f"Created conda environment named '{name}'.\n")
    print(f"\t\t1. To activate the environment, run:                conda activate {name}")
    print(f"\t\t2. To install simlab extensions, run:               {config.alias} -i")
    print(f"\t\t3. To perform formatting, run:                      {config.alias} -f")
    print("\t\t4. To deactivate the environment, run:              conda deactivate")
    print("\n")
    return 0


def _install_project(python: Path, paths: LabPaths, installer: Installer) -> int:
    if paths.pyproject.is_file():
        info("Installing dependencies from pyproject.toml...")
        return installer.install(python, ["-e", paths.root])
    if paths.requirements.is_file():
        info("Installing dependencies from requirements.txt...")
        return installer.install(python, ["-r", paths.requirements])
    return 0


def create_venv(
    name: str,
    *,
    context: EnvironmentContext,
    paths: LabPaths,
    config: LabConfig,
    runner: ProcessRunner,
    installer: Installer,
) -> int:
    venv_path = paths.root / name
    python = venv_path / "bin" / "python"
    uv = context.which("uv")

    if uv is not None:
        info("Using uv to create virtual environment...")
        create = [uv, "venv", venv_path]
    else:
        info("Using python venv to create virtual environment...")
        base = context.which("python") or context.which("python3")
        if base is None:
            raise ConfigError("Python could not be found. Please install python and try again.")
        create = [base, "-m", "venv", venv_path]

    if venv_path.is_dir():
        info(f"Virtual environment '{name}' already exists at {venv_path}.")
    else:
        info(f"Creating virtual environment '{name}'...")
        rc = runner.run(create)
        if rc != 0:
            return rc

    if uv is None:
        rc = installer.install(python, ["--upgrade", "pip"])
        if rc != 0:
            return rc

    rc = _install_project(python, paths, installer)
    if rc != 0:
        return rc

    activate_script = venv_path / "bin" / f"activate_{config.alias}"
    write_text_atomic(activate_script, render_venv_activate(venv_path, paths, config), executable=True)

    info(f"Created virtual environment '{name}' at {venv_path}.\n")
    print(f"\t\t1. To activate the environment, run:                source {activate_script}")
    print(f"\t\t   Or manually:                                     source {venv_path}/bin/activate")
    print(f"\t\t2. To install simlab extensions, run:               {config.alias} -i")
    print(f"\t\t3. To perform formatting, run:                      {config.alias} -f")
    print("\t\t4. To deactivate the environment, run:              deactivate")
    print("\n")
    return 0
