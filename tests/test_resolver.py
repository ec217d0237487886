from __future__ import annotations

from pathlib import Path

import pytest

from simlab.errors import ResolutionError


def _venv(root: Path, make_exe) -> Path:
    make_exe(root / "bin" / "python")
    return root


def test_venv_marker_wins_over_conda(tmp_path: Path, environ, make_resolver, make_exe) -> None:
    venv = _venv(tmp_path / "venv", make_exe)
    conda = _venv(tmp_path / "conda", make_exe)
    environ.update(VIRTUAL_ENV=str(venv), CONDA_PREFIX=str(conda))

    assert make_resolver(environ).resolve_interpreter() == venv / "bin" / "python"


def test_conda_prefix_used_without_venv(tmp_path: Path, environ, make_resolver, make_exe) -> None:
    conda = _venv(tmp_path / "conda", make_exe)
    environ["CONDA_PREFIX"] = str(conda)

    assert make_resolver(environ).resolve_interpreter() == conda / "bin" / "python"


def test_empty_markers_count_as_unset(lab_root: Path, environ, make_resolver, make_exe) -> None:
    bundled = make_exe(lab_root / "_isaac_sim" / "python.sh")
    environ.update(VIRTUAL_ENV="", CONDA_PREFIX="  ")

    assert make_resolver(environ).resolve_interpreter() == bundled


def test_bundled_python_used_without_markers(lab_root: Path, environ, make_resolver, make_exe) -> None:
    bundled = make_exe(lab_root / "_isaac_sim" / "python.sh")

    assert make_resolver(environ).resolve_interpreter() == bundled


def test_system_python_needs_marker_package(bin_dir: Path, environ, make_resolver, make_exe, fake_markers) -> None:
    system = make_exe(bin_dir / "python")

    with pytest.raises(ResolutionError):
        make_resolver(environ).resolve_interpreter()

    fake_markers.installed.add(str(system))
    assert make_resolver(environ).resolve_interpreter() == system


def test_no_interpreter_reports_three_causes(lab_root: Path, environ, make_resolver) -> None:
    with pytest.raises(ResolutionError) as ei:
        make_resolver(environ).resolve_interpreter()

    err = ei.value
    assert err.exit_code == 1
    assert len(err.causes) == 3
    text = str(err)
    assert text.startswith("[ERROR] Unable to find any Python executable at path:")
    assert "This could be due to the following reasons:" in text
    assert "\t1. Virtual environment (venv) or Conda environment is not activated." in text
    assert "\t2. Simulator pip package 'isaacsim-rl' is not installed." in text
    bundled = lab_root / "_isaac_sim" / "python.sh"
    assert f"\t3. Python executable is not available at the default path: {bundled}" in text


def test_venv_marker_without_python_fails(tmp_path: Path, environ, make_resolver) -> None:
    environ["VIRTUAL_ENV"] = str(tmp_path / "missing-venv")

    with pytest.raises(ResolutionError) as ei:
        make_resolver(environ).resolve_interpreter()
    assert str(tmp_path / "missing-venv" / "bin" / "python") in ei.value.summary


def test_resolution_is_repeatable(tmp_path: Path, environ, make_resolver, make_exe) -> None:
    environ["VIRTUAL_ENV"] = str(_venv(tmp_path / "venv", make_exe))
    r = make_resolver(environ)

    assert r.resolve_interpreter() == r.resolve_interpreter()


def test_simulator_prefers_bundled_launcher(lab_root: Path, environ, make_resolver, make_exe) -> None:
    launcher = make_exe(lab_root / "_isaac_sim" / "isaac-sim.sh")

    assert make_resolver(environ).resolve_simulator() == [str(launcher)]


def test_simulator_found_through_pip_install_path(
    tmp_path: Path, environ, make_resolver, make_exe, fake_markers
) -> None:
    venv = _venv(tmp_path / "venv", make_exe)
    python = venv / "bin" / "python"
    launcher = make_exe(tmp_path / "site" / "isaacsim" / "isaac-sim.sh")
    fake_markers.installed.add(str(python))
    fake_markers.install_paths[str(python)] = launcher.parent
    environ["VIRTUAL_ENV"] = str(venv)

    r = make_resolver(environ)
    assert r.resolve_sim_path() == launcher.parent
    assert r.resolve_simulator() == [str(launcher)]


def test_simulator_falls_back_to_entry_point(tmp_path: Path, environ, make_resolver, make_exe, fake_markers) -> None:
    venv = _venv(tmp_path / "venv", make_exe)
    python = venv / "bin" / "python"
    fake_markers.installed.add(str(python))
    environ["VIRTUAL_ENV"] = str(venv)

    assert make_resolver(environ).resolve_simulator() == ["isaacsim", "isaacsim.exp.full"]


def test_simulator_missing_everywhere(tmp_path: Path, environ, make_resolver, make_exe) -> None:
    environ["VIRTUAL_ENV"] = str(_venv(tmp_path / "venv", make_exe))

    with pytest.raises(ResolutionError) as ei:
        make_resolver(environ).resolve_simulator()
    assert "Unable to find the simulator directory" in ei.value.summary
    assert len(ei.value.causes) == 3


def test_bundled_dir_without_launcher_and_no_marker(lab_root: Path, environ, make_resolver, make_exe) -> None:
    make_exe(lab_root / "_isaac_sim" / "python.sh")

    with pytest.raises(ResolutionError) as ei:
        make_resolver(environ).resolve_simulator()
    assert "No simulator executable found at path" in ei.value.summary


def test_sim_path_without_interpreter_reports_directory(lab_root: Path, environ, make_resolver) -> None:
    with pytest.raises(ResolutionError) as ei:
        make_resolver(environ).resolve_sim_path()

    assert ei.value.summary == f"Unable to find the simulator directory: '{lab_root / '_isaac_sim'}'"
    assert ei.value.causes[0] == "Conda environment is not activated."


def test_simulator_without_interpreter_reports_directory(environ, make_resolver) -> None:
    with pytest.raises(ResolutionError) as ei:
        make_resolver(environ).resolve_simulator()

    assert "Unable to find the simulator directory" in ei.value.summary
    assert "Python executable" not in str(ei.value)
