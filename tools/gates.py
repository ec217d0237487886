"""
Local / CI gate for the simlab checkout.

  python tools/gates.py --mode local   # formats in place
  python tools/gates.py --mode ci      # verifies formatting only

Steps stop at the first failure: compileall, black, ruff, launcher smoke, pytest.
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

TARGETS = ["src", "tools", "tests"]


def _run(argv: List[str], *, cwd: Path, env: Optional[Dict[str, str]] = None) -> None:
    p = subprocess.run(argv, cwd=str(cwd), env=env)
    if p.returncode != 0:
        raise SystemExit(f"FAILURE DETECTED: gate failed: {' '.join(argv)} (exit={p.returncode}).")


def _smoke_launcher(py: str, root: Path) -> None:
    """Drive the checkout launcher through parse, resolve and spawn with a throwaway venv layout."""
    with tempfile.TemporaryDirectory(prefix="simlab-gate-") as tmp:
        venv = Path(tmp) / "venv"
        (venv / "bin").mkdir(parents=True)
        (venv / "bin" / "python").symlink_to(py)

        env = dict(os.environ)
        env.pop("CONDA_PREFIX", None)
        env.update(SIMLAB_PATH=tmp, VIRTUAL_ENV=str(venv))
        launcher = str(root / "tools" / "run_simlab.py")

        _run([py, launcher, "-p", "-c", "import sys; sys.exit(0)"], cwd=Path(tmp), env=env)

        r = subprocess.run([py, launcher, "--bogus"], cwd=tmp, env=env, capture_output=True, text=True)
        if r.returncode != 1 or "usage:" not in r.stdout:
            raise SystemExit(f"FAILURE DETECTED: launcher did not reject an unknown flag (exit={r.returncode}).")


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--mode", choices=["local", "ci"], required=True)
    args = ap.parse_args()

    root = Path(__file__).resolve().parents[1]
    py = sys.executable

    _run([py, "-m", "compileall", "-q", *TARGETS], cwd=root)

    # Auto-format locally; CI only verifies.
    black = [py, "-m", "black"] if args.mode == "local" else [py, "-m", "black", "--check"]
    _run([*black, *TARGETS], cwd=root)
    _run([py, "-m", "ruff", "check", *TARGETS], cwd=root)

    _smoke_launcher(py, root)

    _run([py, "-m", "pytest", "-q", "tests"], cwd=root)
    print("[INFO] All gates passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
