"""
Checkout launcher: `python tools/run_simlab.py <flag> [args]`.

Works without `pip install -e .`: puts this checkout's src/ first on sys.path
so the repo-under-use wins over any other installed copy of simlab. The
`simlab` alias written into activation scripts points here.
"""

from __future__ import annotations

import sys
from pathlib import Path


def _ins_first(p: Path) -> None:
    s = str(p)
    if not p.exists():
        return
    # An editable install may already list src/ (via .pth) behind other entries.
    while s in sys.path:
        sys.path.remove(s)
    sys.path.insert(0, s)


def _find_repo_root(start: Path) -> Path:
    cur = start.resolve()
    for _ in range(12):
        if (cur / "src" / "simlab").is_dir():
            return cur
        parent = cur.parent
        if parent == cur:
            break
        cur = parent
    # Fallback: assume typical layout (repo/tools/run_simlab.py)
    return start.resolve().parents[1]


def main() -> int:
    _ins_first(_find_repo_root(Path(__file__)) / "src")
    from simlab.cli import main as _main

    return _main()


if __name__ == "__main__":
    raise SystemExit(main())
