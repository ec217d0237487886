"""
simlab: environment bootstrap and task dispatch for the simlab robotics stack.

Entry points:
  simlab <flag> [args]        (console script)
  python -m simlab <flag> [args]
  python tools/run_simlab.py <flag> [args]
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
