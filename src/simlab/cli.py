from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Mapping, Optional

from simlab.commands import parse_args
from simlab.config import load_config
from simlab.console import error
from simlab.context import EnvironmentContext
from simlab.dispatch import Dispatcher
from simlab.errors import SimlabError, UsageError
from simlab.installer import Installer
from simlab.markers import MarkerQuery
from simlab.paths import LabPaths
from simlab.resolver import Resolver
from simlab.runner import ProcessRunner

_OPTIONS = (
    ("-h, --help", "Display the help content."),
    (
        "-i, --install [LIB]",
        "Install the extensions inside simlab and learning frameworks as extra dependencies. Default is 'all'.",
    ),
    ("-f, --format", "Run pre-commit to format the code and check lints."),
    ("-p, --python", "Run the python executable provided by the simulator or virtual environment (if active)."),
    ("-s, --sim", "Run the simulator executable (isaac-sim.sh) provided by the simulator."),
    ("-t, --test", "Run all python pytest tests."),
    ("-o, --docker", "Run the docker container helper script (docker/container.sh)."),
    ("-v, --vscode", "Generate the VSCode settings file from template."),
    ("-d, --docs", "Build the documentation from source using sphinx."),
    ("-n, --new", "Create a new external project or internal task from template."),
    ("-c, --conda [NAME]", "Create the conda environment for simlab. Default name is 'env_simlab'."),
    ("-e, --venv [NAME]", "Create the virtual environment for simlab using uv or venv. Default name is 'venv_simlab'."),
)


def usage(prog: str = "simlab") -> str:
    lines = [
        "",
        f"usage: {prog} [-h] [-i] [-f] [-p] [-s] [-t] [-o] [-v] [-d] [-n] [-c] [-e] -- Utility to manage simlab.",
        "",
        "optional arguments:",
    ]
    for flags, text in _OPTIONS:
        lines.append(f"\t{flags:<20} {text}")
    lines.append("")
    return "\n".join(lines)


def build_dispatcher(context: EnvironmentContext, runner: ProcessRunner) -> Dispatcher:
    config = load_config(context.lab_path)
    paths = LabPaths(root=context.lab_path, config=config)
    resolver = Resolver(context, paths, config, MarkerQuery(runner, config))
    return Dispatcher(context, config, paths, runner, resolver, Installer(context, runner))


def main(
    argv: Optional[List[str]] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    runner: Optional[ProcessRunner] = None,
) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    prog = "simlab"
    if argv is None and sys.argv and Path(sys.argv[0]).name not in ("", "__main__.py", "-c"):
        prog = Path(sys.argv[0]).name

    try:
        invocations = parse_args(args)
        context = EnvironmentContext.from_environ(environ)
        dispatcher = build_dispatcher(context, runner or ProcessRunner())
        return dispatcher.run(invocations)
    except UsageError as e:
        if e.message:
            print(f"[Error] {e.message}", file=sys.stderr)
        print(usage(prog))
        return e.exit_code
    except SimlabError as e:
        error(e.detail())
        return e.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
