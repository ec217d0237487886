"""
Dispatcher: runs parsed invocations, one handler per Command.

Handlers return the exit status of the step they delegate to. The first
non-zero status stops the run and becomes simlab's own exit status.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Sequence

from simlab.commands import Command, Invocation
from simlab.config import LabConfig
from simlab.console import info, warn
from simlab.context import EnvironmentContext
from simlab.envs import create_conda_env, create_venv
from simlab.installer import Installer, extension_dirs, extras_target
from simlab.paths import LabPaths
from simlab.resolver import Resolver
from simlab.runner import ProcessRunner

Handler = Callable[[Sequence[str]], int]


class Dispatcher:
    def __init__(
        self,
        context: EnvironmentContext,
        config: LabConfig,
        paths: LabPaths,
        runner: ProcessRunner,
        resolver: Resolver,
        installer: Installer,
    ) -> None:
        self.context = context
        self.config = config
        self.paths = paths
        self.runner = runner
        self.resolver = resolver
        self.installer = installer
        self.handlers: Dict[Command, Handler] = {
            Command.INSTALL: self.install,
            Command.CONDA: self.conda,
            Command.VENV: self.venv,
            Command.FORMAT: self.format,
            Command.PYTHON: self.python,
            Command.SIM: self.sim,
            Command.NEW: self.new,
            Command.TEST: self.test,
            Command.DOCKER: self.docker,
            Command.VSCODE: self.vscode,
            Command.DOCS: self.docs,
        }

    def run(self, invocations: Iterable[Invocation]) -> int:
        for inv in invocations:
            rc = self.handlers[inv.command](inv.args)
            if rc != 0 or inv.command.terminal:
                return rc
        return 0

    # --- chainable commands -------------------------------------------------

    def install(self, args: Sequence[str]) -> int:
        info("Installing extensions inside the simlab repository...")
        python = self.resolver.resolve_interpreter()
        # Dependencies between extensions are not ordered.
        for ext in extension_dirs(self.paths.source_dir):
            print(f"\t module: {ext}")
            rc = self.installer.install_editable(python, ext)
            if rc != 0:
                return rc

        info("Installing extra requirements such as learning frameworks...")
        group = args[0] if args else self.config.default_extras
        if not args:
            info("Installing all rl-frameworks...")
        elif group == "none":
            info("No rl-framework will be installed.")
        else:
            info(f"Installing rl-framework: {group}")
        for pkg in self.config.extras_paths(self.paths.root):
            rc = self.installer.install_editable(python, extras_target(pkg, group))
            if rc != 0:
                return rc

        # The vscode generator asks for a EULA, which blocks docker image builds.
        if self.context.in_docker:
            info("Running inside a docker container. Skipping VSCode settings setup.")
            info(f"To setup VSCode settings, run '{self.config.alias} -v'.")
            return 0
        return self.vscode(())

    def conda(self, args: Sequence[str]) -> int:
        name = self._env_name(args, self.config.default_conda_name, "conda environment")
        return create_conda_env(name, context=self.context, paths=self.paths, config=self.config, runner=self.runner)

    def venv(self, args: Sequence[str]) -> int:
        name = self._env_name(args, self.config.default_venv_name, "virtual environment")
        return create_venv(
            name,
            context=self.context,
            paths=self.paths,
            config=self.config,
            runner=self.runner,
            installer=self.installer,
        )

    @staticmethod
    def _env_name(args: Sequence[str], default: str, what: str) -> str:
        if args:
            info(f"Using {what} name: {args[0]}")
            return args[0]
        info(f"Using default {what} name: {default}")
        return default

    # --- terminal commands --------------------------------------------------

    def format(self, args: Sequence[str]) -> int:
        # pre-commit hooks live in their own environments; a conda PYTHONPATH leaks into them.
        env = self.context.child_env(PYTHONPATH="") if self.context.conda_default_env else self.context.child_env()
        if self.context.which("pre-commit") is None:
            info("Installing pre-commit...")
            uv = self.context.which("uv")
            cmd: List[str] = [str(uv), "pip", "install"] if uv is not None else ["pip", "install"]
            rc = self.runner.run([*cmd, "pre-commit"], env=env)
            if rc != 0:
                return rc
        info("Formatting the repository...")
        return self.runner.run(["pre-commit", "run", "--all-files", *args], cwd=self.paths.root, env=env)

    def python(self, args: Sequence[str]) -> int:
        python = self.resolver.resolve_interpreter()
        info(f"Using python from: {python}")
        return self.runner.run([python, *args])

    def sim(self, args: Sequence[str]) -> int:
        sim = self.resolver.resolve_simulator()
        info(f"Running simulator from: {' '.join(sim)}")
        return self.runner.run([*sim, "--ext-folder", self.paths.source_dir, *args])

    def new(self, args: Sequence[str]) -> int:
        python = self.resolver.resolve_interpreter()
        info("Installing template dependencies...")
        rc = self.installer.install(python, ["-q", "-r", self.paths.template_requirements])
        if rc != 0:
            return rc
        print("\n[INFO] Running template generator...\n")
        return self.runner.run([python, self.paths.template_cli, *args])

    def test(self, args: Sequence[str]) -> int:
        python = self.resolver.resolve_interpreter()
        return self.runner.run([python, "-m", "pytest", self.paths.tools_dir, *args])

    def docker(self, args: Sequence[str]) -> int:
        script = self.paths.docker_script
        info(f"Running docker utility script from: {script}")
        return self.runner.run(["bash", script, *args])

    def vscode(self, args: Sequence[str]) -> int:
        info("Setting up vscode settings...")
        script = self.paths.vscode_script
        if not script.is_file():
            warn(f"Unable to find the script '{script.name}'. Aborting vscode settings setup.")
            return 0
        python = self.resolver.resolve_interpreter()
        return self.runner.run([python, script, *args])

    def docs(self, args: Sequence[str]) -> int:
        info("Building documentation...")
        python = self.resolver.resolve_interpreter()
        docs = self.paths.docs_dir
        rc = self.installer.install(python, ["-r", self.paths.docs_requirements], quiet=True)
        if rc != 0:
            return rc
        rc = self.runner.run(
            [python, "-m", "sphinx", "-b", "html", "-d", "_build/doctrees", ".", "_build/current", *args],
            cwd=docs,
        )
        if rc != 0:
            return rc
        info("To open documentation on default browser, run:")
        print(f"\n\t\txdg-open {self.paths.docs_build_dir / 'index.html'}\n")
        return 0
