"""Configure pipeline orchestration.

Responsibilities:
- Run the Locator -> Resolver -> Differ stages for one `ToolchainRequest`.
- Emit stage-level events and keep the live process environment untouched.

Key types:
- `DevPromptPipeline`: stage orchestrator returning a `ConfigureResult`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Mapping, TypeVar

from loguru import logger

from .environment.differ import run_and_diff
from .environment.shells import HostShell, default_shell
from .errors import DevPromptError
from .models.datatypes import ConfigureResult, InstallRoots, ToolchainRequest
from .runtime_tools import CommandRunner, extend_search_path, run_captured
from .telemetry.logger import RunLogger
from .toolchain.locator import locate
from .toolchain.resolver import resolve_explicit, resolve_first

_T = TypeVar("_T")


class DevPromptPipeline:
    """Discover, run, and diff a toolchain configuration script."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        shell: HostShell | None = None,
        runner: CommandRunner = run_captured,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize collaborators; `environ` defaults to a copy of the process environment."""

        self._run_logger = run_logger
        self.shell = shell or default_shell()
        self._runner = runner
        self._environ = dict(environ) if environ is not None else None

    def configure(self, request: ToolchainRequest) -> ConfigureResult:
        """Return the environment changes the configuration script makes for `request`."""

        base_env = dict(os.environ) if self._environ is None else dict(self._environ)
        shell_env = base_env

        if request.script is not None:
            script_path = self._run_stage("resolve", lambda: resolve_explicit(request.script))
        else:
            roots = self._run_stage("config", lambda: InstallRoots.from_env(base_env))
            search_path = extend_search_path(base_env.get("PATH"), roots.locator_directory)
            logger.debug("Setting PATH to: {}", search_path)
            shell_env = {**base_env, "PATH": search_path}
            candidates = self._run_stage(
                "locate",
                lambda: locate(
                    request.vsversion,
                    roots,
                    search_path=search_path,
                    runner=self._runner,
                ),
            )
            script_path = self._run_stage("resolve", lambda: resolve_first(candidates))

        diff = self._run_stage(
            "capture",
            lambda: run_and_diff(
                script_path,
                request.script_arguments(),
                shell=self.shell,
                runner=self._runner,
                env=shell_env,
            ),
        )
        logger.info("Configured Developer Command Prompt")
        return ConfigureResult(request=request, script_path=Path(script_path), diff=diff)

    def _run_stage(self, stage: str, action: Callable[[], _T]) -> _T:
        """Run one stage, emitting start/complete/failure events around it."""

        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage)
        try:
            result = action()
        except DevPromptError as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(exc.stage, type(exc).__name__)
            raise
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage)
        return result
