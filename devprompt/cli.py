"""Command-line interface for devprompt.

Responsibilities:
- Expose the single `devprompt [OPTIONS] PROGRAM [ARGS]...` command.
- Convert CLI flags, the optional YAML file, and `DEVPROMPT_*` variables into a
  `ToolchainRequest`, configure the environment, and launch the program.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from . import __version__
from .cli_rendering import echo_configure_summary, exit_with_command_error
from .config import ConfigLoader, DevPromptConfig, resolve_config
from .errors import ConfigurationError
from .launcher import launch
from .pipeline import DevPromptPipeline
from .telemetry.logger import RunLogger, level_from_verbosity

app = typer.Typer(
    name="devprompt",
    add_completion=False,
    help="Run a command under your favourite Developer Shell Prompt.",
)


def _version_callback(value: bool) -> None:
    """Print the version and exit when `--version` is given."""

    if value:
        typer.echo(f"devprompt {__version__}")
        raise typer.Exit()


def _load_yaml_config(config_path: Path | None) -> DevPromptConfig | None:
    """Load a YAML config file when requested and map failures to config errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise ConfigurationError(
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ConfigurationError(
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config keys/values and rerun.",
        ) from exc
    except OSError as exc:
        raise ConfigurationError(
            detail=f"Failed to read config file `{config_path}`: {exc}",
            hint="Verify file permissions.",
        ) from exc


def _load_env_config() -> DevPromptConfig:
    """Load `DEVPROMPT_*` variables and map failures to config errors."""

    try:
        return ConfigLoader.from_env()
    except ValueError as exc:
        raise ConfigurationError(
            detail=f"Invalid environment configuration: {exc}",
            hint="Fix or unset the offending `DEVPROMPT_*` variable.",
        ) from exc


def _resolve_log_level(verbose: int, config: DevPromptConfig) -> str:
    """Resolve the effective log level and map failures to config errors."""

    try:
        return level_from_verbosity(verbose, config.effective_log_level)
    except ValueError as exc:
        raise ConfigurationError(detail=str(exc), hint="Use a loguru level name such as `INFO`.") from exc


@app.command(
    context_settings={"allow_interspersed_args": False},
    no_args_is_help=True,
    epilog="Inspired by https://github.com/ilammy/msvc-dev-cmd",
)
def run_command(
    program: Annotated[str, typer.Argument(help="Name or path to the program to launch.")],
    args: Annotated[
        list[str] | None,
        typer.Argument(help="Arguments to the program, passed through verbatim."),
    ] = None,
    arch: Annotated[
        str | None,
        typer.Option("--arch", help="Target architecture (default `x64`)."),
    ] = None,
    sdk: Annotated[
        str | None,
        typer.Option("--sdk", help="Windows SDK number to build for."),
    ] = None,
    spectre: Annotated[
        bool,
        typer.Option("--spectre", help="Enable Spectre mitigations."),
    ] = False,
    toolset: Annotated[
        str | None,
        typer.Option("--toolset", help="VC++ compiler toolset version."),
    ] = None,
    uwp: Annotated[
        bool,
        typer.Option("--uwp", help="Build for Universal Windows Platform."),
    ] = False,
    vsversion: Annotated[
        str | None,
        typer.Option(
            "--vsversion",
            help=(
                "The Visual Studio version to use: a version number (e.g. `16.0`) "
                "or a year (e.g. `2019`)."
            ),
        ),
    ] = None,
    script: Annotated[
        Path | None,
        typer.Option("--script", help="Use this configuration script instead of discovery."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with defaults."),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase log verbosity (`-vv` for debug)."),
    ] = 0,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = None,
) -> None:
    """Configure the toolchain environment and run PROGRAM under it."""

    cli_layer = ConfigLoader.from_cli(
        arch=arch,
        sdk=sdk,
        spectre=spectre,
        toolset=toolset,
        uwp=uwp,
        vsversion=vsversion,
        script=script,
    )

    try:
        config = resolve_config(cli_layer, _load_yaml_config(config_file), _load_env_config())
        level = _resolve_log_level(verbose, config)
        pipeline = DevPromptPipeline(run_logger=RunLogger(level=level))
        result = pipeline.configure(config.to_request())
    except Exception as exc:
        exit_with_command_error("devprompt", exc)

    if verbose:
        echo_configure_summary(result)

    try:
        exit_code = launch(
            result.diff,
            program,
            args or [],
            list_separator=pipeline.shell.list_separator,
        )
    except Exception as exc:
        exit_with_command_error("devprompt", exc)

    raise typer.Exit(code=exit_code)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
