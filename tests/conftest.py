"""Shared pytest fixtures for the full devprompt test suite."""

from __future__ import annotations

from pathlib import Path
import subprocess
from typing import Callable, Iterator, Mapping, Sequence

from loguru import logger
import pytest

FORM_FEED = b"\x0c"


def render_environment(variables: Mapping[str, str], newline: str = "\r\n") -> bytes:
    """Render variables the way `set` prints them."""

    return "".join(f"{name}={value}{newline}" for name, value in variables.items()).encode("utf-8")


def render_transcript(
    before: Mapping[str, str],
    after: Mapping[str, str],
    script_output: str = "",
) -> bytes:
    """Join two environment dumps and the script output with form feeds."""

    return (
        render_environment(before)
        + FORM_FEED
        + script_output.encode("utf-8")
        + FORM_FEED
        + render_environment(after)
    )


ShellOutput = bytes | Callable[[Mapping[str, str] | None], bytes]


class FakeRunner:
    """Stand-in for `run_captured` answering vswhere and host-shell invocations."""

    def __init__(
        self,
        vswhere_stdout: bytes | OSError = b"",
        vswhere_returncode: int = 0,
        shell_stdout: ShellOutput | OSError = b"",
        shell_stderr: bytes = b"",
    ) -> None:
        """Store canned responses for each external command."""

        self.vswhere_stdout = vswhere_stdout
        self.vswhere_returncode = vswhere_returncode
        self.shell_stdout = shell_stdout
        self.shell_stderr = shell_stderr
        self.calls: list[list[str]] = []
        self.composite_paths: list[Path] = []
        self.composite_scripts: list[str] = []
        self.shell_envs: list[Mapping[str, str] | None] = []

    def __call__(
        self,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
    ) -> subprocess.CompletedProcess[bytes]:
        """Record the call and answer with the configured canned output."""

        argv = list(command)
        self.calls.append(argv)
        if Path(argv[0]).name.lower().startswith("vswhere"):
            if isinstance(self.vswhere_stdout, OSError):
                raise self.vswhere_stdout
            return subprocess.CompletedProcess(argv, self.vswhere_returncode, self.vswhere_stdout, b"")

        composite_path = Path(argv[-1])
        self.composite_paths.append(composite_path)
        self.composite_scripts.append(composite_path.read_text(encoding="utf-8"))
        self.shell_envs.append(env)
        if isinstance(self.shell_stdout, OSError):
            raise self.shell_stdout
        stdout = self.shell_stdout(env) if callable(self.shell_stdout) else self.shell_stdout
        return subprocess.CompletedProcess(argv, 0, stdout, self.shell_stderr)


@pytest.fixture(autouse=True)
def _reset_loguru_handlers() -> Iterator[None]:
    """Drop sinks added during a test so none outlives its captured stream."""

    yield
    logger.remove()


@pytest.fixture
def fake_runner_factory() -> type[FakeRunner]:
    """Provide the fake command runner class."""

    return FakeRunner


@pytest.fixture
def transcript_factory() -> Callable[..., bytes]:
    """Provide the three-stage transcript renderer."""

    return render_transcript


@pytest.fixture
def windows_env(tmp_path: Path) -> dict[str, str]:
    """Provide a Windows-like base environment rooted in `tmp_path`."""

    program_files_x86 = tmp_path / "Program Files (x86)"
    program_files = tmp_path / "Program Files"
    program_files_x86.mkdir()
    program_files.mkdir()
    return {
        "ProgramFiles(x86)": str(program_files_x86),
        "ProgramFiles": str(program_files),
        "PATH": r"C:\Windows\system32",
        "INCLUDE": "",
    }


def make_vcvarsall(root: Path) -> Path:
    """Create an installation root containing a placeholder `vcvarsall.bat`."""

    script = root / "VC" / "Auxiliary" / "Build" / "vcvarsall.bat"
    script.parent.mkdir(parents=True, exist_ok=True)
    script.write_text("@echo off\r\n", encoding="utf-8")
    return script


@pytest.fixture
def vcvarsall_factory() -> Callable[[Path], Path]:
    """Provide the placeholder installation builder."""

    return make_vcvarsall
