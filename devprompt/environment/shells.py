"""Host shell renderings for the three-stage environment capture.

Responsibilities:
- Quote configuration-script paths so paths with spaces survive as one argument.
- Render the composite "dump, run, dump" script with a form-feed stage delimiter.
- Describe name-case and list-separator policy of each host environment.

Key types:
- `HostShell`: protocol consumed by the differ.
- `CmdShell`: Windows `cmd.exe` (`set` / `cls`).
- `PosixShell`: POSIX `sh` (`env -0` / `printf '\\f'`).
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Protocol, Sequence

CODEPAGE_VARIABLE = "_DEVPROMPT_CODEPAGE"


class HostShell(Protocol):
    """Protocol for shells able to dump their environment around a sourced script."""

    name: str
    script_suffix: str
    list_separator: str
    case_insensitive_names: bool
    encoding: str
    record_separator: str

    def render_invocation(self, script_path: Path, arguments: Sequence[str]) -> str:
        """Return the shell text that runs the configuration script in-process."""

    def render_composite(self, invocation: str) -> str:
        """Return the full composite script text to write to a temporary file."""

    def command(self, composite_path: Path) -> list[str]:
        """Return the argv that runs the composite script non-interactively."""


class CmdShell:
    """Windows `cmd.exe`; `cls` writes a form feed when its output is captured."""

    name = "cmd"
    script_suffix = ".bat"
    list_separator = ";"
    case_insensitive_names = True
    encoding = "utf-8"
    record_separator = "\n"

    @staticmethod
    def quote(argument: str) -> str:
        """Wrap an argument in double quotes when it holds spaces or is empty."""

        if argument and not any(character in argument for character in ' \t"'):
            return argument
        return '"' + argument.replace('"', '""') + '"'

    def render_invocation(self, script_path: Path, arguments: Sequence[str]) -> str:
        """Render `call "<script>" args...` so control returns to the composite line."""

        quoted_script = '"' + str(script_path) + '"'
        return " ".join(["call", quoted_script, *(self.quote(item) for item in arguments)])

    def render_composite(self, invocation: str) -> str:
        """Render `set && cls && <invocation> && cls && set` under a UTF-8 code page.

        The console code page is shared with the calling terminal, so the
        original page is saved first and restored after the final dump.
        """

        return (
            "@echo off\r\n"
            f"for /f \"tokens=2 delims=:.\" %%c in ('chcp') do set \"{CODEPAGE_VARIABLE}=%%c\"\r\n"
            "chcp 65001 >nul\r\n"
            f"set && cls && {invocation} && cls && set\r\n"
            f"chcp %{CODEPAGE_VARIABLE}% >nul\r\n"
        )

    def command(self, composite_path: Path) -> list[str]:
        """Return `cmd /C <composite>`."""

        return ["cmd", "/C", str(composite_path)]


class PosixShell:
    """POSIX `sh`; the script is sourced with its arguments set as positionals."""

    name = "sh"
    script_suffix = ".sh"
    list_separator = ":"
    case_insensitive_names = False
    encoding = "utf-8"
    record_separator = "\0"

    @staticmethod
    def quote(argument: str) -> str:
        """Quote one argument for `sh`."""

        return shlex.quote(argument)

    def render_invocation(self, script_path: Path, arguments: Sequence[str]) -> str:
        """Render `set -- args && . <script>`."""

        positionals = " ".join(self.quote(item) for item in arguments)
        return f"set -- {positionals} && . {self.quote(str(script_path))}"

    def render_composite(self, invocation: str) -> str:
        """Render `env -0 && printf '\\f' && <invocation> && printf '\\f' && env -0`.

        NUL-terminated records keep multi-line values intact.
        """

        return f"env -0 && printf '\\f' && {invocation} && printf '\\f' && env -0\n"

    def command(self, composite_path: Path) -> list[str]:
        """Return `sh <composite>`."""

        return ["sh", str(composite_path)]


def default_shell() -> HostShell:
    """Return the host shell matching the running platform."""

    if os.name == "nt":
        return CmdShell()
    return PosixShell()
