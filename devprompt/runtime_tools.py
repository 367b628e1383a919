"""Runtime executable resolution and captured subprocess helpers.

Responsibilities:
- Extend a search path with well-known tool directories without touching the live process.
- Resolve external executables on an explicit search path.
- Run external commands with captured output through one injectable seam.
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
import subprocess
from typing import Callable, Mapping, Sequence

CommandRunner = Callable[
    [Sequence[str], Mapping[str, str] | None],
    "subprocess.CompletedProcess[bytes]",
]


def extend_search_path(search_path: str | None, directory: Path) -> str:
    """Append a directory to a search path unless it is already listed."""

    entries = [entry for entry in (search_path or "").split(os.pathsep) if entry]
    if str(directory) not in entries:
        entries.append(str(directory))
    return os.pathsep.join(entries)


def resolve_executable(command_name: str, search_path: str | None = None) -> str:
    """Resolve an executable on the given search path, then fall back to its raw name.

    Resolution order:
    1. `search_path` (or the process `PATH` when omitted), trying `.exe` variants.
    2. Raw command name (allowing subprocess to raise a native missing-binary error).
    """

    normalized = command_name.strip()
    if not normalized:
        return command_name

    for name in _candidate_names(normalized):
        resolved_path = shutil.which(name, path=search_path)
        if resolved_path is not None:
            return resolved_path

    return normalized


def _candidate_names(command_name: str) -> tuple[str, ...]:
    """Return command name variants including Windows `.exe` fallback."""

    lowered = command_name.lower()
    if lowered.endswith(".exe"):
        return (command_name,)
    return (command_name, f"{command_name}.exe")


def run_captured(
    command: Sequence[str],
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[bytes]:
    """Run a command non-interactively, capturing stdout and stderr as bytes."""

    return subprocess.run(
        list(command),
        check=False,
        capture_output=True,
        stdin=subprocess.DEVNULL,
        env=None if env is None else dict(env),
    )
