"""Environment capture, diffing, and path-list normalization."""

from .differ import capture_transcript, compute_diff, run_and_diff
from .pathlist import is_path_list_variable, normalize
from .shells import CmdShell, HostShell, PosixShell, default_shell

__all__ = [
    "CmdShell",
    "HostShell",
    "PosixShell",
    "capture_transcript",
    "compute_diff",
    "default_shell",
    "is_path_list_variable",
    "normalize",
    "run_and_diff",
]
