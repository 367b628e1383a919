"""Typed data models used by devprompt configure and launch stages."""

from .datatypes import (
    ConfigureResult,
    EnvironmentDiff,
    EnvironmentSnapshot,
    InstallationCandidate,
    InstallRoots,
    ToolchainRequest,
    Transcript,
    normalize_arch,
)

__all__ = [
    "ConfigureResult",
    "EnvironmentDiff",
    "EnvironmentSnapshot",
    "InstallationCandidate",
    "InstallRoots",
    "ToolchainRequest",
    "Transcript",
    "normalize_arch",
]
