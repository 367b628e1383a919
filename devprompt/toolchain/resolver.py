"""Configuration script resolution.

Responsibilities:
- Join the fixed script location onto an installation candidate and canonicalize it.
- Pick the first candidate that resolves, failing with every tried path listed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from loguru import logger

from ..errors import DiscoveryFailure
from ..models.datatypes import InstallationCandidate


def resolve(candidate: InstallationCandidate) -> Path | None:
    """Return the canonical absolute script path, or `None` when it does not exist."""

    try:
        script_path = candidate.script_path.resolve(strict=True)
    except OSError:
        return None
    if not script_path.is_file():
        return None
    return script_path


def resolve_first(candidates: Iterable[InstallationCandidate]) -> Path:
    """Resolve candidates in priority order and return the first existing script.

    Raises:
        DiscoveryFailure: If no candidate resolves.
    """

    tried: list[str] = []
    for candidate in candidates:
        script_path = resolve(candidate)
        if script_path is not None:
            logger.info("Using {} configuration script: {}", candidate.source, script_path)
            return script_path
        tried.append(str(candidate.script_path))

    detail = "Microsoft Visual Studio not found"
    if tried:
        detail = f"{detail}; tried:\n" + "\n".join(f"  {path}" for path in tried)
    raise DiscoveryFailure(
        detail=detail,
        hint="Install the C++ build tools, pass `--vsversion`, or pass `--script <path>`.",
    )


def resolve_explicit(script: Path) -> Path:
    """Canonicalize a user-supplied configuration script path.

    Raises:
        DiscoveryFailure: If the path does not name an existing file.
    """

    candidate = InstallationCandidate(
        root=script.parent,
        script_relpath=Path(script.name),
        source="explicit",
    )
    script_path = resolve(candidate)
    if script_path is None:
        raise DiscoveryFailure(
            detail=f"Configuration script not found: `{script}`.",
            hint="Pass an existing file via `--script <path>`.",
        )
    return script_path
