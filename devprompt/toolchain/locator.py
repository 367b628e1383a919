"""Installation locator for Visual Studio toolchains.

Responsibilities:
- Translate year selectors (`2022`) into version numbers (`17.0`) and back.
- Ask `vswhere` for installation roots, treating any failure as "not found".
- Fall back to standard installation directories, newest year first, then the
  legacy Visual C++ Build Tools layout.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Sequence

from loguru import logger

from ..models.datatypes import InstallationCandidate, InstallRoots
from ..runtime_tools import CommandRunner, resolve_executable, run_captured

VS_YEAR_VERSION = {
    "2022": "17.0",
    "2019": "16.0",
    "2017": "15.0",
    "2015": "14.0",
    "2013": "12.0",
}
YEARS = ("2022", "2019", "2017", "2015")
EDITIONS = ("Enterprise", "Professional", "Community", "Preview", "BuildTools")

VCVARSALL_RELPATH = Path("VC/Auxiliary/Build/vcvarsall.bat")
LEGACY_RELPATH = Path("Microsoft Visual C++ Build Tools/vcbuildtools.bat")
VSWHERE = "vswhere"

_VSWHERE_BANNER_MARKERS = ("Visual Studio Locator", "Copyright (C)")


def vsversion_to_version_number(vsversion: str | None) -> str | None:
    """Map a year to its version number; unknown selectors pass through unchanged."""

    if vsversion is None:
        return None
    return VS_YEAR_VERSION.get(vsversion, vsversion)


def vsversion_to_year(vsversion: str) -> str:
    """Map a version number back to its year; unknown selectors pass through unchanged."""

    for year, version in VS_YEAR_VERSION.items():
        if vsversion == version:
            return year
    return vsversion


def vswhere_version_arguments(vsversion: str | None) -> list[str]:
    """Return the vswhere version window for a selector, or `-latest` when unset."""

    version = vsversion_to_version_number(vsversion)
    if version is None:
        return ["-latest"]
    major = version.split(".")[0]
    return ["-version", f"{version},{major}.9"]


def find_with_vswhere(
    vsversion: str | None,
    search_path: str | None,
    runner: CommandRunner = run_captured,
) -> list[Path]:
    """Return installation roots reported by vswhere, or an empty list when unusable."""

    version_arguments = vswhere_version_arguments(vsversion)
    command = [
        resolve_executable(VSWHERE, search_path),
        "-products",
        "*",
        *version_arguments,
        "-prerelease",
        "-property",
        "installationPath",
        "-utf8",
    ]
    logger.debug("vswhere command: {}", command)

    try:
        result = runner(command, None)
    except OSError as exc:
        logger.info("Not found with vswhere: {}", exc)
        return []

    output = result.stdout.decode("utf-8", errors="replace").strip()
    logger.debug("vswhere output for query {}: {}", " ".join(version_arguments), output)
    if result.returncode != 0:
        logger.info("Not found with vswhere: exit status {}", result.returncode)
        return []
    if any(marker in output for marker in _VSWHERE_BANNER_MARKERS):
        logger.info("Query to vswhere failed:\n\t{}", output)
        return []

    roots: list[Path] = []
    for line in output.splitlines():
        text = line.strip()
        if not text:
            continue
        try:
            root = Path(text).resolve(strict=True)
        except OSError as exc:
            logger.info("Ignoring vswhere result {}: {}", text, exc)
            continue
        logger.info("Found with vswhere: {}", root)
        roots.append(root)
    return roots


def standard_candidates(
    roots: InstallRoots,
    vsversion: str | None,
) -> Iterator[InstallationCandidate]:
    """Yield existing standard-location candidates, newest year first."""

    years: Sequence[str] = YEARS if vsversion is None else (vsversion_to_year(vsversion),)
    for year in years:
        for base in roots.search_bases:
            for edition in EDITIONS:
                root = base / "Microsoft Visual Studio" / year / edition
                candidate = InstallationCandidate(
                    root=root,
                    script_relpath=VCVARSALL_RELPATH,
                    source="standard",
                )
                logger.debug("Trying standard location: {}", candidate.script_path)
                if candidate.script_path.exists():
                    logger.info("Found standard location: {}", candidate.script_path)
                    yield candidate


def legacy_candidate(roots: InstallRoots) -> InstallationCandidate | None:
    """Return the Visual C++ Build Tools 2015 candidate when it exists."""

    candidate = InstallationCandidate(
        root=roots.program_files_x86,
        script_relpath=LEGACY_RELPATH,
        source="legacy",
    )
    if candidate.script_path.exists():
        logger.info("Found VS 2015: {}", candidate.script_path)
        return candidate
    logger.info("Not found in VS 2015 location: {}", candidate.script_path)
    return None


def locate(
    vsversion: str | None,
    roots: InstallRoots,
    search_path: str | None = None,
    runner: CommandRunner = run_captured,
) -> list[InstallationCandidate]:
    """Return installation candidates ordered by preference.

    vswhere results come first, then standard locations, then the legacy layout.
    An empty list means nothing was found; the caller decides how to fail.
    """

    candidates = [
        InstallationCandidate(root=root, script_relpath=VCVARSALL_RELPATH, source="vswhere")
        for root in find_with_vswhere(vsversion, search_path, runner=runner)
    ]
    standard = list(standard_candidates(roots, vsversion))
    if not standard:
        logger.info("Not found in standard locations")
    candidates.extend(standard)
    legacy = legacy_candidate(roots)
    if legacy is not None:
        candidates.append(legacy)
    return candidates
