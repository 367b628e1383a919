"""Unit tests for Visual Studio installation discovery."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from devprompt.models.datatypes import InstallRoots
from devprompt.toolchain import locator


def _roots(env: dict[str, str]) -> InstallRoots:
    return InstallRoots.from_env(env)


@pytest.mark.parametrize(
    ("vsversion", "expected"),
    [
        (None, ["-latest"]),
        ("2022", ["-version", "17.0,17.9"]),
        ("2017", ["-version", "15.0,15.9"]),
        ("16.0", ["-version", "16.0,16.9"]),
    ],
)
def test_vswhere_version_arguments(vsversion: str | None, expected: list[str]) -> None:
    """Years map to version windows, version numbers pass through, none means latest."""

    assert locator.vswhere_version_arguments(vsversion) == expected


def test_vsversion_to_year_maps_known_versions_and_passes_others() -> None:
    """Version numbers map back to years; years and unknown values pass through."""

    assert locator.vsversion_to_year("17.0") == "2022"
    assert locator.vsversion_to_year("2019") == "2019"
    assert locator.vsversion_to_year("18.0") == "18.0"


def test_find_with_vswhere_returns_resolved_roots(
    tmp_path: Path, fake_runner_factory: type
) -> None:
    """Existing installation paths printed by vswhere become candidate roots."""

    install_root = tmp_path / "BuildTools"
    install_root.mkdir()
    runner = fake_runner_factory(vswhere_stdout=f"{install_root}\r\n".encode("utf-8"))

    roots = locator.find_with_vswhere("2022", search_path=str(tmp_path), runner=runner)

    assert roots == [install_root.resolve()]
    command = runner.calls[0]
    assert command[1:] == [
        "-products",
        "*",
        "-version",
        "17.0,17.9",
        "-prerelease",
        "-property",
        "installationPath",
        "-utf8",
    ]


@pytest.mark.parametrize(
    "stdout",
    [
        b"Visual Studio Locator version 3.1.7+f39851e70f [query version 3.9.1]\r\n",
        b"Copyright (C) Microsoft Corporation. All rights reserved.\r\n",
        b"",
    ],
)
def test_find_with_vswhere_treats_banner_output_as_not_found(
    stdout: bytes, fake_runner_factory: type
) -> None:
    """Usage/copyright banners or empty output should not be mistaken for a path."""

    runner = fake_runner_factory(vswhere_stdout=stdout)

    assert locator.find_with_vswhere(None, search_path=None, runner=runner) == []


def test_find_with_vswhere_tolerates_missing_executable(fake_runner_factory: type) -> None:
    """A missing vswhere should fall through instead of failing."""

    runner = fake_runner_factory(vswhere_stdout=FileNotFoundError("vswhere"))

    assert locator.find_with_vswhere(None, search_path=None, runner=runner) == []


def test_find_with_vswhere_ignores_failures_and_stale_paths(
    tmp_path: Path, fake_runner_factory: type
) -> None:
    """A failing exit status or a path that does not exist yields no roots."""

    failing = fake_runner_factory(vswhere_stdout=str(tmp_path).encode(), vswhere_returncode=87)
    stale = fake_runner_factory(vswhere_stdout=str(tmp_path / "gone").encode())

    assert locator.find_with_vswhere(None, search_path=None, runner=failing) == []
    assert locator.find_with_vswhere(None, search_path=None, runner=stale) == []


def test_locate_prefers_newest_year_over_edition_order(
    windows_env: dict[str, str],
    fake_runner_factory: type,
    vcvarsall_factory: Callable[[Path], Path],
) -> None:
    """Without vswhere, 2022/Community should beat 2019/Professional."""

    roots = _roots(windows_env)
    vcvarsall_factory(roots.program_files_x86 / "Microsoft Visual Studio" / "2019" / "Professional")
    vcvarsall_factory(roots.program_files / "Microsoft Visual Studio" / "2022" / "Community")
    runner = fake_runner_factory(vswhere_stdout=FileNotFoundError("vswhere"))

    candidates = locator.locate(None, roots, runner=runner)

    assert [(item.root.parent.name, item.root.name) for item in candidates] == [
        ("2022", "Community"),
        ("2019", "Professional"),
    ]
    assert {item.source for item in candidates} == {"standard"}


def test_locate_restricts_fallback_to_requested_year(
    windows_env: dict[str, str],
    fake_runner_factory: type,
    vcvarsall_factory: Callable[[Path], Path],
) -> None:
    """A version selector should limit standard locations to the matching year."""

    roots = _roots(windows_env)
    vcvarsall_factory(roots.program_files_x86 / "Microsoft Visual Studio" / "2019" / "Enterprise")
    vcvarsall_factory(roots.program_files / "Microsoft Visual Studio" / "2022" / "Enterprise")
    runner = fake_runner_factory(vswhere_stdout=b"")

    candidates = locator.locate("16.0", roots, runner=runner)

    assert [item.root.parent.name for item in candidates] == ["2019"]


def test_locate_orders_vswhere_then_standard_then_legacy(
    tmp_path: Path,
    windows_env: dict[str, str],
    fake_runner_factory: type,
    vcvarsall_factory: Callable[[Path], Path],
) -> None:
    """vswhere results come first and the legacy layout comes last."""

    roots = _roots(windows_env)
    queried_root = tmp_path / "Preview"
    vcvarsall_factory(queried_root)
    vcvarsall_factory(roots.program_files / "Microsoft Visual Studio" / "2017" / "BuildTools")
    legacy = roots.program_files_x86 / locator.LEGACY_RELPATH
    legacy.parent.mkdir(parents=True)
    legacy.write_text("@echo off\r\n", encoding="utf-8")
    runner = fake_runner_factory(vswhere_stdout=str(queried_root).encode())

    candidates = locator.locate(None, roots, runner=runner)

    assert [item.source for item in candidates] == ["vswhere", "standard", "legacy"]
    assert candidates[-1].script_path == legacy


def test_locate_returns_empty_list_when_nothing_is_installed(
    windows_env: dict[str, str], fake_runner_factory: type
) -> None:
    """No installation anywhere should produce no candidates."""

    runner = fake_runner_factory(vswhere_stdout=b"")

    assert locator.locate(None, _roots(windows_env), runner=runner) == []
