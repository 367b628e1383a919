"""Unit tests for path-list variable deduplication."""

from __future__ import annotations

import pytest

from devprompt.environment.pathlist import is_path_list_variable, normalize


def _first_occurrences(entries: list[str]) -> list[str]:
    """Return entries in first-occurrence order without repeats."""

    seen: list[str] = []
    for entry in entries:
        if entry not in seen:
            seen.append(entry)
    return seen


@pytest.mark.parametrize(
    "entries",
    [
        [r"C:\A", r"C:\A", r"C:\B"],
        [r"C:\B", r"C:\A", r"C:\B", r"C:\A"],
        [r"C:\VC\bin", r"C:\SDK\bin", r"C:\Windows", r"C:\VC\bin", r"C:\SDK\bin"],
        [r"C:\Z", r"C:\Y", r"C:\X", r"C:\X", r"C:\Y", r"C:\Z"],
    ],
)
def test_normalize_keeps_first_occurrence_order(entries: list[str]) -> None:
    """Duplicates should be dropped while earlier entries keep shadowing later ones."""

    normalized = normalize(";".join(entries)).split(";")

    assert normalized == _first_occurrences(entries)
    assert len(normalized) == len(set(normalized))
    assert set(normalized) == set(entries)


def test_normalize_leaves_unique_lists_untouched() -> None:
    """A list without duplicates should round-trip unchanged."""

    value = r"C:\A;C:\B;C:\C"

    assert normalize(value) == value


def test_normalize_honors_custom_separator() -> None:
    """POSIX hosts should split on `:` instead of `;`."""

    assert normalize("/opt/a:/usr/bin:/opt/a:/bin", ":") == "/opt/a:/usr/bin:/bin"


def test_normalize_is_idempotent() -> None:
    """Normalizing twice should equal normalizing once."""

    value = r"C:\A;C:\B;C:\A;C:\C;C:\B"

    assert normalize(normalize(value)) == normalize(value)


@pytest.mark.parametrize("name", ["PATH", "Path", "include", "Lib", "LIBPATH"])
def test_is_path_list_variable_ignores_name_case(name: str) -> None:
    """Path-list membership should be checked case-insensitively."""

    assert is_path_list_variable(name) is True


@pytest.mark.parametrize("name", ["PATHEXT", "VCINSTALLDIR", "LIBRARY"])
def test_is_path_list_variable_rejects_other_names(name: str) -> None:
    """Only the fixed list-valued variables should be normalized."""

    assert is_path_list_variable(name) is False
