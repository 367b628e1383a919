"""Three-stage transcript protocol.

A capture run prints the environment, runs the configuration script, and prints
the environment again, with a form feed between stages. This module splits that
output, checks the script's own output for usage errors, and parses the
environment dumps.
"""

from __future__ import annotations

from ..errors import MalformedOutput, ToolchainUsageError
from ..models.datatypes import Transcript

STAGE_DELIMITER = b"\x0c"
ERROR_MARKER = "[ERROR"
BENIGN_USAGE_LINE = "Error in script usage. the correct usage is:"


def split_transcript(raw: bytes, encoding: str = "utf-8", stderr_text: str = "") -> Transcript:
    """Split raw shell stdout into exactly three decoded stages.

    The split happens on bytes before decoding so a lossy decode cannot disturb
    the delimiter.

    Raises:
        MalformedOutput: If the output does not contain exactly three stages.
    """

    parts = raw.split(STAGE_DELIMITER)
    if len(parts) != 3:
        detail = f"Couldn't split the output into pages: expected 3 stages, found {len(parts)}."
        if stderr_text.strip():
            detail = f"{detail}\n{stderr_text.strip()}"
        raise MalformedOutput(
            detail=detail,
            hint="Run with `-vv` to see the raw shell output.",
        )
    before, script_output, after = (part.decode(encoding, errors="replace") for part in parts)
    return Transcript(before=before, script_output=script_output, after=after)


def find_usage_errors(script_output: str) -> list[str]:
    """Return error-marked lines of the script output, skipping the benign usage banner."""

    return [
        line.rstrip("\r")
        for line in script_output.split("\n")
        if ERROR_MARKER in line and BENIGN_USAGE_LINE not in line
    ]


def check_usage_errors(script_output: str) -> None:
    """Fail when the configuration script reported errors despite a success exit status."""

    errors = find_usage_errors(script_output)
    if errors:
        raise ToolchainUsageError(
            detail="Invalid parameters\n" + "\n".join(errors),
            hint="Check `--arch`, `--sdk`, `--toolset`, and `--uwp` against the installed toolchain.",
        )


def _split_first(line: str, separator: str = "=") -> tuple[str, str] | None:
    """Split a line on the first separator, returning `None` when it is absent."""

    name, found, value = line.partition(separator)
    if not found:
        return None
    return name, value


def parse_environment_block(text: str, record_separator: str = "\n") -> dict[str, str]:
    """Parse `name=value` records in order, skipping banner lines without `=`.

    Records end with `record_separator`: a newline for `set` output (a trailing
    carriage return is dropped), NUL for `env -0` output, whose values may span
    several lines.

    Raises:
        MalformedOutput: If a `=`-containing line has an empty variable name.
    """

    variables: dict[str, str] = {}
    for record in text.split(record_separator):
        line = record.rstrip("\r") if record_separator == "\n" else record
        pair = _split_first(line)
        if pair is None:
            continue
        name, value = pair
        if not name:
            raise MalformedOutput(detail=f"Invalid key=value in shell output: {line}")
        variables[name] = value
    return variables
