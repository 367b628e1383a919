"""Environment snapshot differ.

Responsibilities:
- Run a configuration script inside one host shell invocation, capturing the
  environment before and after it.
- Compute the minimal set of variables the script added or changed, with
  path-list variables deduplicated before comparison.

Key public functions:
- `capture_transcript`: run the composite script and split its output.
- `compute_diff`: compare two snapshots.
- `run_and_diff`: both of the above plus usage-error detection.
"""

from __future__ import annotations

from pathlib import Path
import tempfile
from typing import Mapping, Sequence

from loguru import logger

from ..errors import InvocationFailure
from ..models.datatypes import EnvironmentDiff, EnvironmentSnapshot, Transcript
from ..runtime_tools import CommandRunner, run_captured
from .pathlist import is_path_list_variable, normalize
from .shells import HostShell
from .transcript import check_usage_errors, parse_environment_block, split_transcript


def _values_match(old_value: str | None, new_value: str) -> bool:
    """Compare values ignoring case, tolerating casing quirks of configuration scripts."""

    return old_value is not None and old_value.casefold() == new_value.casefold()


def compute_diff(
    before: EnvironmentSnapshot,
    after: EnvironmentSnapshot,
    list_separator: str = ";",
) -> EnvironmentDiff:
    """Return variables absent from `before` or whose value changed.

    Path-list variables are deduplicated; an entry whose deduplicated value
    already equals the old value is dropped, which keeps repeated runs idempotent.
    """

    changes: dict[str, str] = {}
    for name, new_value in after.items():
        old_value = before.get(name)
        if _values_match(old_value, new_value):
            continue
        if is_path_list_variable(name):
            new_value = normalize(new_value, list_separator)
            if _values_match(old_value, new_value):
                continue
        changes[name] = new_value
    return EnvironmentDiff(changes=changes)


def capture_transcript(
    script_path: Path,
    script_arguments: Sequence[str],
    shell: HostShell,
    runner: CommandRunner = run_captured,
    env: Mapping[str, str] | None = None,
) -> Transcript:
    """Run the composite dump/run/dump script and split its stdout into stages."""

    invocation = shell.render_invocation(script_path, script_arguments)
    logger.debug("Configuration script command line: {}", invocation)

    with tempfile.TemporaryDirectory(prefix="devprompt-") as scratch_dir:
        composite_path = Path(scratch_dir) / f"capture{shell.script_suffix}"
        composite = shell.render_composite(invocation)
        composite_path.write_text(composite, encoding="utf-8", newline="")
        logger.debug("{} composite script: {!r}", shell.name, composite)

        command = shell.command(composite_path)
        try:
            result = runner(command, env)
        except OSError as exc:
            raise InvocationFailure(
                detail=f"Unable to run `{' '.join(command)}`: {exc}",
                hint=f"Verify `{shell.name}` is available on this host.",
            ) from exc

    stderr_text = result.stderr.decode(shell.encoding, errors="replace") if result.stderr else ""
    logger.debug("Shell exit status: {}", result.returncode)
    logger.debug("Shell output:\n{}", result.stdout.decode(shell.encoding, errors="replace"))
    if stderr_text:
        logger.debug("Shell error output:\n{}", stderr_text)

    return split_transcript(result.stdout, encoding=shell.encoding, stderr_text=stderr_text)


def run_and_diff(
    script_path: Path,
    script_arguments: Sequence[str],
    shell: HostShell,
    runner: CommandRunner = run_captured,
    env: Mapping[str, str] | None = None,
) -> EnvironmentDiff:
    """Run a configuration script and return the environment changes it made."""

    transcript = capture_transcript(
        script_path,
        script_arguments,
        shell=shell,
        runner=runner,
        env=env,
    )
    check_usage_errors(transcript.script_output)

    before = EnvironmentSnapshot(
        parse_environment_block(transcript.before, shell.record_separator),
        case_insensitive_names=shell.case_insensitive_names,
    )
    after = EnvironmentSnapshot(
        parse_environment_block(transcript.after, shell.record_separator),
        case_insensitive_names=shell.case_insensitive_names,
    )
    diff = compute_diff(before, after, list_separator=shell.list_separator)
    logger.debug("Environment changes: {}", ", ".join(name for name, _ in diff.items()) or "none")
    return diff
