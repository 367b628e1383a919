"""Core datatypes shared across devprompt modules.

Responsibilities:
- Represent immutable records exchanged between configure stages.
- Keep every upstream stage a pure function of these values; only the launcher
  touches live process state.

Key types:
- `ToolchainRequest`, `InstallRoots`, `InstallationCandidate`,
  `EnvironmentSnapshot`, `EnvironmentDiff`, `Transcript`, and `ConfigureResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Mapping

from ..errors import ConfigurationError

PROGRAM_FILES_X86_KEY = "ProgramFiles(x86)"
PROGRAM_FILES_KEY = "ProgramFiles"

_ARCH_ALIASES = {
    "win32": "x86",
    "win64": "x64",
    "x86_64": "x64",
    "x86-64": "x64",
}


def normalize_arch(arch: str) -> str:
    """Lowercase an architecture name and map well-known aliases to canonical names."""

    lowered = arch.strip().lower()
    return _ARCH_ALIASES.get(lowered, lowered)


@dataclass(frozen=True, slots=True)
class ToolchainRequest:
    """User request describing which toolchain environment to configure.

    Attributes:
        arch: Canonical target architecture (already alias-normalized).
        vsversion: Optional year (`2022`) or dotted version (`17.0`) selector.
        uwp: Whether to configure for Universal Windows Platform.
        spectre: Whether to link Spectre-mitigated libraries.
        toolset: Optional compiler toolset version override.
        sdk: Optional Windows SDK version, passed verbatim.
        script: Optional explicit configuration script, bypassing discovery.
    """

    arch: str = "x64"
    vsversion: str | None = None
    uwp: bool = False
    spectre: bool = False
    toolset: str | None = None
    sdk: str | None = None
    script: Path | None = None

    @classmethod
    def create(
        cls,
        arch: str = "x64",
        vsversion: str | None = None,
        uwp: bool = False,
        spectre: bool = False,
        toolset: str | None = None,
        sdk: str | None = None,
        script: Path | None = None,
    ) -> ToolchainRequest:
        """Build a request from raw user input, normalizing the architecture name."""

        return cls(
            arch=normalize_arch(arch),
            vsversion=vsversion,
            uwp=uwp,
            spectre=spectre,
            toolset=toolset,
            sdk=sdk,
            script=script,
        )

    def script_arguments(self) -> list[str]:
        """Return positional configuration-script arguments in their fixed order."""

        arguments = [self.arch]
        if self.uwp:
            arguments.append("uwp")
        if self.sdk is not None:
            arguments.append(self.sdk)
        if self.toolset is not None:
            arguments.append(f"-vcvars_ver={self.toolset}")
        if self.spectre:
            arguments.append("-vcvars_spectre_libs=spectre")
        return arguments


@dataclass(frozen=True, slots=True)
class InstallRoots:
    """Program-files base directories used as installation search roots."""

    program_files_x86: Path
    program_files: Path

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> InstallRoots:
        """Read both program-files roots, failing when either variable is missing."""

        return cls(
            program_files_x86=_required_env_path(env, PROGRAM_FILES_X86_KEY),
            program_files=_required_env_path(env, PROGRAM_FILES_KEY),
        )

    @property
    def search_bases(self) -> list[Path]:
        """Return distinct base directories, 32-bit root first."""

        bases = [self.program_files_x86]
        if self.program_files != self.program_files_x86:
            bases.append(self.program_files)
        return bases

    @property
    def locator_directory(self) -> Path:
        """Return the standard directory holding the installation locator tool."""

        return self.program_files_x86 / "Microsoft Visual Studio" / "Installer"


def _required_env_path(env: Mapping[str, str], key: str) -> Path:
    value = env.get(key)
    if value is None or not value.strip():
        raise ConfigurationError(
            detail=f"The environment variable {key} isn't set or is invalid.",
            hint="Run on a Windows host or pass `--script <path>` explicitly.",
        )
    return Path(value.strip())


@dataclass(frozen=True, slots=True)
class InstallationCandidate:
    """A location believed to contain the configuration script.

    Attributes:
        root: Installation root directory.
        script_relpath: Script location relative to `root`.
        source: Discovery strategy that produced the candidate
            (`vswhere`, `standard`, `legacy`, or `explicit`).
    """

    root: Path
    script_relpath: Path
    source: str

    @property
    def script_path(self) -> Path:
        """Return the joined (not yet canonicalized) script path."""

        return self.root / self.script_relpath


@dataclass(frozen=True, slots=True)
class EnvironmentSnapshot:
    """Ordered environment variable mapping captured at one point in time.

    Names are stored exactly as printed. `case_insensitive_names` controls lookups
    only, mirroring hosts whose environment ignores name case.
    """

    variables: Mapping[str, str] = field(default_factory=dict)
    case_insensitive_names: bool = False
    _lookup: dict[str, str] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        if self.case_insensitive_names:
            folded = {name.upper(): value for name, value in self.variables.items()}
        else:
            folded = dict(self.variables)
        object.__setattr__(self, "_lookup", folded)

    def get(self, name: str) -> str | None:
        """Return a variable value honoring the snapshot's name-case policy."""

        key = name.upper() if self.case_insensitive_names else name
        return self._lookup.get(key)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __len__(self) -> int:
        return len(self.variables)

    def items(self) -> Iterator[tuple[str, str]]:
        """Iterate variables in captured order."""

        return iter(self.variables.items())


@dataclass(frozen=True, slots=True)
class EnvironmentDiff:
    """Variables the configuration script added or changed, ready to apply."""

    changes: Mapping[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.changes)

    def __bool__(self) -> bool:
        return bool(self.changes)

    def items(self) -> Iterator[tuple[str, str]]:
        """Iterate changed variables."""

        return iter(self.changes.items())


@dataclass(frozen=True, slots=True)
class Transcript:
    """The three decoded stages captured from one host shell run."""

    before: str
    script_output: str
    after: str


@dataclass(frozen=True, slots=True)
class ConfigureResult:
    """Outcome of the configure phase for one request."""

    request: ToolchainRequest
    script_path: Path
    diff: EnvironmentDiff
