"""Configuration model and loaders for devprompt.

Responsibilities:
- Define request settings as a typed dataclass whose unset fields stay `None`.
- Provide deterministic precedence resolution across CLI, YAML, and environment.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `DevPromptConfig`: one layer of request settings.
- `ConfigLoader`: static construction helpers for `DevPromptConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models.datatypes import ToolchainRequest
DEFAULT_ARCH = "x64"
DEFAULT_LOG_LEVEL = "WARNING"

_TRUE_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_TOKENS = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class DevPromptConfig:
    """One configuration layer; `None` means "not set by this layer".

    Attributes:
        arch: Target architecture name or alias.
        sdk: Windows SDK version passed to the configuration script.
        spectre: Whether to use Spectre-mitigated libraries.
        toolset: Compiler toolset version override.
        uwp: Whether to configure for Universal Windows Platform.
        vsversion: Visual Studio year or version number.
        script: Explicit configuration script, bypassing discovery.
        log_level: Loguru level name used when no `-v` flag is given.
    """

    arch: str | None = None
    sdk: str | None = None
    spectre: bool | None = None
    toolset: str | None = None
    uwp: bool | None = None
    vsversion: str | None = None
    script: Path | None = None
    log_level: str | None = None

    def merged_with(self, fallback: DevPromptConfig) -> DevPromptConfig:
        """Return a config taking each unset field from `fallback`."""

        values = {
            item.name: (
                getattr(self, item.name)
                if getattr(self, item.name) is not None
                else getattr(fallback, item.name)
            )
            for item in fields(self)
        }
        return DevPromptConfig(**values)

    def to_request(self) -> ToolchainRequest:
        """Build a normalized toolchain request, applying built-in defaults."""

        return ToolchainRequest.create(
            arch=self.arch or DEFAULT_ARCH,
            vsversion=self.vsversion,
            uwp=bool(self.uwp),
            spectre=bool(self.spectre),
            toolset=self.toolset,
            sdk=self.sdk,
            script=self.script,
        )

    @property
    def effective_log_level(self) -> str:
        """Return the configured log level or the default."""

        return self.log_level or DEFAULT_LOG_LEVEL


def _coerce_setting(value: object, key: str, source_label: str) -> str | None:
    """Return a stripped string setting, or `None` when blank.

    YAML integers are accepted for years such as `vsversion: 2022`. Floats and
    other scalars are rejected because `17.10` would silently load as `17.1`.
    """

    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValueError(
            f"{source_label}: `{key}` must be a string; quote values such as `'17.10'`."
        )
    text = str(value).strip()
    return text or None


def _coerce_flag(value: object, key: str, source_label: str) -> bool | None:
    """Return a feature flag from a boolean or textual token, `None` when blank."""

    if value is None or isinstance(value, bool):
        return value
    token = str(value).strip().lower()
    if not token:
        return None
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    raise ValueError(
        f"{source_label}: `{key}` must be a boolean value "
        "(`true`/`false`, `1`/`0`, `yes`/`no`, `on`/`off`)."
    )


class ConfigLoader:
    """Factory methods for creating `DevPromptConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {"arch", "sdk", "spectre", "toolset", "uwp", "vsversion", "script", "log_level"}
    )
    _STRING_KEYS = ("arch", "sdk", "toolset", "vsversion", "log_level")
    _BOOLEAN_KEYS = ("spectre", "uwp")
    _ENV_PREFIX = "DEVPROMPT_"

    @staticmethod
    def from_cli(
        arch: str | None = None,
        sdk: str | None = None,
        spectre: bool = False,
        toolset: str | None = None,
        uwp: bool = False,
        vsversion: str | None = None,
        script: Path | None = None,
    ) -> DevPromptConfig:
        """Create the command-line layer; flags that were not given stay unset."""

        label = "command line"
        return DevPromptConfig(
            arch=_coerce_setting(arch, "--arch", label),
            sdk=_coerce_setting(sdk, "--sdk", label),
            spectre=True if spectre else None,
            toolset=_coerce_setting(toolset, "--toolset", label),
            uwp=True if uwp else None,
            vsversion=_coerce_setting(vsversion, "--vsversion", label),
            script=script,
        )

    @staticmethod
    def from_yaml(path: Path) -> DevPromptConfig:
        """Create a config layer from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> DevPromptConfig:
        """Create a config layer from `DEVPROMPT_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        label = "environment"
        values: dict[str, Any] = {}
        for key in ConfigLoader._STRING_KEYS:
            name = ConfigLoader._env_key(key)
            values[key] = _coerce_setting(env_map.get(name), name, label)
        for key in ConfigLoader._BOOLEAN_KEYS:
            name = ConfigLoader._env_key(key)
            values[key] = _coerce_flag(env_map.get(name), name, label)
        name = ConfigLoader._env_key("script")
        script = _coerce_setting(env_map.get(name), name, label)
        values["script"] = Path(script) if script is not None else None
        return DevPromptConfig(**values)

    @staticmethod
    def _env_key(key: str) -> str:
        """Return the environment variable name for a config key."""

        return ConfigLoader._ENV_PREFIX + key.upper()

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _build_config_from_mapping(payload: Mapping[str, Any], source_label: str) -> DevPromptConfig:
        """Build a config layer from a mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        values: dict[str, Any] = {}
        for key in ConfigLoader._STRING_KEYS:
            values[key] = _coerce_setting(payload.get(key), key, source_label)
        for key in ConfigLoader._BOOLEAN_KEYS:
            values[key] = _coerce_flag(payload.get(key), key, source_label)
        script = _coerce_setting(payload.get("script"), "script", source_label)
        values["script"] = Path(script) if script is not None else None
        return DevPromptConfig(**values)


def resolve_config(
    cli: DevPromptConfig,
    config_file: DevPromptConfig | None = None,
    env: DevPromptConfig | None = None,
) -> DevPromptConfig:
    """Merge layers with precedence `cli` > `config_file` > `env`."""

    resolved = cli
    if config_file is not None:
        resolved = resolved.merged_with(config_file)
    if env is not None:
        resolved = resolved.merged_with(env)
    return resolved
