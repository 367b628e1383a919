"""Domain exceptions for toolchain discovery, environment capture, and launch diagnostics."""

from __future__ import annotations


class DevPromptError(RuntimeError):
    """Raised when a specific configure or launch stage fails."""

    default_stage = "devprompt"

    def __init__(
        self,
        *,
        detail: str,
        stage: str | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped error."""

        super().__init__(detail)
        self.stage = stage or self.default_stage
        self.detail = detail
        self.hint = hint


class ConfigurationError(DevPromptError):
    """Raised when a required base environment variable or config value is missing."""

    default_stage = "config"


class DiscoveryFailure(DevPromptError):
    """Raised when no toolchain installation candidate resolves to a script."""

    default_stage = "locate"


class InvocationFailure(DevPromptError):
    """Raised when the host shell or the target program cannot be spawned."""

    default_stage = "capture"


class MalformedOutput(DevPromptError):
    """Raised when the captured transcript does not follow the three-stage protocol."""

    default_stage = "capture"


class ToolchainUsageError(DevPromptError):
    """Raised when the configuration script reports a usage error despite succeeding."""

    default_stage = "capture"


class ChildWaitFailure(DevPromptError):
    """Raised when the launched child's status cannot be obtained."""

    default_stage = "wait"
