"""Top-level package for devprompt.

devprompt discovers a native toolchain's environment-configuration script, runs
it, and launches a program with only the variables that script changed. The
configure phase entry point is `DevPromptPipeline`; the launch phase is `launch`.
"""

__version__ = "0.1.0"

from .launcher import launch
from .pipeline import DevPromptPipeline

__all__ = ["DevPromptPipeline", "__version__", "launch"]
