"""Module entrypoint for running devprompt as ``python -m devprompt``."""

from __future__ import annotations

from devprompt.cli import main


if __name__ == "__main__":
    main()
