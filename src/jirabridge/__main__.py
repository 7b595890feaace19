"""Module entrypoint for ``python -m jirabridge``."""

from __future__ import annotations

import sys

from jirabridge.cli import main

if __name__ == "__main__":
    sys.exit(main())
