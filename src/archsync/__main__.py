"""Module entrypoint for ``python -m archsync``."""

from __future__ import annotations

import sys

from archsync.cli import main

if __name__ == "__main__":
    sys.exit(main())
