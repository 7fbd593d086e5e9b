"""Module entrypoint for running chaptersplit as ``python -m chaptersplit``."""

from __future__ import annotations

from chaptersplit.cli import main


if __name__ == "__main__":
    main()
