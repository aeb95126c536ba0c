"""Module entrypoint for running the client as ``python -m crptapi``."""

from __future__ import annotations

from crptapi.cli import main


if __name__ == "__main__":
    main()
