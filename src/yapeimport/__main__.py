"""Entry point for running the importer as a module: python -m yapeimport."""

from __future__ import annotations

from yapeimport.cli import main

if __name__ == "__main__":
    main()
