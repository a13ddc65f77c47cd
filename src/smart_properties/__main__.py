"""Module entrypoint for ``python -m smart_properties``."""

from __future__ import annotations

from smart_properties.cli import cli_entrypoint

if __name__ == "__main__":
    cli_entrypoint()
