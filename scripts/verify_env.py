"""Verify developer environment prerequisites before building the desktop app."""
from __future__ import annotations

import sys

from preflight_cli.app import app


def main() -> None:
    app(["check", *sys.argv[1:]], prog_name="verify_env")


if __name__ == "__main__":
    main()
