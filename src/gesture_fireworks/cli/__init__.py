#!/usr/bin/env python3

"""Command line entry points of the firework show."""


from .common import app
from .run import run_show_cmd  # noqa: F401
from .tools import init_config_cmd, shape_cmd  # noqa: F401


def main() -> None:
    """Entry point for the application."""
    app()


if __name__ == "__main__":
    main()
