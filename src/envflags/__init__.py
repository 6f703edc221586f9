"""envflags — per-environment feature flag files and the generated client view."""

__version__ = "0.1.0"


def main() -> None:
    """Entry point for the ``features`` command."""
    import sys

    from envflags.cli.app import run

    sys.exit(run())
