"""Command-line entry point.

Adding a flag::

    features -f MyFlagName -e TFF* -a

Removing a flag::

    features -f MyFlagName -r

Changing the flag state::

    features -f MyFlagName -e *F** -s true|false

The ``-e`` mask has one character per environment (dev, test, prod, then a
reserved slot): ``T`` sets the flag true, ``F`` sets it false and ``*``
leaves it unchanged.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from envflags import __version__
from envflags.core.config import MASK_LENGTH, ToolConfig
from envflags.core.dispatcher import Dispatcher, FlagCommand, OperationResult
from envflags.core.errors import FeatureFlagError, InvalidMaskError
from envflags.core.identity import StaticIdentityProvider
from envflags.core.reconcile import validate_mask

logger = logging.getLogger(__name__)

_TRUE = {"true", "t", "yes", "y", "1", "on"}
_FALSE = {"false", "f", "no", "n", "0", "off"}


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _mask(value: str) -> str:
    try:
        return validate_mask(value)
    except InvalidMaskError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _boolean(value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="features",
        description="Manage per-environment feature flags and regenerate the client view.",
    )
    parser.add_argument("-f", "--flag", help="flag name (required for -a, -r and -s)")
    parser.add_argument(
        "-e",
        "--environments",
        dest="mask",
        type=_mask,
        metavar="MASK",
        help=f"{MASK_LENGTH}-character state mask for dev|test|prod: T, F or * (default T***)",
    )

    commands = parser.add_argument_group("commands")
    commands.add_argument("-a", "--add", action="store_true", help="add the flag")
    commands.add_argument("-r", "--remove", action="store_true", help="remove the flag")
    commands.add_argument(
        "-s",
        "--set",
        nargs="?",
        const=True,
        default=None,
        type=_boolean,
        metavar="BOOL",
        help="set the state of an existing flag (default true)",
    )
    commands.add_argument("-l", "--list", action="store_true", help="list flags per environment")
    commands.add_argument("-g", "--generate", action="store_true", help="regenerate the view file only")

    parser.add_argument("--root", type=Path, default=None, help="project directory (default: cwd)")
    parser.add_argument("--template", type=Path, default=None, help="view template file")
    parser.add_argument("--output", type=Path, default=None, help="generated view file")
    parser.add_argument("--user", default=None, help="identity to record instead of git user.name")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only log warnings and errors")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)


def _build_config(args: argparse.Namespace) -> ToolConfig:
    kwargs = {}
    if args.root is not None:
        kwargs["root"] = args.root.resolve()
    if args.template is not None:
        kwargs["template_path"] = args.template.resolve()
    if args.output is not None:
        kwargs["output_path"] = args.output.resolve()
    return ToolConfig(**kwargs)


def _print_table(table: dict[str, dict[str, bool | None]], environments: tuple[str, ...]) -> None:
    if not table:
        print("No flags defined")
        return

    width = max(len("flag"), *(len(name) for name in table))
    print("  ".join(["flag".ljust(width), *(env.ljust(5) for env in environments)]).rstrip())
    for name, row in table.items():
        cells = ["-" if row[env] is None else str(row[env]).lower() for env in environments]
        print("  ".join([name.ljust(width), *(cell.ljust(5) for cell in cells)]).rstrip())


def _report(result: OperationResult) -> None:
    for env, outcome in result.outcomes.items():
        logger.debug(f"{result.command} {result.flag}: {env} {outcome.value}")


def run(argv: list[str] | None = None) -> int:
    """Parse ``argv`` and run one command.

    Returns:
        Process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    wants_command = args.add or args.remove or args.set is not None
    if wants_command and not args.flag:
        parser.error("-f FLAG is required for -a, -r and -s")
    if wants_command and args.list:
        parser.error("-l cannot be combined with -a, -r or -s")

    config = _build_config(args)
    identity = StaticIdentityProvider(args.user) if args.user else None
    dispatcher = Dispatcher(config, identity=identity)

    try:
        if args.list:
            _print_table(dispatcher.list_flags(), config.environments)
            return 0

        if args.generate and not wants_command:
            return 0 if asyncio.run(dispatcher.generate_view()) else 1

        options = FlagCommand(
            flag=args.flag or "",
            mask=args.mask,
            add=args.add,
            remove=args.remove,
            set=args.set is not None,
            set_value=bool(args.set) if args.set is not None else True,
        )
        result = asyncio.run(dispatcher.dispatch(options))
    except FeatureFlagError as e:
        print(str(e), file=sys.stderr)
        return 1

    if result is None:
        parser.print_usage(sys.stderr)
        return 1

    _report(result)
    return 0 if result.ok else 1
