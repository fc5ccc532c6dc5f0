import argparse
import logging
import sys
import textwrap
from typing import List
from typing import Optional

from stackprune._errors import StackpruneCommandError
from stackprune._errors import StackpruneError
from stackprune._version import __version__

from . import parse
from . import render
from .protocol import Command

_COMMANDS: List[Command] = [
    render.RenderCommand(),
    parse.ParseCommand(),
]

_EXAMPLES = [
    "$ python3 -m stackprune render -F '/site-packages/' crash.txt",
    "$ RUST_BACKTRACE=1 ./server 2>&1 | stackprune render -N '^std::'",
]

_DESCRIPTION = """\
Print backtraces without the frames you do not care about

Feed `stackprune render` a Python traceback or a native backtrace and give it
patterns for the files and function symbols to hide.

    Example:

    """ + """
    """.join(
    _EXAMPLES
)

_EPILOG = textwrap.dedent(
    """\
    Patterns are Python regular expressions and match anywhere in the file
    path or symbol unless anchored with ^ or $.
    """
)


def get_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=_DESCRIPTION,
        prog="stackprune",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=_EPILOG,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity. Option is additive and can be specified up to 3 times",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=__version__,
        help="Displays the current version of stackprune",
    )

    subparsers = parser.add_subparsers(
        help="Mode of operation",
        dest="command",
        required=True,
    )

    for command in _COMMANDS:
        # Extract the CLI command name from the classes' names
        assert command.__class__.__name__.endswith("Command")
        name = command.__class__.__name__[: -len("Command")].lower()

        command_parser = subparsers.add_parser(
            name, help=command.__doc__, description=command.__doc__, epilog=_EPILOG
        )
        command_parser.set_defaults(entrypoint=command.run)
        command.prepare_parser(command_parser)

    return parser


def determine_logging_level_from_verbosity(
    verbose_level: int,
) -> int:  # pragma: no cover
    if verbose_level == 0:
        return logging.WARNING
    elif verbose_level == 1:
        return logging.INFO
    else:
        return logging.DEBUG


def main(args: Optional[List[str]] = None) -> int:
    if args is None:
        args = sys.argv[1:]

    parser = get_argument_parser()
    arg_values = parser.parse_args(args=args)
    logging.basicConfig(
        level=determine_logging_level_from_verbosity(arg_values.verbose),
        format="%(levelname)s(%(funcName)s): %(message)s",
    )

    try:
        arg_values.entrypoint(arg_values, parser)
    except StackpruneCommandError as e:
        print(e, file=sys.stderr)
        return e.exit_code
    except StackpruneError as e:
        print(e, file=sys.stderr)
        return 1
    else:
        return 0
