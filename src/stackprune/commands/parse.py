import argparse
import sys

from stackprune._errors import StackpruneCommandError
from stackprune.commands.common import add_filter_arguments
from stackprune.commands.common import add_input_argument
from stackprune.commands.common import build_blocklists
from stackprune.commands.common import read_capture
from stackprune.frame_tools import filter_frames
from stackprune.parsing import parse
from stackprune.reporters import BaseReporter
from stackprune.reporters.jsonl import JsonLinesReporter


class ParseCommand:
    """Debug a backtrace by parsing it and printing each frame as JSON"""

    def prepare_parser(self, parser: argparse.ArgumentParser) -> None:
        add_input_argument(parser)
        add_filter_arguments(parser)

    def run(self, args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
        if sys.stdout.isatty():
            raise StackpruneCommandError(
                "You must redirect stdout to a file or shell pipeline.",
                exit_code=1,
            )

        name_blocklist, file_blocklist = build_blocklists(args)
        frames = filter_frames(
            parse(read_capture(args.input)), name_blocklist, file_blocklist
        )
        reporter: BaseReporter = JsonLinesReporter()
        reporter.render(frames, sys.stdout)
