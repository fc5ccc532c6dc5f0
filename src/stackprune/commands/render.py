import argparse
import logging
import sys
from contextlib import ExitStack

from stackprune._errors import StackpruneCommandError
from stackprune.commands.common import add_filter_arguments
from stackprune.commands.common import add_input_argument
from stackprune.commands.common import build_blocklists
from stackprune.commands.common import read_capture
from stackprune.frame_tools import filter_frames
from stackprune.parsing import parse
from stackprune.reporters import BaseReporter
from stackprune.reporters.text import TextReporter

logger = logging.getLogger(__name__)


class RenderCommand:
    """Print a backtrace without the frames matched by the given patterns"""

    def prepare_parser(self, parser: argparse.ArgumentParser) -> None:
        add_input_argument(parser)
        add_filter_arguments(parser)
        parser.add_argument(
            "-o",
            "--output",
            help="Write the filtered backtrace to this file instead of stdout",
        )
        color_group = parser.add_mutually_exclusive_group()
        color_group.add_argument(
            "--color",
            dest="color",
            action="store_const",
            const=True,
            default=None,
            help="Always highlight function symbols",
        )
        color_group.add_argument(
            "--no-color",
            dest="color",
            action="store_const",
            const=False,
            help="Never highlight function symbols",
        )

    def run(self, args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
        name_blocklist, file_blocklist = build_blocklists(args)
        frames = parse(read_capture(args.input))
        kept = filter_frames(frames, name_blocklist, file_blocklist)
        logger.info("Keeping %d of %d frames", len(kept), len(frames))

        reporter: BaseReporter = TextReporter(color=args.color)
        with ExitStack() as stack:
            if args.output is None:
                outfile = sys.stdout
            else:
                try:
                    outfile = stack.enter_context(
                        open(args.output, "w", encoding="utf-8")
                    )
                except OSError as e:
                    raise StackpruneCommandError(
                        f"Could not create output file {args.output}: {e}",
                        exit_code=1,
                    )
            reporter.render(kept, outfile)
