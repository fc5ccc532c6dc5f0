import sys
import traceback
from textwrap import dedent

import pytest

from stackprune import ParsingFailure
from stackprune.frame_tools import Frame
from stackprune.parsing import parse
from stackprune.parsing import parse_debug_list
from stackprune.parsing import parse_numbered_backtrace
from stackprune.parsing import parse_python_traceback

PYTHON_TRACEBACK = dedent(
    """\
    Traceback (most recent call last):
      File "/srv/app/main.py", line 10, in <module>
        main()
      File "/srv/app/main.py", line 6, in main
        load("config.toml")
      File "/usr/lib/python3.11/pathlib.py", line 1058, in read_text
        with self.open(mode='r', encoding=encoding, errors=errors) as f:
             ^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^^
    FileNotFoundError: [Errno 2] No such file or directory: 'config.toml'
    """
)

CHAINED_TRACEBACK = dedent(
    """\
    Traceback (most recent call last):
      File "/srv/app/db.py", line 3, in connect
        raise OSError("refused")
    OSError: refused

    The above exception was the direct cause of the following exception:

    Traceback (most recent call last):
      File "/srv/app/main.py", line 8, in <module>
        start()
      File "/srv/app/server.py", line 21, in start
        raise RuntimeError("cannot start") from e
    RuntimeError: cannot start
    """
)

NUMBERED_BACKTRACE = dedent(
    """\
    stack backtrace:
       0: std::backtrace::Backtrace::create
                 at /rustc/abc/library/std/src/backtrace.rs:331:13
       1: app::load_config
                 at ./src/config.rs:17:9
       2: __libc_start_main
       3: app::main
                 at ./src/main.rs:5
    """
)


def _raise_and_catch():
    def inner():
        raise ValueError("boom")

    try:
        inner()
    except ValueError as e:
        return e


class TestPythonCaptures:
    def test_traceback_object(self):
        # GIVEN
        error = _raise_and_catch()

        # WHEN
        frames = parse(error.__traceback__)

        # THEN
        assert [frame.function for frame in frames] == ["inner", "_raise_and_catch"]
        assert all(frame.file == __file__ for frame in frames)
        assert all(isinstance(frame.line, int) for frame in frames)

    def test_stack_summary_is_reversed(self):
        # GIVEN
        error = _raise_and_catch()
        summary = traceback.extract_tb(error.__traceback__)

        # WHEN
        frames = parse(summary)

        # THEN
        assert frames[0] == Frame("inner", summary[-1].filename, summary[-1].lineno)
        assert frames[-1].function == summary[0].name

    def test_plain_list_of_frame_summaries(self):
        # GIVEN
        summaries = [
            traceback.FrameSummary("outer.py", 1, "outer", lookup_line=False),
            traceback.FrameSummary("inner.py", 2, "inner", lookup_line=False),
        ]

        # WHEN
        frames = parse(summaries)

        # THEN
        assert frames == [Frame("inner", "inner.py", 2), Frame("outer", "outer.py", 1)]

    def test_traceback_exception(self):
        # GIVEN
        error = _raise_and_catch()

        # WHEN
        frames = parse(traceback.TracebackException.from_exception(error))

        # THEN
        assert [frame.function for frame in frames] == ["inner", "_raise_and_catch"]

    def test_current_stack(self):
        # GIVEN
        summary = traceback.extract_stack()

        # WHEN
        frames = parse(summary)

        # THEN
        assert frames[0].function == "test_current_stack"
        assert len(frames) == len(summary)

    def test_empty_summary(self):
        # GIVEN/WHEN/THEN
        assert parse(traceback.StackSummary()) == []

    @pytest.mark.parametrize("capture", [42, object(), None])
    def test_unsupported_capture(self, capture):
        # GIVEN/WHEN/THEN
        with pytest.raises(ParsingFailure, match="Unsupported capture type"):
            parse(capture)

    def test_bytes_capture(self):
        # GIVEN/WHEN/THEN
        with pytest.raises(ParsingFailure, match="decoded"):
            parse(PYTHON_TRACEBACK.encode())

    def test_sequence_of_other_objects(self):
        # GIVEN/WHEN/THEN
        with pytest.raises(ParsingFailure, match="FrameSummary"):
            parse([("main", "main.py", 1)])


class TestPythonTracebackText:
    def test_frames_are_innermost_first(self):
        # GIVEN/WHEN
        frames = parse(PYTHON_TRACEBACK)

        # THEN
        assert frames == [
            Frame("read_text", "/usr/lib/python3.11/pathlib.py", 1058),
            Frame("main", "/srv/app/main.py", 6),
            Frame("<module>", "/srv/app/main.py", 10),
        ]

    def test_chained_traceback_uses_last_block(self):
        # GIVEN/WHEN
        frames = parse_python_traceback(CHAINED_TRACEBACK)

        # THEN
        assert frames == [
            Frame("start", "/srv/app/server.py", 21),
            Frame("<module>", "/srv/app/main.py", 8),
        ]

    def test_traceback_without_frames(self):
        # GIVEN/WHEN/THEN
        assert parse("Traceback (most recent call last):\nValueError: x\n") == []

    def test_real_traceback(self):
        # GIVEN
        error = _raise_and_catch()
        text = "".join(traceback.format_exception(type(error), error, error.__traceback__))

        # WHEN
        frames = parse(text)

        # THEN
        assert frames == parse(error.__traceback__)

    def test_not_a_python_traceback(self):
        # GIVEN/WHEN/THEN
        with pytest.raises(ParsingFailure):
            parse_python_traceback("hello")


class TestDebugListText:
    def test_entries(self):
        # GIVEN
        text = (
            'Backtrace [{ fn: "app::load", file: "./src/load.rs", line: 3 }, '
            '{ fn: "std::rt::lang_start" }, '
            '{ fn: "app::main", file: "./src/main.rs", line: 12 }]'
        )

        # WHEN
        frames = parse(text)

        # THEN
        assert frames == [
            Frame("app::load", "./src/load.rs", 3),
            Frame("std::rt::lang_start"),
            Frame("app::main", "./src/main.rs", 12),
        ]

    @pytest.mark.parametrize(
        "entry, expected",
        [
            ["{ fn: <unknown> }", Frame("<unknown>")],
            [
                '{ fn: <unknown>, file: "./src/x.rs", line: 4 }',
                Frame("<unknown>", "./src/x.rs", 4),
            ],
            ['{ fn: "app::run" }', Frame("app::run")],
        ],
    )
    def test_unsymbolized_entries(self, entry, expected):
        # GIVEN
        text = f'Backtrace [{entry}, {{ fn: "app::main", file: "app/main.rs", line: 5 }}]'

        # WHEN
        frames = parse(text)

        # THEN
        assert frames == [expected, Frame("app::main", "app/main.rs", 5)]

    def test_trailing_comma(self):
        # GIVEN/WHEN/THEN
        assert parse_debug_list('Backtrace [{ fn: "f" }, ]') == [Frame("f")]

    def test_file_without_line(self):
        # GIVEN/WHEN
        frames = parse_debug_list('Backtrace [{ fn: "f", file: "x.rs" }]')

        # THEN
        assert frames == [Frame("f", "x.rs")]

    def test_escaped_quotes(self):
        # GIVEN/WHEN
        frames = parse_debug_list(r'Backtrace [{ fn: "say\"hi\"", file: "a\\b.rs" }]')

        # THEN
        assert frames == [Frame('say"hi"', "a\\b.rs")]

    def test_empty_backtrace(self):
        # GIVEN/WHEN/THEN
        assert parse("Backtrace []") == []

    @pytest.mark.parametrize("marker", ["<disabled>", "<unsupported>"])
    def test_unavailable_backtrace(self, marker):
        # GIVEN/WHEN/THEN
        with pytest.raises(ParsingFailure, match="holds no frames"):
            parse(marker)

    def test_malformed_entry(self):
        # GIVEN/WHEN/THEN
        with pytest.raises(ParsingFailure, match="Malformed"):
            parse('Backtrace [{ fn: "ok" }, { name: "bad" }]')


class TestNumberedText:
    def test_entries(self):
        # GIVEN/WHEN
        frames = parse(NUMBERED_BACKTRACE)

        # THEN
        assert frames == [
            Frame(
                "std::backtrace::Backtrace::create",
                "/rustc/abc/library/std/src/backtrace.rs",
                331,
            ),
            Frame("app::load_config", "./src/config.rs", 17),
            Frame("__libc_start_main"),
            Frame("app::main", "./src/main.rs", 5),
        ]

    def test_no_entries(self):
        # GIVEN/WHEN/THEN
        with pytest.raises(ParsingFailure):
            parse_numbered_backtrace("nothing to see here")


@pytest.mark.parametrize("text", ["", "   \n", "something went wrong"])
def test_unrecognized_text(text):
    # GIVEN/WHEN/THEN
    with pytest.raises(ParsingFailure, match="Unrecognized"):
        parse(text)


def test_parse_does_not_touch_the_running_stack():
    # GIVEN
    depth = len(traceback.extract_stack())

    # WHEN
    parse(PYTHON_TRACEBACK)

    # THEN
    assert len(traceback.extract_stack()) == depth
    assert sys.exc_info() == (None, None, None)
