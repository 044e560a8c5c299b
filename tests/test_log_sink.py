"""Tests for domstack.core.log_sink — console and in-memory sinks."""
import io
import re

from domstack.core.log_sink import ConsoleLogSink, ListLogSink, level_rank

_LINE_RE = re.compile(r"^\[\d\d:\d\d:\d\d\.\d{3}\] \[(\w+)\s*\] (.*)$")


class TestLevelRank:
    def test_order(self):
        assert level_rank("DEBUG") < level_rank("INFO") < level_rank("WARNING") < level_rank("ERROR")

    def test_case_insensitive(self):
        assert level_rank("info") == level_rank("INFO")

    def test_unknown_level_always_shown(self):
        assert level_rank("SUCCESS") > level_rank("ERROR")


class TestConsoleLogSink:
    def test_format(self):
        out = io.StringIO()
        ConsoleLogSink(out)("INFO", "LOG(b) => 4")
        m = _LINE_RE.match(out.getvalue().rstrip("\n"))
        assert m is not None
        assert m.group(1) == "INFO"
        assert m.group(2) == "LOG(b) => 4"

    def test_min_level(self):
        out = io.StringIO()
        sink = ConsoleLogSink(out, min_level="WARNING")
        sink("DEBUG", "hidden")
        sink("INFO", "hidden")
        sink("WARNING", "shown")
        sink("ERROR", "shown too")
        lines = out.getvalue().splitlines()
        assert len(lines) == 2
        assert all("shown" in line for line in lines)

    def test_no_color_when_not_a_tty(self):
        out = io.StringIO()
        ConsoleLogSink(out, color="auto")("ERROR", "boom")
        assert "\033[" not in out.getvalue()

    def test_color_always(self):
        out = io.StringIO()
        ConsoleLogSink(out, color="always")("ERROR", "boom")
        assert "\033[31m" in out.getvalue()

    def test_color_never(self):
        out = io.StringIO()
        ConsoleLogSink(out, color="never")("ERROR", "boom")
        assert "\033[" not in out.getvalue()


class TestListLogSink:
    def test_collects(self):
        sink = ListLogSink()
        sink("info", "a")
        sink("WARNING", "b")
        assert sink.entries == [("INFO", "a"), ("WARNING", "b")]
        assert sink.messages() == ["a", "b"]
        assert sink.messages("warning") == ["b"]

    def test_clear(self):
        sink = ListLogSink()
        sink("INFO", "a")
        sink.clear()
        assert sink.entries == []
