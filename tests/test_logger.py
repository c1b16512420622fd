"""
Tests for the leveled logger.

Covers:
- Lvl, Level and LevelRegistry
- Message variants, sequence ids, caller capture
- Text, JSON and YAML formatters
- Sinks (stream, file, buffer)
- Worker threshold, color and failure handling
- Logger facade, default logger and module-level functions
"""

import io
import json
import os
import stat
import sys
import threading
from datetime import datetime, timezone

import pytest
import yaml

from msgkit.logger import (
    BufferSink,
    ConfigurationError,
    FileSink,
    Logger,
    LoggerPanic,
    Lvl,
    Message,
    MessageKind,
    Record,
    Sink,
    StreamSink,
    TextFormatter,
    Worker,
    open_output,
    sprintf,
)
from msgkit.logger import core as log_module
from msgkit.logger.formats import TIME_FORMATS, CompiledFormat, compile_format, format_time
from msgkit.logger.formatters import JsonFormatter, YamlFormatter, record_document
from msgkit.logger.levels import LEVEL_DEFAULT, LevelRegistry
from msgkit.logger.records import SequenceCounter, UNKNOWN_FILE, caller

RFC3339 = TIME_FORMATS["rfc3339"]


@pytest.fixture(autouse=True)
def reset_logger():
    """Reset the default logger before and after each test."""
    Logger.reset_default()
    yield
    Logger.reset_default()


def make_record(level=Lvl.INFO, message="hi", **kwargs):
    fields = dict(
        id=1,
        time="2026-10-17T09:30:00+00:00",
        module="svc",
        filename="app.py",
        line=12,
        level=int(level),
        message=Message.of(message),
        emoji="",
    )
    fields.update(kwargs)
    return Record(**fields)


def buffered_logger(fmt="plain", level=Lvl.DEBUG, **kwargs):
    sink = BufferSink()
    log = Logger(
        "svc", format=fmt, level=level, color=False, sink=sink,
        levels=kwargs.pop("levels", LevelRegistry.with_defaults()),
        sequence=kwargs.pop("sequence", SequenceCounter()),
        **kwargs,
    )
    return log, sink


# ═══════════════════════════════════════════════════════════════════
#  Levels
# ═══════════════════════════════════════════════════════════════════

class TestLvl:
    def test_lower_rank_is_more_severe(self):
        assert Lvl.CRITICAL < Lvl.ERROR < Lvl.WARNING < Lvl.NOTICE < Lvl.INFO < Lvl.DEBUG
        assert int(Lvl.CRITICAL) == 0
        assert int(Lvl.DEBUG) == 5

    def test_default_threshold_is_notice(self):
        assert LEVEL_DEFAULT is Lvl.NOTICE

    def test_from_name_case_insensitive(self):
        assert Lvl.from_name("warning") is Lvl.WARNING
        assert Lvl.from_name("Debug") is Lvl.DEBUG

    def test_from_name_invalid(self):
        with pytest.raises(ConfigurationError, match="Unknown log level"):
            Lvl.from_name("loud")


class TestLevelRegistry:
    def test_builtin_levels(self):
        levels = LevelRegistry.with_defaults()
        assert levels.ranks == [0, 1, 2, 3, 4, 5]
        warn = levels.get(Lvl.WARNING)
        assert warn.name == "WARN"
        assert warn.color == "Yellow"
        assert warn.escape == "\033[33m"
        assert warn.emoji == "\U0001F624"
        assert levels.get(Lvl.CRITICAL).name == "FATAL"
        assert levels.get(Lvl.NOTICE).emoji == "\U0001F604"

    def test_ranks_unique_and_stable(self):
        levels = LevelRegistry.with_defaults()
        before = [(lvl.rank, lvl.name) for lvl in levels]
        levels.register(8, "TRACE", "Blue", 128064)
        after = [(lvl.rank, lvl.name) for lvl in levels]
        assert after[:6] == before
        assert len({rank for rank, _ in after}) == len(after)

    @pytest.mark.parametrize("rank", [0, 3, 5, 6, 7])
    def test_reserved_rank_rejected(self, rank):
        levels = LevelRegistry.with_defaults()
        with pytest.raises(ConfigurationError, match="reserved"):
            levels.register(rank, "MINE", "Blue", 128064)
        assert levels.get(Lvl.ERROR).name == "ERROR"

    def test_non_int_rank_rejected(self):
        levels = LevelRegistry.with_defaults()
        with pytest.raises(ConfigurationError):
            levels.register("9", "MINE", "Blue", 128064)
        with pytest.raises(ConfigurationError):
            levels.register(True, "MINE", "Blue", 128064)

    def test_custom_level(self):
        levels = LevelRegistry.with_defaults()
        trace = levels.register(8, "TRACE", "Blue", 128064)
        assert trace.escape == "\033[34m"
        assert levels.get(8) is trace
        assert 8 in levels
        assert len(levels) == 7

    def test_unknown_color_falls_back_to_red(self):
        levels = LevelRegistry.with_defaults()
        assert levels.register(9, "ODD", "Chartreuse", 128064).escape == "\033[31m"

    def test_unknown_rank_renders_as_number(self):
        level = LevelRegistry.with_defaults().get(42)
        assert level.name == "42"
        assert level.escape == ""

    def test_validate(self):
        levels = LevelRegistry.with_defaults()
        assert levels.validate(4) == 4
        with pytest.raises(ConfigurationError, match="Invalid level 6"):
            levels.validate(6)

    def test_resolve(self):
        levels = LevelRegistry.with_defaults()
        levels.register(8, "TRACE", "Blue", 128064)
        assert levels.resolve(2) == 2
        assert levels.resolve("4") == 4
        assert levels.resolve("warn") == 2
        assert levels.resolve("warning") == 2
        assert levels.resolve("trace") == 8
        with pytest.raises(ConfigurationError):
            levels.resolve("shout")
        with pytest.raises(ConfigurationError):
            levels.resolve(None)


# ═══════════════════════════════════════════════════════════════════
#  Records
# ═══════════════════════════════════════════════════════════════════

class TestMessage:
    def test_kinds(self):
        assert Message.of("x").kind is MessageKind.TEXT
        assert Message.of(b"x").kind is MessageKind.BYTES
        assert Message.of({"a": 1}).kind is MessageKind.STRUCTURED
        assert Message.of(42).kind is MessageKind.STRUCTURED

    def test_text(self):
        assert Message.of("hi").text == "hi"
        assert Message.of(b"caf\xc3\xa9").text == "café"
        assert Message.of(b"\xff").text == "\ufffd"
        assert Message.of([1, 2]).text == "[1, 2]"

    def test_of_is_idempotent(self):
        msg = Message.of("x")
        assert Message.of(msg) is msg


class TestSequenceCounter:
    def test_starts_at_one_and_increments(self):
        seq = SequenceCounter()
        assert [seq.next() for _ in range(3)] == [1, 2, 3]

    def test_concurrent_ids_unique(self):
        seq = SequenceCounter()
        ids = []
        lock = threading.Lock()

        def take():
            got = [seq.next() for _ in range(500)]
            with lock:
                ids.extend(got)

        threads = [threading.Thread(target=take) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert sorted(ids) == list(range(1, 4001))


class TestCaller:
    def test_reports_this_file(self):
        filename, line = caller(0)
        assert filename == "test_logger.py"
        assert line == sys._getframe().f_lineno - 2

    def test_too_deep(self):
        assert caller(10_000) == (UNKNOWN_FILE, 0)


# ═══════════════════════════════════════════════════════════════════
#  Formatters
# ═══════════════════════════════════════════════════════════════════

class TestTextFormatter:
    def test_level_and_message_only(self):
        levels = LevelRegistry.with_defaults()
        compiled = compile_format("%{level} %{message}", RFC3339)
        out = TextFormatter(compiled, levels).format(make_record(Lvl.WARNING, "hi"))
        assert out == "WARN hi"
        assert "%!" not in out

    def test_extra_args_marker_stripped(self):
        levels = LevelRegistry.with_defaults()
        compiled = CompiledFormat("{6}%!(EXTRA string=x)", RFC3339)
        out = TextFormatter(compiled, levels).format(make_record(message="hi"))
        assert out == "hi"

    def test_rfc822_round_trip(self):
        levels = LevelRegistry.with_defaults()
        compiled = compile_format("%{id} %{time:rfc822} %{module} %{level} %{message}", RFC3339)
        moment = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)
        record = make_record(
            Lvl.INFO, "ok", id=7, module="svc",
            time=format_time(moment, compiled.time_layout),
        )
        out = TextFormatter(compiled, levels).format(record)
        assert "\n" not in out
        assert out == "7 17 Oct 26 09:30 UTC svc INFO ok"

    def test_std_layout(self):
        levels = LevelRegistry.with_defaults()
        compiled = CompiledFormat("#{0}|{1}|{3}:{4}:{2}\t{5:.5}\t{6}", RFC3339)
        out = TextFormatter(compiled, levels).format(make_record(Lvl.NOTICE, "up"))
        assert out == "#1|2026-10-17T09:30:00+00:00|app.py:12:svc\tNOTIC\tup"

    def test_bogus_placeholder_renders_empty(self):
        levels = LevelRegistry.with_defaults()
        compiled = compile_format("%{message} %{bogus}", RFC3339)
        assert TextFormatter(compiled, levels).format(make_record(message="hi")) == "hi "

    def test_short_level_and_emoji(self):
        levels = LevelRegistry.with_defaults()
        compiled = compile_format("%{emoji} %{lvl}", RFC3339)
        record = make_record(Lvl.ERROR, emoji=levels.get(Lvl.ERROR).emoji)
        assert TextFormatter(compiled, levels).format(record) == "\U0001F621 ERR"

    def test_bad_template_raises_render_error(self):
        from msgkit.logger import RenderError

        compiled = CompiledFormat("{9}", RFC3339)
        with pytest.raises(RenderError, match="cannot render format"):
            TextFormatter(compiled, LevelRegistry.with_defaults()).format(make_record())


class TestJsonFormatter:
    def test_json_message_nested(self):
        out = JsonFormatter().format(make_record(message='{"a":1}'))
        doc = json.loads(out)
        assert doc["message"] == {"a": 1}

    def test_plain_message_stays_string(self):
        doc = json.loads(JsonFormatter().format(make_record(message="not json")))
        assert doc["message"] == "not json"

    def test_bytes_message_reparsed(self):
        doc = json.loads(JsonFormatter().format(make_record(message=b'[1, 2]')))
        assert doc["message"] == [1, 2]

    def test_structured_message_embedded(self):
        doc = json.loads(JsonFormatter().format(make_record(message={"k": ["v"]})))
        assert doc["message"] == {"k": ["v"]}

    def test_document_fields(self):
        doc = json.loads(JsonFormatter().format(make_record(Lvl.ERROR, "x", id=3)))
        assert list(doc) == ["id", "time", "module", "level", "line", "filename", "message"]
        assert doc["id"] == 3
        assert doc["level"] == 1
        assert doc["filename"] == "app.py"

    def test_empty_location_omitted(self):
        doc = record_document(make_record(filename="", line=0))
        assert "line" not in doc
        assert "filename" not in doc


class TestYamlFormatter:
    def test_document(self):
        out = YamlFormatter().format(make_record(message='{"a": [1, 2]}'))
        doc = yaml.safe_load(out)
        assert doc["module"] == "svc"
        assert doc["message"] == {"a": [1, 2]}
        assert not out.endswith("\n")

    def test_enum_level(self):
        doc = yaml.safe_load(YamlFormatter().format(make_record(level=Lvl.WARNING)))
        assert doc["level"] == 2


# ═══════════════════════════════════════════════════════════════════
#  Sinks
# ═══════════════════════════════════════════════════════════════════

class TestStreamSink:
    def test_explicit_stream(self):
        stream = io.StringIO()
        StreamSink(stream=stream).write("line\n")
        assert stream.getvalue() == "line\n"

    def test_follows_sys_streams(self, capsys):
        StreamSink(name="stdout").write("to out\n")
        StreamSink(name="stderr").write("to err\n")
        captured = capsys.readouterr()
        assert captured.out == "to out\n"
        assert captured.err == "to err\n"


class TestFileSink:
    def test_appends(self, tmp_path):
        path = tmp_path / "app.log"
        path.write_text("existing\n")
        sink = FileSink(path)
        sink.write("new\n")
        sink.close()
        assert path.read_text() == "existing\nnew\n"

    def test_creates_owner_only_file(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "app.log"
        sink = FileSink(path)
        sink.write("x\n")
        sink.close()
        assert path.exists()
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_reopens_after_close(self, tmp_path):
        path = tmp_path / "app.log"
        sink = FileSink(path)
        sink.write("a\n")
        sink.close()
        sink.write("b\n")
        sink.close()
        assert path.read_text() == "a\nb\n"


class TestBufferSink:
    def test_strips_newline(self):
        sink = BufferSink()
        sink.write("one\n")
        sink.write("two")
        assert sink.lines == ["one", "two"]
        assert sink.count == 2

    def test_bounded(self):
        sink = BufferSink(maxlen=3)
        for i in range(5):
            sink.write(f"{i}\n")
        assert sink.lines == ["2", "3", "4"]
        assert sink.get_recent(2) == ["3", "4"]
        sink.clear()
        assert sink.count == 0


class TestOpenOutput:
    @pytest.mark.parametrize("target", [None, "", "1", "-", "stdout", "/dev/stdout"])
    def test_stdout(self, target):
        sink = open_output(target)
        assert isinstance(sink, StreamSink)
        assert sink.name == "stdout"

    @pytest.mark.parametrize("target", ["2", "stderr", "/dev/stderr"])
    def test_stderr(self, target):
        assert open_output(target).name == "stderr"

    def test_file(self, tmp_path):
        sink = open_output(str(tmp_path / "out.log"))
        assert isinstance(sink, FileSink)


# ═══════════════════════════════════════════════════════════════════
#  Worker
# ═══════════════════════════════════════════════════════════════════

class BrokenSink(Sink):
    def write(self, text, calldepth=0):
        raise OSError("disk full")


class TestWorker:
    def make_worker(self, sink, **kwargs):
        return Worker(
            sink=sink,
            compiled=CompiledFormat("{5} {6}", RFC3339),
            levels=LevelRegistry.with_defaults(),
            **kwargs,
        )

    def test_notice_threshold_filters(self):
        sink = BufferSink()
        worker = self.make_worker(sink, threshold=Lvl.NOTICE, color=False)
        for level in Lvl:
            worker.log(make_record(level, level.name.lower()))
        assert sink.lines == ["FATAL critical", "ERROR error", "WARN warning", "NOTICE notice"]

    def test_color_wraps_line(self):
        stream = io.StringIO()
        worker = self.make_worker(StreamSink(stream=stream), threshold=Lvl.DEBUG, color=True)
        worker.log(make_record(Lvl.WARNING, "caution"))
        assert stream.getvalue() == "\033[33mWARN caution\033[0m\n"

    def test_newline_not_doubled(self):
        stream = io.StringIO()
        worker = self.make_worker(StreamSink(stream=stream), threshold=Lvl.DEBUG, color=False)
        worker.log(make_record(message="done\n"))
        assert stream.getvalue() == "INFO done\n"

    def test_render_failure_logged_as_error(self):
        sink = BufferSink()
        worker = Worker(
            sink=sink,
            compiled=CompiledFormat("{9}", RFC3339),
            levels=LevelRegistry.with_defaults(),
            threshold=Lvl.DEBUG,
            color=False,
        )
        assert worker.log(make_record(Lvl.DEBUG, "lost"))
        assert len(sink.lines) == 1
        assert "cannot render format" in sink.lines[0]

    def test_render_failure_respects_threshold(self):
        sink = BufferSink()
        worker = Worker(
            sink=sink,
            compiled=CompiledFormat("{9}", RFC3339),
            levels=LevelRegistry.with_defaults(),
            threshold=Lvl.CRITICAL,
            color=False,
        )
        assert worker.log(make_record(Lvl.CRITICAL, "lost")) is False
        assert sink.lines == []

    def test_sink_failure_kept(self):
        worker = self.make_worker(BrokenSink(), threshold=Lvl.DEBUG)
        assert worker.log(make_record()) is False
        assert isinstance(worker.last_error, OSError)

    def test_closed_stream_kept(self):
        stream = io.StringIO()
        stream.close()
        worker = self.make_worker(StreamSink(stream=stream), threshold=Lvl.DEBUG)
        assert worker.log(make_record()) is False
        assert isinstance(worker.last_error, ValueError)

    def test_set_format_takes_effect(self):
        sink = BufferSink()
        worker = self.make_worker(sink, threshold=Lvl.DEBUG, color=False)
        worker.set_format(CompiledFormat("{2}: {6}", RFC3339))
        worker.log(make_record(message="next"))
        assert sink.lines == ["svc: next"]


# ═══════════════════════════════════════════════════════════════════
#  Logger
# ═══════════════════════════════════════════════════════════════════

class TestLoggerConstruction:
    def test_invalid_module(self):
        with pytest.raises(ConfigurationError, match="module"):
            Logger(module=3)

    def test_invalid_color(self):
        with pytest.raises(ConfigurationError, match="color"):
            Logger(color="yes")

    def test_invalid_level(self):
        with pytest.raises(ConfigurationError):
            Logger(level=6)

    def test_invalid_format_type(self):
        with pytest.raises(ConfigurationError, match="format"):
            Logger(format=5)

    def test_invalid_time_format_type(self):
        with pytest.raises(ConfigurationError, match="time_format"):
            Logger(time_format=5)

    def test_unknown_format(self):
        with pytest.raises(ConfigurationError, match="Unknown format"):
            Logger(format="fancy")

    def test_invalid_sink(self):
        with pytest.raises(ConfigurationError, match="sink"):
            Logger(sink=42)

    def test_default_threshold(self):
        assert Logger(sink=BufferSink()).level == Lvl.NOTICE

    def test_stream_wrapped(self):
        stream = io.StringIO()
        log = Logger(sink=stream, color=False, level=Lvl.DEBUG)
        log.info("wrapped")
        assert stream.getvalue() == "wrapped\n"


class TestLoggerEmission:
    def test_threshold(self):
        log, sink = buffered_logger(level=Lvl.NOTICE)
        assert not log.debug("d")
        assert not log.info("i")
        assert log.notice("n")
        assert log.warning("w")
        assert log.error("e")
        assert log.critical("c")
        assert sink.lines == ["n", "w", "e", "c"]

    def test_caller_location(self):
        log, sink = buffered_logger(fmt="%{file}:%{line} %{message}")
        log.info("here")
        line = sys._getframe().f_lineno - 1
        assert sink.lines == [f"test_logger.py:{line} here"]

    def test_printf_variants(self):
        log, sink = buffered_logger()
        log.infof("%s=%d", "x", 3)
        log.warningf("%d%%", 91)
        log.logf(Lvl.DEBUG, "%s", "any")
        assert sink.lines == ["x=3", "91%", "any"]

    def test_log_custom_level(self):
        levels = LevelRegistry.with_defaults()
        levels.register(8, "TRACE", "Blue", 128064)
        log, sink = buffered_logger(fmt="%{level} %{message}", level=8, levels=levels)
        log.log(8, "deep")
        assert sink.lines == ["TRACE deep"]

    def test_json_format(self):
        log, sink = buffered_logger(fmt="json")
        log.info('{"a":1}')
        doc = json.loads(sink.lines[0])
        assert doc["message"] == {"a": 1}
        assert doc["module"] == "svc"
        assert doc["level"] == int(Lvl.INFO)
        assert doc["filename"] == "test_logger.py"

    def test_structured_payload(self):
        log, sink = buffered_logger(fmt="yaml")
        log.info({"disk": "full"})
        doc = yaml.safe_load(sink.lines[0])
        assert doc["message"] == {"disk": "full"}
        assert doc["level"] == int(Lvl.INFO)

    def test_closed_stream_does_not_raise(self):
        stream = io.StringIO()
        log = Logger("svc", sink=stream, color=False, level=Lvl.DEBUG)
        stream.close()
        assert log.info("hi") is False
        assert isinstance(log.worker.last_error, ValueError)

    def test_concurrent_ids_contiguous(self):
        seq = SequenceCounter()
        log, sink = buffered_logger(fmt="%{id}", sequence=seq)
        n, m = 8, 250

        def work():
            for _ in range(m):
                log.info("x")

        threads = [threading.Thread(target=work) for _ in range(n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ids = sorted(int(line) for line in sink.lines)
        assert ids == list(range(1, n * m + 1))

    def test_filtered_calls_take_no_id(self):
        seq = SequenceCounter()
        log, sink = buffered_logger(fmt="%{id}", level=Lvl.NOTICE, sequence=seq)
        log.debug("skip")
        log.notice("keep")
        assert sink.lines == ["1"]


class TestLoggerTerminating:
    def test_fatal_exits(self):
        log, sink = buffered_logger()
        with pytest.raises(SystemExit) as exc:
            log.fatal("bye")
        assert exc.value.code == 1
        assert sink.lines == ["bye"]

    def test_fatalf_exits(self):
        log, sink = buffered_logger()
        with pytest.raises(SystemExit):
            log.fatalf("bye %s", "now")
        assert sink.lines == ["bye now"]

    def test_panic_raises_after_logging(self):
        log, sink = buffered_logger(fmt="%{level} %{message}")
        with pytest.raises(LoggerPanic, match="boom"):
            log.panicf("%s", "boom")
        assert sink.lines == ["FATAL boom"]

    def test_stack_as_error(self):
        log, sink = buffered_logger(fmt="%{level} %{message}")
        log.stack_as_error()
        text = "\n".join(sink.lines)
        assert text.startswith("ERROR Stack info")
        assert "test_stack_as_error" in text

    def test_stack_with_header(self):
        log, sink = buffered_logger()
        log.stack_as_critical("where am I")
        assert sink.lines[0].startswith("where am I\n")


class TestLoggerReconfiguration:
    def test_set_format_template(self):
        log, sink = buffered_logger()
        log.set_format("%{lvl}|%{message}")
        log.warning("w")
        assert sink.lines == ["WAR|w"]
        assert log.format == "{5:.3}|{6}"

    def test_set_format_unknown_name(self):
        log, _ = buffered_logger()
        with pytest.raises(ConfigurationError):
            log.set_format("fancy")

    def test_set_time_format(self):
        log, sink = buffered_logger(fmt="%{time} %{message}")
        log.set_time_format("%Y")
        log.info("x")
        assert sink.lines == [f"{datetime.now().year} x"]
        assert log.time_format == "%Y"

    def test_set_level_by_name(self):
        log, sink = buffered_logger(level=Lvl.DEBUG)
        log.set_level("warning")
        log.info("hidden")
        log.error("shown")
        assert sink.lines == ["shown"]
        assert log.level == Lvl.WARNING

    def test_set_color(self):
        stream = io.StringIO()
        log = Logger(sink=stream, color=False, level=Lvl.DEBUG)
        log.set_color(True)
        log.error("e")
        assert stream.getvalue() == "\033[35me\033[0m\n"

    def test_set_color_rejects_non_bool(self):
        log, _ = buffered_logger()
        with pytest.raises(ConfigurationError, match="color"):
            log.set_color("yes")
        assert log.color is False

    def test_set_format_rejects_non_str(self):
        log, _ = buffered_logger()
        with pytest.raises(ConfigurationError, match="format"):
            log.set_format(5)

    def test_set_time_format_rejects_non_str(self):
        log, sink = buffered_logger(fmt="%{time} %{message}")
        with pytest.raises(ConfigurationError, match="time_format"):
            log.set_time_format(5)
        assert log.info("still fine")
        assert sink.lines[0].endswith(" still fine")

    def test_set_output(self, tmp_path):
        log, _ = buffered_logger()
        path = tmp_path / "moved.log"
        log.set_output(str(path))
        log.info("moved")
        log.close()
        assert path.read_text() == "moved\n"

    def test_set_output_closes_opened_file(self, tmp_path):
        log, _ = buffered_logger()
        log.set_output(str(tmp_path / "first.log"))
        log.info("one")
        first = log.worker.sink
        log.set_output(str(tmp_path / "second.log"))
        assert first._file is None
        log.info("two")
        log.close()
        assert (tmp_path / "first.log").read_text() == "one\n"
        assert (tmp_path / "second.log").read_text() == "two\n"

    def test_set_output_keeps_caller_sink_open(self, tmp_path):
        path = tmp_path / "mine.log"
        mine = FileSink(path)
        log, _ = buffered_logger()
        log.set_output(mine)
        log.info("kept")
        log.set_output(BufferSink())
        assert mine._file is not None
        mine.close()

    def test_for_module(self):
        log, sink = buffered_logger(fmt="%{module} %{message}")
        log.for_module("db").info("q")
        log.info("r")
        assert sink.lines == ["db q", "svc r"]

    def test_status(self):
        log, _ = buffered_logger(level=Lvl.INFO)
        status = log.status()
        assert status["module"] == "svc"
        assert status["level_name"] == "INFO"
        assert status["sink"] == "BufferSink"
        assert status["color"] is False


class TestDefaultLogger:
    def test_singleton_identity(self):
        assert Logger.default() is Logger.default()

    def test_reset_creates_new_instance(self):
        a = Logger.default()
        Logger.reset_default()
        assert Logger.default() is not a

    def test_thread_safe_singleton(self):
        instances = []

        def get_instance():
            instances.append(Logger.default())

        threads = [threading.Thread(target=get_instance) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert all(inst is instances[0] for inst in instances)

    def test_defaults(self):
        log = Logger.default()
        assert log.module == "msg"
        assert log.level == Lvl.DEBUG
        assert log.color is True
        assert log.format == "{6}"

    def test_module_functions_use_default(self, capsys):
        log_module.info("to stdout")
        assert capsys.readouterr().out == "\033[36mto stdout\033[0m\n"

    def test_set_default(self):
        log, sink = buffered_logger()
        Logger.set_default(log)
        log_module.warningf("%s!", "careful")
        log_module.debug("noise")
        assert sink.lines == ["careful!", "noise"]

    def test_module_panic(self):
        log, sink = buffered_logger()
        Logger.set_default(log)
        with pytest.raises(LoggerPanic):
            log_module.panic("stop")
        assert sink.lines == ["stop"]

    def test_set_default_format(self):
        Logger.default().set_output(BufferSink())
        log_module.set_default_format()
        log = Logger.default()
        assert log.format == "{2}\t{1}\n\t{6}\n\n"
        assert log.time_format == "%d %b %y %H:%M %Z"


class TestSprintf:
    def test_formats(self):
        assert sprintf("%s-%d", "a", 1) == "a-1"

    def test_surplus_args_dropped(self):
        assert sprintf("%s", "a", "b") == "a"

    def test_missing_args_unexpanded(self):
        assert sprintf("%s and %s", "a") == "%s and %s"

    def test_no_args(self):
        assert sprintf("100%") == "100%"

    def test_mapping(self):
        assert sprintf("%(x)s", {"x": 1}) == "1"
