"""Tests for the msg and xprint command-line tools."""

import io
import json

import pytest

from msgkit.cli import msg, xprint
from msgkit.cli.common import collect_data, read_stdin
from msgkit.logger import BufferSink, Logger


class Terminal(io.StringIO):
    """Interactive stdin: nothing piped."""

    def isatty(self):
        return True


@pytest.fixture(autouse=True)
def reset_logger():
    Logger.reset_default()
    yield
    Logger.reset_default()


# ═══════════════════════════════════════════════════════════════════
#  Shared input handling
# ═══════════════════════════════════════════════════════════════════

class TestInput:
    def test_stdin_first_by_default(self):
        assert collect_data(["a", "b"], "piped", args_first=False) == ["piped", "a", "b"]

    def test_args_first(self):
        assert collect_data(["a", "b"], "piped", args_first=True) == ["a", "b", "piped"]

    def test_no_stdin(self):
        assert collect_data(["a"], None, args_first=False) == ["a"]

    def test_read_stdin(self):
        log = Logger(sink=BufferSink())
        assert read_stdin(log, io.StringIO("piped\n")) == "piped\n"
        assert read_stdin(log, Terminal()) is None


# ═══════════════════════════════════════════════════════════════════
#  msg
# ═══════════════════════════════════════════════════════════════════

class TestMsg:
    def test_format_and_args(self, capsys):
        assert msg.main(["%s-%s", "a", "b"], stdin=Terminal()) == 0
        assert capsys.readouterr().err == "a-b\n"

    def test_default_format(self, capsys):
        msg.main([], stdin=io.StringIO("only stdin"))
        assert capsys.readouterr().err == "only stdin\n"

    def test_stdin_ordering(self, capsys):
        msg.main(["%s %s", "arg"], stdin=io.StringIO("piped"))
        assert capsys.readouterr().err == "piped arg\n"
        msg.main(["-A", "%s %s", "arg"], stdin=io.StringIO("piped"))
        assert capsys.readouterr().err == "arg piped\n"

    def test_fmt_flag(self, capsys):
        msg.main(["-f", "!s+!s", "a", "b"], stdin=Terminal())
        assert capsys.readouterr().err == "a+b\n"

    def test_translate_format(self):
        assert msg.translate_format("!d|t") == "%d\\t"

    def test_level_dispatch(self, capsys):
        msg.main(["-l", "2", "-F", "std", "disk full"], stdin=Terminal())
        err = capsys.readouterr().err
        assert "\tWARN\t" in err
        assert err.endswith("disk full\n")

    def test_color(self, capsys):
        msg.main(["-c", "-l", "1", "bad"], stdin=Terminal())
        assert capsys.readouterr().err == "\033[35mbad\033[0m\n"

    def test_output_file(self, tmp_path, capsys):
        path = tmp_path / "msg.log"
        msg.main(["-o", str(path), "to file"], stdin=Terminal())
        assert path.read_text() == "to file\n"
        assert capsys.readouterr().err == ""

    def test_output_stdout(self, capsys):
        msg.main(["-o", "stdout", "out"], stdin=Terminal())
        assert capsys.readouterr().out == "out\n"

    def test_invalid_level(self, capsys):
        with pytest.raises(SystemExit) as exc:
            msg.main(["-l", "42", "x"], stdin=Terminal())
        assert exc.value.code == 2
        assert "Invalid level 42" in capsys.readouterr().err

    def test_invalid_format(self, capsys):
        with pytest.raises(SystemExit):
            msg.main(["-F", "fancy", "x"], stdin=Terminal())
        assert "invalid format [fancy]" in capsys.readouterr().err


# ═══════════════════════════════════════════════════════════════════
#  xprint
# ═══════════════════════════════════════════════════════════════════

class TestXprint:
    def test_no_data_exits_quietly(self, capsys):
        assert xprint.main([], stdin=Terminal()) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

    def test_no_template_joins_data(self, capsys):
        xprint.main(["hello", "world"], stdin=Terminal())
        assert capsys.readouterr().err == "hello world\n"

    def test_inline_template(self, capsys):
        assert xprint.main(["-t", '{{ data | join("-") | upper }}', "a", "b"], stdin=Terminal()) == 0
        assert capsys.readouterr().err == "A-B\n"

    def test_template_file_with_stdin(self, tmp_path, capsys):
        path = tmp_path / "report.j2"
        path.write_text("{{ data[0] | trim }} then {{ data[1] }}")
        xprint.main(["-t", str(path), "arg"], stdin=io.StringIO("piped\n"))
        assert capsys.readouterr().err == "piped then arg\n"

    def test_args_first(self, capsys):
        xprint.main(["-a", "-t", "{{ data[0] }}", "arg"], stdin=io.StringIO("piped"))
        assert capsys.readouterr().err == "arg\n"

    def test_render_failure(self, capsys):
        assert xprint.main(["-t", "{{ fromjson(data[0]) }}", "nope"], stdin=Terminal()) == 1
        assert "rendering template" in capsys.readouterr().err

    def test_unsafe_flag(self, monkeypatch, capsys):
        monkeypatch.setenv("MSGKIT_TEST_VAR", "on")
        assert xprint.main(["-t", "{{ env('MSGKIT_TEST_VAR') }}", "x"], stdin=Terminal()) == 1
        capsys.readouterr()
        xprint.main(["--unsafe", "-t", "{{ env('MSGKIT_TEST_VAR') }}", "x"], stdin=Terminal())
        assert capsys.readouterr().err == "on\n"

    def test_module_name(self, capsys):
        xprint.main(["-n", "deploy", "-F", "simple", "ready"], stdin=Terminal())
        assert "\tdeploy\tready" in capsys.readouterr().err

    def test_debug_tracks_helpers(self, capsys):
        xprint.main(["--debug", "-t", "{{ upper(data[0]) }}", "x"], stdin=Terminal())
        lines = capsys.readouterr().err.splitlines()
        event = json.loads(lines[0])
        assert event["function"] == "upper"
        assert lines[1] == "X"

    def test_list_functions(self, capsys):
        assert xprint.main(["--list-functions"]) == 0
        catalog = json.loads(capsys.readouterr().out)
        assert catalog["b64enc"]["unsafe"] is False
        assert catalog["writefile"]["unsafe"] is True

    def test_serve(self, monkeypatch):
        calls = []
        monkeypatch.setattr(xprint, "serve", lambda address, **kwargs: calls.append((address, kwargs)))
        assert xprint.main(["--serve", ":8080", "--unsafe"]) == 0
        assert calls[0][0] == ":8080"
        assert calls[0][1]["unsafe"] is True

    def test_serve_bad_address(self, capsys):
        assert xprint.main(["--serve", "nowhere"]) == 1
        assert "invalid listen address" in capsys.readouterr().err
