"""Tests for CommandRunner against real subprocesses."""

import shlex
import sys

import pytest

from procmon.collector import SystemCollector
from procmon.errors import CommandExecutionError
from procmon.reader import CommandRunner

from conftest import make_settings

PYTHON = shlex.quote(sys.executable)


def python_command(code: str) -> str:
    return f"{PYTHON} -c {shlex.quote(code)}"


@pytest.fixture
def runner() -> CommandRunner:
    return CommandRunner(make_settings(command_timeout=2.0))


def test_build_args_with_elevation():
    runner = CommandRunner(make_settings(su_command="su -c"))

    assert runner.build_args("cat /proc/stat") == ["su", "-c", "cat /proc/stat"]


def test_build_args_without_elevation(runner):
    assert runner.build_args("cat /proc/stat") == ["cat", "/proc/stat"]


def test_read_text_returns_lines(runner):
    lines = runner.read_text(python_command("print('header'); print('row 1')"))

    assert lines == ["header", "row 1"]


def test_non_zero_exit(runner):
    command = python_command("import sys; sys.stderr.write('denied'); sys.exit(3)")

    with pytest.raises(CommandExecutionError) as excinfo:
        runner.read_text(command)

    assert excinfo.value.returncode == 3
    assert excinfo.value.stderr == "denied"


def test_launch_failure(runner):
    with pytest.raises(CommandExecutionError) as excinfo:
        runner.read_text("/nonexistent/procmon-missing-binary")

    assert excinfo.value.returncode is None


def test_unbalanced_quotes(runner):
    with pytest.raises(CommandExecutionError):
        runner.read_text("cat 'unterminated")


def test_timeout_kills_child():
    runner = CommandRunner(make_settings(command_timeout=0.5))

    with pytest.raises(CommandExecutionError, match="timed out"):
        runner.read_text(python_command("import time; time.sleep(30)"))


def test_run_discards_output(runner):
    assert runner.run(python_command("print('ignored')")) is None


def test_undecodable_bytes_keep_other_rows():
    code = (
        "import sys; sys.stdout.buffer.write("
        "b'H\\nu 1 0.0 0.1 a b c d init\\nu 2 0.0 0.1 a b c d bad\\xffname\\n')"
    )
    settings = make_settings(process_command=python_command(code))
    collector = SystemCollector(runner=CommandRunner(settings), settings=settings)

    processes = collector.get_process_list()

    assert [proc.pid for proc in processes] == ["1", "2"]
    assert processes[0].name == "init"
    assert processes[1].name == "bad\ufffdname"
