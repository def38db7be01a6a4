import os
import shutil

import pytest

from meshcheck.shell import CommandError, create_temp_dir, execute, executef


class _CheckFailed(Exception):
    pass


def test_execute_returns_output():
    assert execute("echo hello") == "hello\n"


def test_execute_combines_stderr():
    assert execute("echo err 1>&2") == "err\n"


def test_execute_runs_checks_with_output():
    seen = []
    result = execute("echo abc", seen.append, seen.append)
    assert seen == [result, result]


def test_execute_check_failure_propagates():
    seen = []
    later = []

    def failing_check(output):
        seen.append(output)
        raise _CheckFailed(output)

    with pytest.raises(_CheckFailed) as info:
        execute("echo abc", failing_check, later.append)
    assert seen == ["abc\n"]
    assert info.value.args == ("abc\n",)
    assert later == []


def test_execute_failure_raises_command_error():
    with pytest.raises(CommandError) as info:
        execute("echo oops; exit 3")
    assert info.value.returncode == 3
    assert info.value.output == "oops\n"
    assert str(info.value).startswith("Command failed: echo oops; exit 3\noops\n")


def test_execute_failure_message_without_output():
    with pytest.raises(CommandError) as info:
        execute("exit 1")
    assert str(info.value).startswith("Command failed: exit 1\nerror:")


def test_execute_with_input():
    assert execute("cat", input_text="abc") == "abc"


def test_execute_without_input_reads_nothing():
    assert execute("cat") == ""


def test_execute_with_mapping_env():
    assert execute("echo $FOO", env={"FOO": "bar"}) == "bar\n"


def test_execute_with_list_env():
    assert execute("echo $FOO", env=["FOO=a=b"]) == "a=b\n"


def test_executef_formats_arguments():
    assert executef("echo %s-%d", "a", 1) == "a-1\n"


def test_create_temp_dir():
    path = create_temp_dir("meshcheck-")
    try:
        assert os.path.isdir(path)
        assert os.path.basename(path).startswith("meshcheck-")
        assert os.path.dirname(path) == "/tmp"
    finally:
        shutil.rmtree(path)