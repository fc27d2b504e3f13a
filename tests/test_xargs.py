import io
import sys

import pytest

from xvtools.xargs import MAXARGS, MAXLEN, command_lines, main


def test_one_command_per_line():
    result = list(command_lines(["echo", "x"], io.BytesIO(b"a\nb\n")))
    assert result == [["echo", "x", "a"], ["echo", "x", "b"]]


def test_unterminated_tail_is_dropped():
    assert list(command_lines(["echo"], io.BytesIO(b"a\nb"))) == [["echo", "a"]]


def test_nul_ends_chunk():
    assert list(command_lines(["echo"], io.BytesIO(b"a\n\0b\n"))) == [["echo", "a"]]


def test_line_filling_chunk_kept():
    data = b"x" * (MAXLEN - 2) + b"\n" + b"tail\n"
    result = list(command_lines(["echo"], io.BytesIO(data)))
    assert result == [["echo", "x" * (MAXLEN - 2)], ["echo", "tail"]]


def test_line_spanning_chunks_is_cut():
    data = b"y" * 600 + b"\n"
    result = list(command_lines(["echo"], io.BytesIO(data)))
    assert len(result) == 1
    last = result[0][-1]
    assert set(last) == {"y"}
    assert len(last) < 600


def test_too_many_base_arguments():
    with pytest.raises(ValueError):
        list(command_lines(["w"] * (MAXARGS - 1), io.BytesIO(b"a\n")))


def _stdin(monkeypatch, data):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))


def test_main_runs_echo(monkeypatch, capsys):
    _stdin(monkeypatch, b"a\nb\n")
    assert main(["echo", "hi"]) == 0
    assert capsys.readouterr().out == "hi a\nhi b\n"


def test_main_unknown_command(monkeypatch, capsys):
    _stdin(monkeypatch, b"a\n")
    assert main(["nosuch"]) == 0
    assert capsys.readouterr().out == "xargs: exec nosuch failed\n"


def test_main_usage(capsys):
    assert main([]) == 1
    assert "Usage: xargs" in capsys.readouterr().out