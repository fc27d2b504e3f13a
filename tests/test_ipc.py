from xvtools.ipc import main, pingpong, pipe_roundtrip


def test_pingpong_order():
    lines = pingpong()
    assert len(lines) == 2
    assert lines[0].endswith(": received ping")
    assert lines[1].endswith(": received pong")


def test_pingpong_ids_are_numbers():
    for line in pingpong():
        ident, _, _ = line.partition(":")
        assert ident.isdigit()


def test_roundtrip_returns_messages():
    assert pipe_roundtrip(["hello", "world"]) == ["hello", "world"]


def test_roundtrip_stops_at_nul():
    assert pipe_roundtrip(["ab\0cd"]) == ["ab"]


def test_roundtrip_large_message():
    message = "z" * 200000
    assert pipe_roundtrip([message]) == [message]


def test_main_pipetest(capsys):
    assert main(["pipetest"]) == 0
    assert capsys.readouterr().out == "Read from pipe: world\n"


def test_main_default_pingpong(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out.splitlines()
    assert [line.split(": ", 1)[1] for line in out] == ["received ping", "received pong"]


def test_main_unknown(capsys):
    assert main(["bogus"]) == 1
    assert "usage" in capsys.readouterr().err