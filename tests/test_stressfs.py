import os

import pytest

from xvtools.stressfs import BLOCK, WORKERS, WRITES, main, stress


def test_each_worker_reads_back_everything(tmp_path):
    assert stress(str(tmp_path), 3) == [WRITES * BLOCK] * 3


def test_files_are_named_by_worker(tmp_path):
    stress(str(tmp_path), 3)
    assert sorted(os.listdir(tmp_path)) == [f"stressfs{i}" for i in range(3)]
    for i in range(3):
        assert (tmp_path / f"stressfs{i}").read_bytes() == b"a" * (WRITES * BLOCK)


def test_second_run_overwrites_in_place(tmp_path):
    stress(str(tmp_path), 2)
    stress(str(tmp_path), 2)
    assert (tmp_path / "stressfs1").stat().st_size == WRITES * BLOCK


def test_zero_workers(tmp_path):
    assert stress(str(tmp_path), 0) == []


def test_negative_workers_rejected(tmp_path):
    with pytest.raises(ValueError):
        stress(str(tmp_path), -1)


def test_main_output(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main([]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "stressfs starting"
    assert lines.count("read") == WORKERS
    assert len(os.listdir(tmp_path)) == WORKERS