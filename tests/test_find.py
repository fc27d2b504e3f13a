import pytest

from xvtools.find import find, main


def _tree(tmp_path):
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "a" / "target").write_text("x")
    (tmp_path / "a" / "b" / "target").write_text("y")
    (tmp_path / "target").mkdir()
    (tmp_path / "target" / "other").write_text("z")
    (tmp_path / "c").write_text("")
    return str(tmp_path)


def test_finds_files_in_all_subdirectories(tmp_path):
    root = _tree(tmp_path)
    assert sorted(find(root, "target")) == sorted(
        [f"{root}/a/target", f"{root}/a/b/target"]
    )


def test_directory_with_the_name_is_searched_not_reported(tmp_path):
    root = _tree(tmp_path)
    assert list(find(root, "other")) == [f"{root}/target/other"]


def test_no_match_gives_nothing(tmp_path):
    root = _tree(tmp_path)
    assert list(find(root, "missing")) == []


def test_start_that_is_a_file_raises(tmp_path):
    root = _tree(tmp_path)
    with pytest.raises(NotADirectoryError):
        find(f"{root}/c", "c")


def test_missing_start_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        find(str(tmp_path / "nope"), "x")


def test_main_usage(capsys):
    assert main(["only"]) == 1
    assert capsys.readouterr().out == "Usage: find <directory> <filename>\n"


def test_main_prints_matches(tmp_path, capsys):
    root = _tree(tmp_path)
    assert main([root, "target"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert sorted(lines) == sorted([f"{root}/a/target", f"{root}/a/b/target"])


def test_main_reports_not_a_directory(tmp_path, capsys):
    root = _tree(tmp_path)
    assert main([f"{root}/c", "x"]) == 0
    assert capsys.readouterr().out == f"find: {root}/c is not a directory\n"