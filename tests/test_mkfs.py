import struct

import pytest

from xvtools import mkfs
from xvtools.mkfs import (
    BSIZE,
    DIRSIZ,
    FSMAGIC,
    FSSIZE,
    IPB,
    MAXFILE,
    NBLOCKS,
    NDIRECT,
    NINDIRECT,
    NINODEBLOCKS,
    NINODES,
    NLOG,
    ROOTINO,
    T_DIR,
    T_FILE,
    FsImage,
    make_image,
)


def _block(raw, n):
    return raw[n * BSIZE:(n + 1) * BSIZE]


def _superblock(raw):
    return struct.unpack("<8I", _block(raw, 1)[:32])


def _inode(raw, inum):
    inodestart = _superblock(raw)[6]
    block = _block(raw, inum // IPB + inodestart)
    start = (inum % IPB) * 64
    kind, _major, _minor, nlink, size, *addrs = struct.unpack(
        f"<4HI{NDIRECT + 1}I", block[start:start + 64]
    )
    return kind, nlink, size, addrs


def _file_data(raw, size, addrs):
    blocks = [b for b in addrs[:NDIRECT] if b]
    if addrs[NDIRECT]:
        indirect = struct.unpack(f"<{NINDIRECT}I", _block(raw, addrs[NDIRECT]))
        blocks += [b for b in indirect if b]
    return b"".join(_block(raw, b) for b in blocks)[:size]


@pytest.fixture
def image(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "user").mkdir()
    (tmp_path / "user" / "_cat").write_bytes(b"meow" * 700)
    (tmp_path / "README").write_bytes(b"readme text\n")
    img = make_image("fs.img", ["user/_cat", "README"])
    return img, (tmp_path / "fs.img").read_bytes()


def test_image_has_full_size(image):
    _img, raw = image
    assert len(raw) == FSSIZE * BSIZE


def test_superblock_fields(image):
    img, raw = image
    assert _superblock(raw) == (
        FSMAGIC, FSSIZE, NBLOCKS, NINODES, NLOG, 2, 2 + NLOG, 2 + NLOG + NINODEBLOCKS,
    )
    assert img.sb.bmapstart == _superblock(raw)[7]


def test_root_directory_entries(image):
    _img, raw = image
    kind, nlink, size, addrs = _inode(raw, ROOTINO)
    assert kind == T_DIR and nlink == 1
    assert size % BSIZE == 0 and size > 0
    data = _block(raw, addrs[0])
    entries = []
    for i in range(4):
        inum, name = struct.unpack(f"<H{DIRSIZ}s", data[i * 16:(i + 1) * 16])
        entries.append((inum, name.rstrip(b"\0").decode()))
    assert entries == [(ROOTINO, "."), (ROOTINO, ".."), (ROOTINO + 1, "cat"), (ROOTINO + 2, "README")]


def test_file_contents_round_trip(image, tmp_path):
    _img, raw = image
    kind, _nlink, size, addrs = _inode(raw, ROOTINO + 1)
    assert kind == T_FILE
    assert _file_data(raw, size, addrs) == (tmp_path / "user" / "_cat").read_bytes()


def test_bitmap_marks_allocated_blocks(image):
    img, raw = image
    bitmap = _block(raw, img.sb.bmapstart)
    assert int.from_bytes(bitmap, "little") == (1 << img.freeblock) - 1


def test_indirect_blocks_round_trip(tmp_path):
    data = bytes(range(256)) * ((NDIRECT + 3) * 4)
    path = tmp_path / "img"
    with FsImage(path) as img:
        inum = img.ialloc(T_FILE)
        img.iappend(inum, data[:1000])
        img.iappend(inum, data[1000:])
        din = img.read_inode(inum)
    assert din.size == len(data)
    assert din.addrs[NDIRECT] != 0
    assert _file_data(path.read_bytes(), din.size, din.addrs) == data


def test_ialloc_is_sequential(tmp_path):
    with FsImage(tmp_path / "img") as img:
        first = img.ialloc(T_DIR)
        second = img.ialloc(T_FILE)
        din = img.read_inode(second)
    assert (first, second) == (ROOTINO, ROOTINO + 1)
    assert (din.type, din.nlink, din.size) == (T_FILE, 1, 0)


def test_file_too_large(tmp_path):
    with FsImage(tmp_path / "img") as img:
        inum = img.ialloc(T_FILE)
        img.iappend(inum, bytes(MAXFILE * BSIZE))
        with pytest.raises(ValueError):
            img.iappend(inum, b"x")


def test_name_with_slash_rejected(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "dir").mkdir()
    (tmp_path / "dir" / "x").write_bytes(b"")
    with pytest.raises(ValueError):
        make_image("fs.img", ["dir/x"])


def test_long_name_rejected(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    name = "n" * (DIRSIZ + 1)
    (tmp_path / name).write_bytes(b"")
    with pytest.raises(ValueError):
        make_image("fs.img", [name])


def test_missing_file_raises(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(OSError):
        make_image("fs.img", ["absent"])


def test_main_usage(capsys):
    assert mkfs.main([]) == 1
    assert capsys.readouterr().err == "Usage: mkfs fs.img files...\n"


def test_main_reports_layout(tmp_path, capsys):
    assert mkfs.main([str(tmp_path / "fs.img")]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("nmeta ")
    assert lines[-1].startswith("balloc: write bitmap block at sector")