"""Build a file system image holding a root directory and some files.

Disk layout, one block per sector:
[ boot block | superblock | log | inode blocks | free bit map | data blocks ]
All numbers are stored little-endian.
"""

from __future__ import annotations

import os
import struct
import sys
from dataclasses import astuple, dataclass, field
from pathlib import Path
from types import TracebackType

FSSIZE = 2000
MAXOPBLOCKS = 10
LOGSIZE = MAXOPBLOCKS * 3
NINODES = 200

BSIZE = 1024
FSMAGIC = 0x10203040
ROOTINO = 1
DIRSIZ = 14
NDIRECT = 12
NINDIRECT = BSIZE // 4
MAXFILE = NDIRECT + NINDIRECT

T_DIR = 1
T_FILE = 2
T_DEVICE = 3

_DINODE = struct.Struct(f"<4HI{NDIRECT + 1}I")
_DIRENT = struct.Struct(f"<H{DIRSIZ}s")
_SUPERBLOCK = struct.Struct("<8I")
_INDIRECT = struct.Struct(f"<{NINDIRECT}I")

IPB = BSIZE // _DINODE.size
BPB = BSIZE * 8

NBITMAP = FSSIZE // BPB + 1
NINODEBLOCKS = NINODES // IPB + 1
NLOG = LOGSIZE
NMETA = 2 + NLOG + NINODEBLOCKS + NBITMAP
NBLOCKS = FSSIZE - NMETA


@dataclass
class Superblock:
    """The file system's description, stored in block 1."""

    magic: int = FSMAGIC
    size: int = FSSIZE
    nblocks: int = NBLOCKS
    ninodes: int = NINODES
    nlog: int = NLOG
    logstart: int = 2
    inodestart: int = 2 + NLOG
    bmapstart: int = 2 + NLOG + NINODEBLOCKS


@dataclass
class _Dinode:
    type: int = 0
    major: int = 0
    minor: int = 0
    nlink: int = 0
    size: int = 0
    addrs: list[int] = field(default_factory=lambda: [0] * (NDIRECT + 1))

    def pack(self) -> bytes:
        return _DINODE.pack(
            self.type, self.major, self.minor, self.nlink, self.size, *self.addrs
        )

    @classmethod
    def unpack(cls, data: bytes) -> _Dinode:
        kind, major, minor, nlink, size, *addrs = _DINODE.unpack(data)
        return cls(kind, major, minor, nlink, size, list(addrs))


def _dirent(inum: int, name: str) -> bytes:
    return _DIRENT.pack(inum, os.fsencode(name)[:DIRSIZ])


class FsImage:
    """A new image file being filled with inodes and data.

    Opening truncates *path* and writes an empty file system with its
    superblock; ``close`` writes the free-block bitmap.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self.sb = Superblock()
        self.freeinode = 1
        self.freeblock = NMETA
        self._file = open(self.path, "w+b")
        self._closed = False
        self._file.write(bytes(BSIZE * FSSIZE))
        self._wsect(1, _SUPERBLOCK.pack(*astuple(self.sb)).ljust(BSIZE, b"\0"))

    def __enter__(self) -> FsImage:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        elif not self._closed:
            self._closed = True
            self._file.close()

    def _wsect(self, sec: int, data: bytes) -> None:
        self._file.seek(sec * BSIZE)
        if self._file.write(data) != BSIZE:
            raise OSError("write")

    def _rsect(self, sec: int) -> bytes:
        self._file.seek(sec * BSIZE)
        data = self._file.read(BSIZE)
        if len(data) != BSIZE:
            raise OSError("read")
        return data

    def _iblock(self, inum: int) -> int:
        return inum // IPB + self.sb.inodestart

    def _take_block(self) -> int:
        block = self.freeblock
        self.freeblock += 1
        return block

    def read_inode(self, inum: int) -> _Dinode:
        """Return the on-disk inode *inum*."""
        block = self._rsect(self._iblock(inum))
        start = (inum % IPB) * _DINODE.size
        return _Dinode.unpack(block[start:start + _DINODE.size])

    def _winode(self, inum: int, din: _Dinode) -> None:
        bn = self._iblock(inum)
        block = bytearray(self._rsect(bn))
        start = (inum % IPB) * _DINODE.size
        block[start:start + _DINODE.size] = din.pack()
        self._wsect(bn, bytes(block))

    def ialloc(self, kind: int) -> int:
        """Allocate the next inode with type *kind* and one link."""
        inum = self.freeinode
        self.freeinode += 1
        self._winode(inum, _Dinode(type=int(kind), nlink=1))
        return inum

    def iappend(self, inum: int, data: bytes) -> None:
        """Append *data* to inode *inum*, allocating blocks as needed."""
        din = self.read_inode(inum)
        off = din.size
        pos = 0
        while pos < len(data):
            fbn = off // BSIZE
            if fbn >= MAXFILE:
                raise ValueError(f"inode {inum}: file too large")
            if fbn < NDIRECT:
                if din.addrs[fbn] == 0:
                    din.addrs[fbn] = self._take_block()
                x = din.addrs[fbn]
            else:
                if din.addrs[NDIRECT] == 0:
                    din.addrs[NDIRECT] = self._take_block()
                indirect = list(_INDIRECT.unpack(self._rsect(din.addrs[NDIRECT])))
                if indirect[fbn - NDIRECT] == 0:
                    indirect[fbn - NDIRECT] = self._take_block()
                    self._wsect(din.addrs[NDIRECT], _INDIRECT.pack(*indirect))
                x = indirect[fbn - NDIRECT]
            n1 = min(len(data) - pos, (fbn + 1) * BSIZE - off)
            block = bytearray(self._rsect(x))
            start = off - fbn * BSIZE
            block[start:start + n1] = data[pos:pos + n1]
            self._wsect(x, bytes(block))
            pos += n1
            off += n1
        din.size = off
        self._winode(inum, din)

    def _balloc(self, used: int) -> None:
        if used >= BPB:
            raise ValueError(f"{used} blocks do not fit in one bitmap block")
        self._wsect(self.sb.bmapstart, ((1 << used) - 1).to_bytes(BSIZE, "little"))

    def close(self) -> None:
        """Mark the allocated blocks in the bitmap and close the image."""
        if self._closed:
            return
        try:
            self._balloc(self.freeblock)
        finally:
            self._closed = True
            self._file.close()


def _short_name(path: str) -> str:
    short = path[5:] if path.startswith("user/") else path
    if "/" in short:
        raise ValueError(f"{path}: name must not contain '/'")
    return short


def make_image(path: str | os.PathLike[str], files: list[str]) -> FsImage:
    """Write an image at *path* whose root directory holds *files*.

    A ``user/`` prefix and a leading ``_`` are removed from each name.
    The closed image is returned.
    """
    with FsImage(path) as img:
        root = img.ialloc(T_DIR)
        if root != ROOTINO:
            raise RuntimeError("root directory did not get the root inode")
        img.iappend(root, _dirent(root, "."))
        img.iappend(root, _dirent(root, ".."))
        for name in files:
            short = _short_name(name)
            with open(name, "rb") as src:
                if short.startswith("_"):
                    short = short[1:]
                if len(short) > DIRSIZ:
                    raise ValueError(f"{name}: name longer than {DIRSIZ}")
                inum = img.ialloc(T_FILE)
                img.iappend(root, _dirent(inum, short))
                while chunk := src.read(BSIZE):
                    img.iappend(inum, chunk)
        din = img.read_inode(root)
        din.size = (din.size // BSIZE + 1) * BSIZE
        img._winode(root, din)
    return img


def main(argv: list[str] | None = None) -> int:
    """Run mkfs: ``mkfs fs.img files...``."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("Usage: mkfs fs.img files...\n")
        return 1
    sys.stdout.write(
        f"nmeta {NMETA} (boot, super, log blocks {NLOG} inode blocks "
        f"{NINODEBLOCKS}, bitmap blocks {NBITMAP}) blocks {NBLOCKS} total {FSSIZE}\n"
    )
    try:
        img = make_image(args[0], args[1:])
    except OSError as exc:
        if exc.filename is not None:
            sys.stderr.write(f"{exc.filename}: {exc.strerror}\n")
        else:
            sys.stderr.write(f"{exc}\n")
        return 1
    except ValueError as exc:
        sys.stderr.write(f"mkfs: {exc}\n")
        return 1
    sys.stdout.write(f"balloc: first {img.freeblock} blocks have been allocated\n")
    sys.stdout.write(f"balloc: write bitmap block at sector {img.sb.bmapstart}\n")
    return 0