# xvtools

A set of small, dependency-free Unix-style tools and building blocks written in
plain Python:

- text tools: `cat`, `echo`, `grep` (a tiny regular-expression matcher that
  understands only `^`, `.`, `*` and `$`), `wc`, `xargs`
- file tools: `find`, `ls`
- demonstrations: a prime sieve, a ping-pong exchange over pipes, a pipe round
  trip, a file-system stress run and a random file-system "grinder"
- a parser for a minimal shell language (pipes, lists, background jobs,
  redirections and parenthesised blocks)
- a first-fit heap allocator model in the Kernighan & Ritchie style
- a builder for simple block-structured file-system images
- packing and unpacking of virtio descriptor, ring and block-request structures

## Installation

```
pip install xvtools
```

To run the test suite:

```
pip install "xvtools[test]"
pytest
```

## Command-line tools

Every tool is installed with an `xv-` prefix so it never shadows the programs
already on your system.

```
xv-echo hello world
xv-cat notes.txt
xv-grep '^ab*c$' notes.txt
xv-wc notes.txt
xv-find . README.md
xv-ls .
xv-primes
xv-pingpong
xv-pingpong pipetest
xv-xargs echo
xv-stressfs
xv-mkfs fs.img README.md
xv-grind
```

- `xv-cat`, `xv-grep` and `xv-wc` read standard input when no file is given.
- `xv-primes` prints `prime N` for every prime up to 280.
- `xv-xargs` runs one command per input line, with the line as its last
  argument. The commands it can run are `echo`, `cat`, `grep` and `wc` of this
  package.
- `xv-stressfs` writes and reads back files `stressfs0` to `stressfs4` in the
  current directory.
- `xv-mkfs` writes a 2000-block image whose root directory holds the given
  files; a `user/` prefix and a leading `_` are removed from their names.
- `xv-grind [directory]` runs random file-system operations round after round
  and does not stop by itself.

## Library use

### Formatting

`xvtools.fmt` implements a small `printf` that knows `%d`, `%u`, `%x`, `%p`,
`%s` and `%%` (with `l`/`ll` length prefixes); integers are taken as 32-bit
values and hexadecimal digits are upper case.

```python
from xvtools.fmt import format, printf

text = format("%d %x %s\n", -5, 255, "hi")   # "-5 FF hi\n"
printf("%s has %d lines\n", "notes.txt", 42)
```

### Matching

```python
from xvtools.grep import match

match("^ab*c$", "abbbc")        # True
match("x.z", "the xyz marks")   # True
```

### Counting

```python
import io
from xvtools.wc import count

counts = count(io.BytesIO(b"one two\nthree\n"))
counts.lines, counts.words, counts.chars   # (2, 3, 14)
```

### Finding and listing

```python
import sys
from xvtools.find import find
from xvtools.ls import ls, fmtname

for path in find(".", "README.md"):
    print(path)

ls(".", sys.stdout)
```

### Shell parsing

```python
from xvtools.sh import parse, tokenize, ShellSyntaxError

tree = parse("cat < in.txt | grep foo > out.txt; echo done &")
tokens = tokenize("ls | wc")   # ["ls", "|", "wc"]

try:
    parse("(echo hi")
except ShellSyntaxError as exc:
    print("bad command:", exc)
```

The tree is made of `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd`
nodes; redirections carry a `RedirMode`.

### Prime sieve

```python
from xvtools.primes import sieve

list(sieve(30))   # [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]
```

### Pipes

```python
from xvtools.ipc import pingpong, pipe_roundtrip

pingpong()                          # ["<id>: received ping", "<id>: received pong"]
pipe_roundtrip(["hello", "world"])  # ["hello", "world"]
```

### Heap model

```python
from xvtools.umalloc import Heap

heap = Heap(1 << 20)
addr = heap.malloc(100)
heap.free(addr)
```

### File-system images

```python
from xvtools.mkfs import make_image, FsImage

make_image("fs.img", ["README.md", "notes.txt"])
```

`FsImage` gives lower-level access: allocate inodes with `ialloc`, append data
with `iappend`, inspect them with `read_inode`, and finish with `close`. The
layout is described by a `Superblock`.

### Random operations

```python
from xvtools.grind import Grinder, Rand, do_rand

rng = Rand(1)
value = rng.next()

grinder = Grinder("/tmp/scratch", seed=1)
grinder.run(1000)   # Counter of the operation codes chosen
```

### Virtio structures

```python
from xvtools.virtio import VirtqDesc, BlkRequest

raw = VirtqDesc(addr=0x1000, length=512, flags=1, next=2).pack()
desc = VirtqDesc.unpack(raw)
```

## What this package does not do

- The shell module only parses command lines; there is no interactive shell
  that runs them.
- There are no `sleep`, `kill`, `ln`, `mkdir`, `rm` or `open` commands, and no
  separate string or number helper functions.
- The image builder has a fixed size and layout and cannot read back or check
  an existing image.