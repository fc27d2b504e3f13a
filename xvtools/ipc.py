"""Pipe exercises: a ping-pong between two workers and a pipe round trip."""

from __future__ import annotations

import os
import sys
import threading
from collections.abc import Iterable


def pingpong() -> list[str]:
    """Exchange one byte each way over two pipes and return the report lines.

    The child worker reports the ping it received, then the parent
    reports the pong.  Each line starts with the reporting worker's id.
    """
    to_child_r, to_child_w = os.pipe()
    to_parent_r, to_parent_w = os.pipe()
    lines: list[str] = []

    def child() -> None:
        try:
            data = os.read(to_child_r, 1)
            lines.append(f"{threading.get_native_id()}: received ping")
            os.write(to_parent_w, data)
        finally:
            os.close(to_child_r)
            os.close(to_parent_w)

    worker = threading.Thread(target=child)
    worker.start()
    try:
        os.write(to_child_w, b"A")
        os.read(to_parent_r, 1)
        lines.append(f"{threading.get_native_id()}: received pong")
    finally:
        os.close(to_child_w)
        os.close(to_parent_r)
        worker.join()
    return lines


def pipe_roundtrip(messages: Iterable[str]) -> list[str]:
    """Send each message, NUL-terminated, through one pipe and read it back."""
    read_fd, write_fd = os.pipe()
    received: list[str] = []
    try:
        for message in messages:
            payload = message.encode() + b"\0"
            writer = threading.Thread(target=_write_all, args=(write_fd, payload))
            writer.start()
            data = b""
            while len(data) < len(payload):
                chunk = os.read(read_fd, len(payload) - len(data))
                if not chunk:
                    break
                data += chunk
            writer.join()
            received.append(data.split(b"\0", 1)[0].decode())
    finally:
        os.close(read_fd)
        os.close(write_fd)
    return received


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        view = view[os.write(fd, view):]


def main(argv: list[str] | None = None) -> int:
    """Run ``pingpong`` (the default) or ``pipetest``."""
    args = sys.argv[1:] if argv is None else list(argv)
    which = args[0] if args else "pingpong"
    if which == "pingpong":
        for line in pingpong():
            sys.stdout.write(line + "\n")
        return 0
    if which == "pipetest":
        last = pipe_roundtrip(["hello", "world"])[-1]
        sys.stdout.write(f"Read from pipe: {last}\n")
        return 0
    sys.stderr.write("usage: ipc [pingpong|pipetest]\n")
    return 1