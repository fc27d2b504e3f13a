"""Parser for the shell's command language.

The grammar knows words, pipes ``|``, sequences ``;``, background jobs
``&``, parenthesised blocks and the redirections ``<``, ``>`` and ``>>``.
A command takes at most ``MAXARGS - 1`` words.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

MAXARGS = 10
WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed.

    ``leftover`` holds the unparsed rest of the line when parsing stopped
    before its end.
    """

    def __init__(self, message: str, leftover: str | None = None) -> None:
        super().__init__(message)
        self.leftover = leftover


class RedirMode(Enum):
    """How a redirected file is opened."""

    READ = "<"
    TRUNCATE = ">"
    APPEND = ">>"

    @property
    def fd(self) -> int:
        """The descriptor the file replaces."""
        return 0 if self is RedirMode.READ else 1


@dataclass
class ExecCmd:
    """A simple command: a program and its arguments."""

    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """A command whose descriptor *fd* is replaced by *file*."""

    cmd: Command
    file: str
    mode: RedirMode
    fd: int


@dataclass
class PipeCmd:
    """Two commands connected by a pipe."""

    left: Command
    right: Command


@dataclass
class ListCmd:
    """Two commands run one after the other."""

    left: Command
    right: Command


@dataclass
class BackCmd:
    """A command run in the background."""

    cmd: Command


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class _Lexer:
    def __init__(self, line: str) -> None:
        self.text = line.split("\0", 1)[0]
        self.pos = 0

    def _skip(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    @property
    def rest(self) -> str:
        return self.text[self.pos:]

    def at_end(self) -> bool:
        self._skip()
        return self.pos >= len(self.text)

    def peek(self, toks: str) -> bool:
        self._skip()
        return self.pos < len(self.text) and self.text[self.pos] in toks

    def next(self) -> tuple[str, str]:
        """Return ``(kind, text)``; kind is ``""`` at the end, ``"a"`` for a word."""
        self._skip()
        text = self.text
        if self.pos >= len(text):
            return "", ""
        start = self.pos
        ch = text[start]
        if ch in "|();&<":
            self.pos += 1
            kind = ch
        elif ch == ">":
            self.pos += 1
            kind = ">"
            if self.pos < len(text) and text[self.pos] == ">":
                self.pos += 1
                kind = ">>"
        else:
            while self.pos < len(text) and text[self.pos] not in WHITESPACE + SYMBOLS:
                self.pos += 1
            kind = "a"
        token = text[start:self.pos]
        self._skip()
        return kind, token


def tokenize(line: str) -> list[str]:
    """Split *line* into words and operator tokens."""
    lexer = _Lexer(line)
    tokens = []
    while True:
        kind, token = lexer.next()
        if not kind:
            return tokens
        tokens.append(token)


class _Parser:
    def __init__(self, line: str) -> None:
        self.lex = _Lexer(line)

    def line(self) -> Command:
        cmd = self.pipe()
        while self.lex.peek("&"):
            self.lex.next()
            cmd = BackCmd(cmd)
        if self.lex.peek(";"):
            self.lex.next()
            cmd = ListCmd(cmd, self.line())
        return cmd

    def pipe(self) -> Command:
        cmd = self.exec()
        if self.lex.peek("|"):
            self.lex.next()
            cmd = PipeCmd(cmd, self.pipe())
        return cmd

    def redirs(self, cmd: Command) -> Command:
        while self.lex.peek("<>"):
            op, _ = self.lex.next()
            kind, name = self.lex.next()
            if kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            mode = RedirMode(op)
            cmd = RedirCmd(cmd, name, mode, mode.fd)
        return cmd

    def block(self) -> Command:
        if not self.lex.peek("("):
            raise ShellSyntaxError("parseblock")
        self.lex.next()
        cmd = self.line()
        if not self.lex.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.lex.next()
        return self.redirs(cmd)

    def exec(self) -> Command:
        if self.lex.peek("("):
            return self.block()
        command = ExecCmd()
        ret = self.redirs(command)
        while not self.lex.peek("|)&;"):
            kind, word = self.lex.next()
            if not kind:
                break
            if kind != "a":
                raise ShellSyntaxError("syntax")
            command.argv.append(word)
            if len(command.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.redirs(ret)
        return ret


def parse(line: str) -> Command:
    """Parse one command line into a command tree."""
    parser = _Parser(line)
    cmd = parser.line()
    if not parser.lex.at_end():
        raise ShellSyntaxError("syntax", leftover=parser.lex.rest)
    return cmd