"""Interactive line editing with history for ANSI and dumb terminals.

The editor consumes terminal input through :meth:`Readline.feed` and
collects the bytes to send back to the terminal, which
:meth:`Readline.take_output` returns.  Until the terminal answers the
status request sent at construction, the editor treats it as a dumb
terminal.  In that mode only typing and backspace work and no history is
kept.  Once the terminal reports its width, the editor also supports
cursor movement, in-line editing and a command history.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional, Union

HISTORY = 256
LINE_SIZE = 256

Action = Callable[[str], Optional[bool]]


class _State(Enum):
    NORMAL = auto()
    ESCAPE = auto()
    BRACKET = auto()
    NUM = auto()
    ACTION = auto()


@dataclass(eq=False)
class _Line:
    buf: list[str] = field(default_factory=lambda: [" "] * LINE_SIZE)
    pos: int = 0
    end: int = 0

    @property
    def text(self) -> str:
        return "".join(self.buf[: self.end])


class Readline:
    """A line editor that runs ``action`` on every line entered.

    ``action`` receives the line's text.  If it returns a true value, the
    editor stops and ignores any further input.
    """

    def __init__(self, prompt: str, action: Action) -> None:
        self.prompt = prompt
        self.action = action
        self.width = 0
        self.finished = False

        self._out: list[str] = []
        self._pending: deque[str] = deque()
        self._line = _Line()
        self._lines: list[_Line] = [self._line]
        self._state = _State.NORMAL
        self._num = [0, 0]
        self._num_idx = 0
        self._suspended = True
        self._started = False
        self._running = False

        # Ask for the terminal status to find out whether it speaks ANSI.
        self._write("\033[5n")

    # -- public interface ------------------------------------------------

    def start(self) -> None:
        """Print the first prompt and process any input already fed."""
        if self._started:
            raise RuntimeError("readline already started")
        self._started = True
        self.resume()

    def feed(self, data: Union[str, bytes]) -> None:
        """Hand terminal input to the editor."""
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("latin-1")
        self._pending.extend(data)
        self._run()

    def suspend(self) -> None:
        """Hide the command line so that other output can be shown."""
        if self._state is not _State.ACTION:
            if self.width:
                self._hide_line()
            self._write("\r")
        self._suspended = True

    def resume(self) -> None:
        """Show the command line again and handle input held meanwhile."""
        if self._state is not _State.ACTION:
            self._unhide_line()
        self._suspended = False
        self._run()

    def take_output(self) -> str:
        """Return the terminal output produced so far and clear it."""
        text = "".join(self._out)
        self._out.clear()
        return text

    def history(self) -> list[str]:
        """Return the lines kept in history, oldest first."""
        lines = self._lines
        if lines and lines[-1].end == 0:
            lines = lines[:-1]
        return [line.text for line in lines]

    # -- input processing ------------------------------------------------

    def _run(self) -> None:
        if self._running:
            return
        self._running = True
        try:
            while (
                self._pending
                and self._started
                and not self._suspended
                and not self.finished
            ):
                self._handle(ord(self._pending.popleft()))
        finally:
            self._running = False

    def _handle(self, ch: int) -> None:
        state = self._state
        if state is _State.NORMAL:
            self._handle_normal(ch)
        elif state is _State.ESCAPE:
            self._state = _State.BRACKET if ch == ord("[") else _State.NORMAL
        elif state is _State.BRACKET:
            self._handle_bracket(ch)
        elif state is _State.NUM:
            self._handle_num(ch)
        else:
            raise RuntimeError("input handled while an action is running")

    def _handle_normal(self, ch: int) -> None:
        line = self._line
        if ch == 0x1B:
            self._state = _State.ESCAPE
            self._num = [0, 0]
            self._num_idx = 0
        elif ch == ord("\r"):
            self._enter()
        elif ch in (ord("\b"), 127):
            # ANSI DEL acts as backspace on some terminals.
            self._backspace()
        elif ch == 1:  # Ctrl-A
            if self.width:
                self._set_cursor(0)
        elif ch == 5:  # Ctrl-E
            if self.width:
                self._set_cursor(line.end)
        elif 32 <= ch <= 126:
            self._insert(chr(ch))

    def _handle_bracket(self, ch: int) -> None:
        c = chr(ch)
        line = self._line
        if c.isascii() and c.isdigit():
            self._state = _State.NUM
            self._handle_num(ch)
            return
        if c == "A":
            if self._prev(line) is not None:
                self._hide_line()
                self._line = self._prev(line)
                self._unhide_line()
        elif c == "B":
            if self._next(line) is not None:
                self._hide_line()
                self._line = self._next(line)
                self._unhide_line()
        elif c == "D":
            if line.pos != 0 and self.width:
                self._set_cursor(line.pos - 1)
        elif c == "C":
            if line.pos != line.end:
                self._set_cursor(line.pos + 1)
        elif c == "H":
            if self.width:
                self._set_cursor(0)
        elif c == "F":
            if self.width:
                self._set_cursor(line.end)
        self._state = _State.NORMAL

    def _handle_num(self, ch: int) -> None:
        c = chr(ch)
        if c.isascii() and c.isdigit():
            self._num[self._num_idx] = self._num[self._num_idx] * 10 + int(c)
            return
        if c == ";":
            if self._num_idx + 1 < len(self._num):
                self._num_idx += 1
                return
        elif c == "R":
            if self._num_idx == 1:
                self.width = self._num[1]
                self._write("\0338")
        elif c == "n":
            if self._num_idx == 0 and self._num[0] == 0:
                # ANSI terminal: enable line wrap, save the cursor, jump to
                # the far right and ask where we ended up.
                self._write("\033[?7h\0337\033[999C\033[6n")
        elif c == "~":
            if self._num_idx == 0:
                code = self._num[0]
                if code == 1:
                    if self.width:
                        self._set_cursor(0)
                elif code == 3:
                    self._delete_char()
                elif code == 4:
                    if self.width:
                        self._set_cursor(self._line.end)
        self._state = _State.NORMAL

    def _enter(self) -> None:
        newline = self._get_newline()
        oldline = self._line

        if oldline.pos != oldline.end:
            self._set_cursor_temp(oldline.end)
        self._write("\r\n")

        if self._next(oldline) is not None:
            # A re-issued older command moves to the front of the history.
            self._lines.remove(oldline)
            self._lines.append(oldline)

        if newline is not self._line:
            self._lines.append(newline)
            self._line = newline

        text = oldline.text
        self._line.pos = 0
        self._line.end = 0

        self._state = _State.ACTION
        if self.action(text):
            self.finished = True
            return

        self._state = _State.NORMAL
        if not self._suspended:
            self._write(self.prompt)

    def _insert(self, c: str) -> None:
        if self._line.end + 1 == LINE_SIZE:
            return
        if self._next(self._line) is not None:
            self._dup_line()
        line = self._line
        if line.end != line.pos:
            line.buf[line.pos + 1 : line.end + 1] = line.buf[line.pos : line.end]
        line.end += 1
        line.buf[line.pos] = c
        line.pos += 1
        self._write(c)
        self._display_to_end()

    def _backspace(self) -> None:
        if self._line.pos == 0:
            return
        if self.width:
            if self._next(self._line) is not None:
                self._dup_line()
            line = self._line
            if line.pos != line.end:
                line.buf[line.pos - 1 : line.end - 1] = line.buf[line.pos : line.end]
            line.buf[line.end - 1] = " "
            self._set_cursor(line.pos - 1)
            self._display_to_end()
        else:
            self._line.pos -= 1
            self._write("\b \b")
        self._line.end -= 1

    def _delete_char(self) -> None:
        if self._line.pos == self._line.end:
            return
        if self._next(self._line) is not None:
            self._dup_line()
        line = self._line
        line.buf[line.pos : line.end - 1] = line.buf[line.pos + 1 : line.end]
        line.buf[line.end - 1] = " "
        self._display_to_end()
        line.end -= 1

    # -- history ---------------------------------------------------------

    def _prev(self, line: _Line) -> Optional[_Line]:
        index = self._lines.index(line)
        return self._lines[index - 1] if index > 0 else None

    def _next(self, line: _Line) -> Optional[_Line]:
        index = self._lines.index(line)
        return self._lines[index + 1] if index + 1 < len(self._lines) else None

    def _get_newline(self) -> _Line:
        if not self.width or self._line.end == 0:
            return self._line
        newest = self._lines[-1]
        if newest.end == 0:
            self._lines.remove(newest)
            return newest
        if len(self._lines) < HISTORY:
            return _Line()
        oldest = next(line for line in self._lines if line is not self._line)
        self._lines.remove(oldest)
        return oldest

    def _dup_line(self) -> None:
        line = self._get_newline()
        if line is self._line:
            return
        line.buf = list(self._line.buf)
        line.pos = self._line.pos
        line.end = self._line.end
        self._lines.append(line)
        self._line = line

    # -- display ---------------------------------------------------------

    def _write(self, text: str) -> None:
        self._out.append(text)

    def _line_at(self, pos: int) -> int:
        return (pos + len(self.prompt)) // self.width

    def _column_at(self, pos: int) -> int:
        return (pos + len(self.prompt)) % self.width

    def _set_cursor_temp(self, pos: int) -> None:
        virt = self._line_at(pos) - self._line_at(self._line.pos)
        horiz = self._column_at(pos)
        back = virt < 0
        virt = abs(virt)
        if virt:
            self._write(f"\033[{virt}{'A' if back else 'B'}")
        if horiz:
            self._write(f"\r\033[{horiz}C")

    def _set_cursor(self, pos: int) -> None:
        self._set_cursor_temp(pos)
        self._line.pos = pos

    def _display_to_end(self) -> None:
        line = self._line
        if line.end == line.pos:
            return
        pos = line.pos
        self._write("".join(line.buf[line.pos : line.end]))
        # Some terminals only scroll once the next line gets a character.
        if self._column_at(line.end) == 0:
            self._write(" \b")
        line.pos = line.end
        self._set_cursor_temp(pos)
        line.pos = pos

    def _hide_line(self) -> None:
        self._set_cursor_temp(self._line.end)
        self._write("\r\033[2K")
        for _ in range(self._line_at(self._line.end)):
            self._write("\033[A\033[2K")

    def _unhide_line(self) -> None:
        self._write(self.prompt)
        if self.width:
            pos = self._line.pos
            self._line.pos = 0
            self._display_to_end()
            self._set_cursor(pos)
        else:
            self._write(self._line.text)