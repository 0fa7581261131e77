from __future__ import annotations

from typing import Dict, List

from .errors import ParseError


QUOTES: Dict[str, str] = {
    '"': '"',
    "'": "'",
    "‘": "’",
    "‚": "‛",
    "“": "”",
    "„": "‟",
    "⹂": "⹂",
    "「": "」",
    "『": "』",
    "〝": "〞",
    "﹁": "﹂",
    "﹃": "﹄",
    "＂": "＂",
    "｢": "｣",
    "«": "»",
    "‹": "›",
    "《": "》",
    "〈": "〉",
}


class StringView:
    """A cursor over a single input string.

    Every movement that can be reverted pushes the previous index onto
    ``history`` so that :meth:`undo` can step back one token at a time. A
    character is escaped when it is preceded by an odd number of consecutive
    backslashes.

    When ``is_rest_block`` is set, :meth:`get_quoted_word` returns the rest of
    the buffer as a single token, without quote or escape processing.
    """

    __slots__ = ("buffer", "index", "history", "is_rest_block")

    def __init__(self, buffer: str, *, is_rest_block: bool = False) -> None:
        self.buffer = buffer
        self.index = 0
        self.history: List[int] = []
        self.is_rest_block = is_rest_block

    def __repr__(self) -> str:
        current = "<eof>" if self.eof else self.current
        return f"<StringView index={self.index} current={current!r} end={self.end} buffer={self.buffer!r}>"

    @property
    def end(self) -> int:
        return len(self.buffer)

    @property
    def eof(self) -> bool:
        return self.index >= self.end

    @property
    def current(self) -> str:
        return self.buffer[self.index]

    @property
    def remaining(self) -> str:
        return self.buffer[self.index:]

    @property
    def is_whitespace(self) -> bool:
        return self.current.isspace() and not self.is_escaped(self.index)

    def is_escaped(self, index: int) -> bool:
        if index <= 0 or index >= self.end:
            return False
        backslashes = 0
        position = index - 1
        while position >= 0 and self.buffer[position] == "\\":
            backslashes += 1
            position -= 1
        return backslashes % 2 == 1

    def skip_string(self, value: str) -> bool:
        if value and self.index + len(value) < self.end and self.buffer.startswith(value, self.index):
            self.history.append(self.index)
            self.index += len(value)
            return True
        return False

    def skip_whitespace(self) -> None:
        self.history.append(self.index)
        while not self.eof and self.is_whitespace:
            self.index += 1

    def escape(self, start: int, end: int) -> str:
        chars = []
        for position in range(start, end):
            # A backslash is dropped when it escapes the character after it.
            if self.is_escaped(position + 1):
                continue
            chars.append(self.buffer[position])
        return "".join(chars)

    def get_word(self) -> str:
        self.skip_whitespace()
        start = self.index
        while not self.eof and not self.is_whitespace:
            self.index += 1
        return self.escape(start, self.index)

    def get_quoted_word(self) -> str:
        if self.is_rest_block:
            self.skip_whitespace()
            rest = self.remaining
            self.index = self.end
            return rest

        self.skip_whitespace()
        if self.eof:
            return ""

        closing = QUOTES.get(self.current)
        if closing is None:
            # get_word records its own history entry; keep a single undo step.
            self.undo()
            return self.get_word()

        self.index += 1
        start = self.index
        while not self.eof and (self.current != closing or self.is_escaped(self.index)):
            self.index += 1

        if self.eof:
            raise ParseError(f"Unclosed quote at position {start - 1}")

        word = self.escape(start, self.index)
        self.index += 1
        return word

    def undo(self) -> None:
        if self.history:
            self.index = self.history.pop()

    def copy(self) -> "StringView":
        view = StringView(self.buffer, is_rest_block=self.is_rest_block)
        view.index = self.index
        view.history = list(self.history)
        return view
