"""SheetParser: turns key-sheet text into a Sheet of timed tokens."""

import math

from keysheet.errors import (
    EmptyGroup,
    GroupCloseMissingPayload,
    GroupCloseWithoutOpen,
    GroupReopened,
    MalformedDefineLine,
    MalformedLengthFormat,
    MissingLengthDefine,
    UnclosedGroup,
)
from keysheet.sheet_models import (
    Arpeggio,
    Chord,
    Header,
    Key,
    LongPause,
    Pause,
    Sheet,
    ShortPause,
    SinglePress,
    Token,
)

# ── Grammar markers ────────────────────────────────────────────────────────────
DEFINE_MARKER = "#"
GROUP_OPEN = "["
GROUP_CLOSE = "]"
PAUSE_MARKER = "|"
SPACE = " "

LENGTH_DEFINE = "#length"
TITLE_DEFINE = "#title"
WRITER_DEFINE = "#writer"


class SheetParser:
    """
    Line-oriented parser for the key-sheet notation.

    Notation overview
    -----------------
    ``#name value``
        Define line. ``#length M:SS`` is required; ``#title`` and ``#writer``
        are optional. A repeated define overrides the earlier one.

    Blank line
        A run of one or more blank lines becomes a single ``LongPause``.

    Content line
        Every other character is a token:

        - ``[`` ... ``]`` groups keys. Without a space inside, the group is a
          ``Chord``; a space anywhere inside turns it into an ``Arpeggio``.
        - ``|`` is a ``Pause``, also inside a group.
        - A space outside a group is a ``ShortPause``.
        - Anything else is a key, played on its own as a ``SinglePress``.

    A parser instance holds no state between calls; defines are collected
    per call to ``parse()``.
    """

    def parse(self, text: str) -> Sheet:
        """
        Parse a whole sheet.

        Raises:
            ParseError: The specific subclass describing the first problem.
        """
        tokens: list[Token] = []
        defines: dict[str, str] = {}

        previous_blank = False
        for line_no, line in enumerate(self._split_lines(text), start=1):
            if not line:
                if not previous_blank:
                    tokens.append(LongPause())
                previous_blank = True
                continue
            previous_blank = False

            if line.startswith(DEFINE_MARKER):
                name, value = self._parse_define(line, line_no)
                defines[name] = value
                continue

            tokens.extend(self._parse_content(line, line_no))

        return Sheet(header=self._build_header(defines), tokens=tuple(tokens))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _split_lines(self, text: str) -> list[str]:
        """Split on LF, dropping a trailing CR per line and the final empty segment."""
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        return [line[:-1] if line.endswith("\r") else line for line in lines]

    def _parse_define(self, line: str, line_no: int) -> tuple[str, str]:
        name, sep, value = line.partition(SPACE)
        if not sep:
            raise MalformedDefineLine("Defines must be a name and value pair.", line=line_no)
        return name, value

    def _parse_content(self, line: str, line_no: int) -> list[Token]:
        tokens: list[Token] = []
        in_group = False
        in_fast_group = False
        pending: list[Key] | None = None

        for char in line:
            if char == GROUP_OPEN:
                if in_group:
                    raise GroupReopened("Opened a group while another is still open.", line=line_no)
                in_group = True
                pending = []
            elif char == GROUP_CLOSE:
                if not in_group:
                    raise GroupCloseWithoutOpen("Attempted to close a group that was never opened.", line=line_no)
                if pending is None:
                    raise GroupCloseMissingPayload("Open group has no key sequence.", line=line_no)
                if not pending:
                    raise EmptyGroup("Groups must contain at least one key.", line=line_no)
                keys = tuple(pending)
                tokens.append(Arpeggio(keys) if in_fast_group else Chord(keys))
                in_group = False
                in_fast_group = False
                pending = None
            elif char == PAUSE_MARKER:
                tokens.append(Pause())
            elif char == SPACE:
                if in_group:
                    in_fast_group = True
                else:
                    tokens.append(ShortPause())
            elif pending is not None:
                pending.append(Key(char))
            else:
                tokens.append(SinglePress(Key(char)))

        if in_group:
            raise UnclosedGroup("Line ended before the group was closed.", line=line_no)
        return tokens

    def _build_header(self, defines: dict[str, str]) -> Header:
        raw_length = defines.get(LENGTH_DEFINE)
        if raw_length is None:
            raise MissingLengthDefine("Sheet length must be defined with #length.")

        return Header(
            title=defines.get(TITLE_DEFINE),
            writer=defines.get(WRITER_DEFINE),
            length=self._parse_length(raw_length),
        )

    def _parse_length(self, raw: str) -> float:
        minutes_text, sep, seconds_text = raw.partition(":")
        if not sep:
            raise MalformedLengthFormat("Sheet length must be written as minutes:seconds.")

        minutes = self._parse_length_field(minutes_text, "minutes")
        seconds = self._parse_length_field(seconds_text, "seconds")
        return minutes * 60.0 + seconds

    def _parse_length_field(self, text: str, field: str) -> float:
        message = f"Invalid sheet length {field}: {text!r}."
        if text != text.strip() or not text.isascii() or "_" in text:
            raise MalformedLengthFormat(message, field=field)
        try:
            value = float(text)
        except ValueError:
            raise MalformedLengthFormat(message, field=field) from None

        if not math.isfinite(value) or value < 0:
            raise MalformedLengthFormat(f"Sheet length {field} must be a non-negative number.", field=field)
        return value


def parse_sheet(text: str) -> Sheet:
    """Parse sheet text with a fresh SheetParser."""
    return SheetParser().parse(text)
