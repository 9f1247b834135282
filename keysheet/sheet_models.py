"""Data models for parsed key sheets."""

from dataclasses import dataclass
from typing import Union

from keysheet.errors import EmptySheet

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Key:
    """A keyboard symbol built from a single character."""

    char: str

    def __post_init__(self) -> None:
        if not isinstance(self.char, str) or len(self.char) != 1:
            raise ValueError(f"Key must be a single character, got {self.char!r}.")

    def __str__(self) -> str:
        return self.char


@dataclass(frozen=True)
class ShortPause:
    """Pause written as a space outside a group."""


@dataclass(frozen=True)
class Pause:
    """Pause written as ``|``."""


@dataclass(frozen=True)
class LongPause:
    """Pause produced by a run of blank lines."""


@dataclass(frozen=True)
class SinglePress:
    """One key pressed and released as one timed unit."""

    key: Key


@dataclass(frozen=True)
class Chord:
    """Keys pressed together, held for one unit, released together."""

    keys: tuple[Key, ...]


@dataclass(frozen=True)
class Arpeggio:
    """Keys pressed and released one at a time, one unit each."""

    keys: tuple[Key, ...]


Token = Union[ShortPause, Pause, LongPause, SinglePress, Chord, Arpeggio]


@dataclass(frozen=True)
class Header:
    """
    Sheet metadata collected from define lines.

    Attributes:
        title:  Value of ``#title``, if present.
        writer: Value of ``#writer``, if present.
        length: Total playback length in seconds.
    """

    title: str | None
    writer: str | None
    length: float

    @property
    def display_title(self) -> str:
        return self.title if self.title is not None else UNKNOWN

    @property
    def display_writer(self) -> str:
        return self.writer if self.writer is not None else UNKNOWN


@dataclass(frozen=True)
class Sheet:
    """A parsed sheet: header plus the ordered token sequence."""

    header: Header
    tokens: tuple[Token, ...]

    @property
    def token_count(self) -> int:
        return len(self.tokens)

    @property
    def multiplier(self) -> float:
        """
        Average time in seconds allotted to each token.

        Raises:
            EmptySheet: If the sheet has no tokens.
        """
        if not self.tokens:
            raise EmptySheet("Sheet has no tokens to spread its length over.")
        return self.header.length / len(self.tokens)
