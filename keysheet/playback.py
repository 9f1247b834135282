"""Playback: walks a sheet's tokens and drives a KeySink with timed delays."""

import logging
import time
from typing import Callable

from keysheet.duration_allocator import TokenDurations
from keysheet.key_sinks import KeySink
from keysheet.sheet_models import (
    Arpeggio,
    Chord,
    Key,
    LongPause,
    Pause,
    Sheet,
    ShortPause,
    SinglePress,
)

logger = logging.getLogger(__name__)

DEFAULT_COUNTDOWN = 5.0  # seconds to switch focus to the target window

SleepFn = Callable[[float], None]


def _press(sink: KeySink, key: Key) -> None:
    try:
        sink.press(key)
    except Exception as exc:
        logger.debug("press %r failed: %s", key.char, exc)


def _release(sink: KeySink, key: Key) -> None:
    try:
        sink.release(key)
    except Exception as exc:
        logger.debug("release %r failed: %s", key.char, exc)


def play(
    sheet: Sheet,
    durations: TokenDurations,
    key_sink: KeySink,
    *,
    sleep: SleepFn = time.sleep,
    blank_pause: float | None = None,
) -> None:
    """
    Play every token of ``sheet`` in order, blocking until done.

    Injection is best-effort: a failed press or release is logged and
    playback carries on.

    Args:
        sheet:       The parsed sheet.
        durations:   Durations computed for this sheet.
        key_sink:    Receiver of press/release calls.
        sleep:       Delay function, ``time.sleep`` by default.
        blank_pause: Seconds for a blank-line ``LongPause``. Defaults to
                     ``durations.long_pause_duration``.
    """
    long_pause = durations.long_pause_duration if blank_pause is None else blank_pause

    for token in sheet.tokens:
        if isinstance(token, ShortPause):
            sleep(durations.short_pause_duration)
        elif isinstance(token, Pause):
            sleep(durations.pause_duration)
        elif isinstance(token, LongPause):
            sleep(long_pause)
        elif isinstance(token, SinglePress):
            _press(key_sink, token.key)
            sleep(durations.single_duration)
            _release(key_sink, token.key)
        elif isinstance(token, Chord):
            for key in token.keys:
                _press(key_sink, key)
            sleep(durations.single_duration)
            for key in token.keys:
                _release(key_sink, key)
        elif isinstance(token, Arpeggio):
            for key in token.keys:
                _press(key_sink, key)
                sleep(durations.arpeggio_key_duration)
                _release(key_sink, key)
        else:
            raise TypeError(f"Unknown token type: {type(token).__name__}")


class Player:
    """
    Plays sheets through one key sink.

    Usage:

        player = Player(PynputKeySink())
        player.play(sheet, durations)

    Only one Player should drive the host keyboard at a time; interleaved
    presses from two players would leave keys in an unknown state.
    """

    def __init__(
        self,
        key_sink: KeySink,
        sleep: SleepFn = time.sleep,
        countdown: float = DEFAULT_COUNTDOWN,
        blank_pause: float | None = None,
        on_start: Callable[[Sheet], None] | None = None,
    ) -> None:
        """
        Args:
            key_sink:    Receiver of press/release calls.
            sleep:       Delay function used for the countdown and tokens.
            countdown:   Seconds to wait before the first token.
            blank_pause: Seconds for blank-line pauses (see ``play``).
            on_start:    Called with the sheet before the countdown begins.
        """
        self.key_sink = key_sink
        self.sleep = sleep
        self.countdown = countdown
        self.blank_pause = blank_pause
        self.on_start = on_start

    def play(self, sheet: Sheet, durations: TokenDurations) -> None:
        """Announce ``sheet``, wait out the countdown, then play it."""
        if self.on_start is not None:
            self.on_start(sheet)
        if self.countdown > 0:
            self.sleep(self.countdown)
        logger.debug("playing %d tokens of %r", sheet.token_count, sheet.header.display_title)
        play(sheet, durations, self.key_sink, sleep=self.sleep, blank_pause=self.blank_pause)
