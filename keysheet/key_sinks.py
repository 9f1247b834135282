"""Key sinks: where playback sends its press and release calls."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from keysheet.sheet_models import Key

PRESS = "press"
RELEASE = "release"


class KeySink(ABC):
    """Abstract receiver of key presses and releases."""

    @abstractmethod
    def press(self, key: Key) -> None:
        """Press ``key`` and leave it held."""

    @abstractmethod
    def release(self, key: Key) -> None:
        """Release ``key``."""


class PynputKeySink(KeySink):
    """
    Sends keystrokes to the host through ``pynput``.

    Whatever window has focus receives the keys, so focus the target
    application before playback starts.
    """

    def __init__(self, controller: Any | None = None) -> None:
        if controller is None:
            from pynput.keyboard import Controller

            controller = Controller()
        self._controller = controller

    def press(self, key: Key) -> None:
        self._controller.press(key.char)

    def release(self, key: Key) -> None:
        self._controller.release(key.char)


@dataclass(frozen=True)
class KeyEvent:
    """One recorded press or release at a point on the virtual clock."""

    time: float
    action: str
    key: Key


class RecordingKeySink(KeySink):
    """
    Records key events against a virtual clock instead of touching the host.

    Pass ``sink.sleep`` as the playback sleep function so that delays advance
    the clock immediately:

        sink = RecordingKeySink()
        play(sheet, durations, sink, sleep=sink.sleep)
    """

    def __init__(self) -> None:
        self.clock = 0.0
        self.events: list[KeyEvent] = []

    def sleep(self, seconds: float) -> None:
        self.clock += seconds

    def press(self, key: Key) -> None:
        self.events.append(KeyEvent(self.clock, PRESS, key))

    def release(self, key: Key) -> None:
        self.events.append(KeyEvent(self.clock, RELEASE, key))

    def intervals(self) -> list[tuple[Key, float, float]]:
        """
        Pair presses with their releases.

        Returns:
            ``(key, start, end)`` triples ordered by press time. Presses that
            were never released are left out.
        """
        held: dict[Key, list[float]] = {}
        result: list[tuple[Key, float, float]] = []
        for event in self.events:
            if event.action == PRESS:
                held.setdefault(event.key, []).append(event.time)
            elif held.get(event.key):
                start = held[event.key].pop(0)
                result.append((event.key, start, event.time))
        result.sort(key=lambda item: item[1])
        return result
