"""MidiExporter: renders a sheet's timed playback into a MIDI preview file."""

import logging

from midiutil import MIDIFile

from keysheet.duration_allocator import TokenDurations
from keysheet.key_sinks import RecordingKeySink
from keysheet.playback import play
from keysheet.sheet_models import Sheet

logger = logging.getLogger(__name__)

#: 61-key virtual piano layout, lowest key first. Shifted symbols and
#: upper-case letters are the black keys.
VIRTUAL_PIANO_LAYOUT = "1!2@34$5%6^78*9(0qQwWeErtTyYuiIoOpPasSdDfgGhHjJklLzZxcCvVbBnm"
MIDDLE_C_KEY = "t"
MIDDLE_C_MIDI = 60

# Format 1: track 0 carries tempo only, notes go to track 1.
TRACK_CONDUCTOR = 0
TRACK_KEYS = 1
CHANNEL_KEYS = 0


def build_pitch_map(layout: str = VIRTUAL_PIANO_LAYOUT, middle_c_key: str = MIDDLE_C_KEY) -> dict[str, int]:
    """
    Map each layout character to a MIDI note, ascending by one semitone.

    Raises:
        ValueError: If ``middle_c_key`` is not part of ``layout``.
    """
    anchor = layout.find(middle_c_key)
    if anchor < 0:
        raise ValueError(f"Middle C key {middle_c_key!r} is not in the layout.")
    base = MIDDLE_C_MIDI - anchor
    return {char: base + index for index, char in enumerate(layout)}


class MidiExporter:
    """
    Writes the playback timeline of a sheet to a Standard MIDI File.

    The sheet is replayed into a RecordingKeySink, so the file holds exactly
    the presses and releases the host keyboard would receive, at the same
    times. Characters missing from the layout have no pitch and are skipped.

    Timing
    ------
    Playback times in seconds are converted to beats using:
    beats = seconds × (tempo / 60).
    """

    DEFAULT_TEMPO = 120    # BPM; only affects how the file is notated
    DEFAULT_VELOCITY = 80  # MIDI note-on velocity (0-127)

    def __init__(
        self,
        tempo: int = DEFAULT_TEMPO,
        velocity: int = DEFAULT_VELOCITY,
        layout: str = VIRTUAL_PIANO_LAYOUT,
    ) -> None:
        self.tempo = tempo
        self.velocity = velocity
        self.pitch_map = build_pitch_map(layout)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _seconds_to_beats(self, seconds: float) -> float:
        return seconds * (self.tempo / 60.0)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def notes(
        self,
        sheet: Sheet,
        durations: TokenDurations,
        blank_pause: float | None = None,
    ) -> list[tuple[int, float, float]]:
        """
        Replay ``sheet`` on a virtual clock.

        Returns:
            ``(pitch, start, end)`` triples in seconds, ordered by start.
        """
        recorder = RecordingKeySink()
        play(sheet, durations, recorder, sleep=recorder.sleep, blank_pause=blank_pause)

        result: list[tuple[int, float, float]] = []
        for key, start, end in recorder.intervals():
            pitch = self.pitch_map.get(key.char)
            if pitch is None:
                logger.debug("no pitch for key %r, skipped", key.char)
                continue
            if end > start:
                result.append((pitch, start, end))
        return result

    def render(self, title: str, notes: list[tuple[int, float, float]]) -> MIDIFile:
        """Build a MIDIFile holding ``notes`` on a single named track."""
        midi = MIDIFile(numTracks=2, removeDuplicates=False, deinterleave=False)
        midi.addTempo(TRACK_CONDUCTOR, 0, self.tempo)
        midi.addTrackName(TRACK_KEYS, 0, title)

        for pitch, start, end in notes:
            midi.addNote(
                track=TRACK_KEYS,
                channel=CHANNEL_KEYS,
                pitch=pitch,
                time=self._seconds_to_beats(start),
                duration=self._seconds_to_beats(end - start),
                volume=self.velocity,
            )
        return midi

    def export(
        self,
        sheet: Sheet,
        durations: TokenDurations,
        output_path: str,
        blank_pause: float | None = None,
    ) -> int:
        """
        Render ``sheet`` and write it to ``output_path``.

        Returns:
            The number of notes written.

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        notes = self.notes(sheet, durations, blank_pause=blank_pause)
        midi = self.render(sheet.header.display_title, notes)
        with open(output_path, "wb") as f:
            midi.writeFile(f)
        return len(notes)
