"""Unit tests for MidiExporter."""

from pathlib import Path

import pytest

from keysheet.duration_allocator import TokenDurations
from keysheet.midi_exporter import VIRTUAL_PIANO_LAYOUT, MidiExporter, build_pitch_map
from keysheet.sheet_parser import parse_sheet

DURATIONS = TokenDurations(
    short_pause_duration=0.1,
    pause_duration=0.2,
    long_pause_duration=0.4,
    single_duration=1.0,
    arpeggio_key_duration=0.5,
)


def test_pitch_map_anchors_middle_c() -> None:
    pitch_map = build_pitch_map()
    assert pitch_map["t"] == 60
    assert pitch_map["T"] == 61
    assert pitch_map["1"] == 36
    assert pitch_map["m"] == 36 + len(VIRTUAL_PIANO_LAYOUT) - 1


def test_pitch_map_rejects_layout_without_anchor() -> None:
    with pytest.raises(ValueError):
        build_pitch_map("abc")


def test_notes_follow_playback_timeline() -> None:
    sheet = parse_sheet("#length 0:10\nt [yu]")
    notes = MidiExporter().notes(sheet, DURATIONS)
    assert notes == [
        (60, 0.0, 1.0),
        (62, pytest.approx(1.1), pytest.approx(2.1)),
        (64, pytest.approx(1.1), pytest.approx(2.1)),
    ]


def test_keys_outside_layout_are_skipped() -> None:
    sheet = parse_sheet("#length 0:10\n~t")
    assert [pitch for pitch, _, _ in MidiExporter().notes(sheet, DURATIONS)] == [60]


def test_export_writes_midi_file(tmp_path: Path) -> None:
    sheet = parse_sheet("#title Preview\n#length 0:10\n[t u] o\n\np")
    out = tmp_path / "preview.mid"

    written = MidiExporter(tempo=90).export(sheet, DURATIONS, str(out))

    assert written == 4
    assert out.read_bytes().startswith(b"MThd")
