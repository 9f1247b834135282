"""Unit tests for SheetParser."""

import pytest

from keysheet.errors import (
    EmptyGroup,
    GroupCloseMissingPayload,
    GroupCloseWithoutOpen,
    GroupReopened,
    MalformedDefineLine,
    MalformedLengthFormat,
    MissingLengthDefine,
    ParseError,
    UnclosedGroup,
)
from keysheet.sheet_models import (
    Arpeggio,
    Chord,
    Key,
    LongPause,
    Pause,
    ShortPause,
    SinglePress,
)
from keysheet.sheet_parser import SheetParser, parse_sheet

HEADER = "#length 1:30\n"


def _tokens(body: str) -> tuple:
    return parse_sheet(HEADER + body).tokens


# ---------------------------------------------------------------------------
# Content lines
# ---------------------------------------------------------------------------

def test_group_without_space_is_chord() -> None:
    assert _tokens("[AB]") == (Chord((Key("A"), Key("B"))),)


def test_group_with_space_is_arpeggio() -> None:
    assert _tokens("[A B]") == (Arpeggio((Key("A"), Key("B"))),)


def test_space_anywhere_in_group_makes_arpeggio() -> None:
    assert _tokens("[ AB]") == (Arpeggio((Key("A"), Key("B"))),)
    assert _tokens("[AB ]") == (Arpeggio((Key("A"), Key("B"))),)


def test_pause_marker_between_singles() -> None:
    assert _tokens("A|B") == (SinglePress(Key("A")), Pause(), SinglePress(Key("B")))


def test_space_outside_group_is_short_pause() -> None:
    assert _tokens("a b") == (SinglePress(Key("a")), ShortPause(), SinglePress(Key("b")))


def test_pause_marker_inside_group_emits_pause_first() -> None:
    assert _tokens("[a|b]") == (Pause(), Chord((Key("a"), Key("b"))))


def test_fast_flag_resets_after_close() -> None:
    assert _tokens("[a b][cd]") == (
        Arpeggio((Key("a"), Key("b"))),
        Chord((Key("c"), Key("d"))),
    )


def test_line_of_spaces_is_content() -> None:
    assert _tokens("  ") == (ShortPause(), ShortPause())


def test_unicode_characters_are_keys() -> None:
    assert _tokens("é") == (SinglePress(Key("é")),)


def test_tokens_across_lines_keep_order() -> None:
    assert _tokens("ab\ncd") == tuple(SinglePress(Key(c)) for c in "abcd")


# ---------------------------------------------------------------------------
# Blank lines
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("blank_lines", [1, 2, 5])
def test_blank_run_collapses_to_one_long_pause(blank_lines: int) -> None:
    tokens = _tokens("a" + "\n" * (blank_lines + 1) + "b")
    assert tokens == (SinglePress(Key("a")), LongPause(), SinglePress(Key("b")))


def test_separate_blank_runs_each_emit_long_pause() -> None:
    tokens = _tokens("a\n\nb\n\n\nc")
    assert tokens.count(LongPause()) == 2


def test_blank_line_after_define_still_counts() -> None:
    tokens = parse_sheet("#length 0:10\n\na").tokens
    assert tokens == (LongPause(), SinglePress(Key("a")))


def test_trailing_newline_adds_no_token() -> None:
    assert _tokens("a\n") == (SinglePress(Key("a")),)


def test_crlf_line_endings() -> None:
    sheet = parse_sheet("#length 0:10\r\n#title Song\r\na\r\n\r\nb\r\n")
    assert sheet.header.title == "Song"
    assert sheet.tokens == (SinglePress(Key("a")), LongPause(), SinglePress(Key("b")))


# ---------------------------------------------------------------------------
# Defines and header
# ---------------------------------------------------------------------------

def test_length_minutes_and_seconds() -> None:
    assert parse_sheet("#length 1:30").header.length == 90.0


def test_length_accepts_fractions() -> None:
    assert parse_sheet("#length 0.5:1.5").header.length == pytest.approx(31.5)


def test_title_and_writer_copied_verbatim() -> None:
    sheet = parse_sheet("#title Fur Elise  \n#writer L. van Beethoven\n#length 2:00\na")
    assert sheet.header.title == "Fur Elise  "
    assert sheet.header.writer == "L. van Beethoven"


def test_missing_title_and_writer_are_none() -> None:
    header = parse_sheet(HEADER + "a").header
    assert header.title is None
    assert header.writer is None
    assert header.display_title == "Unknown"
    assert header.display_writer == "Unknown"


def test_redefined_key_last_wins() -> None:
    sheet = parse_sheet("#length 1:00\n#length 0:10\n#title A\n#title B")
    assert sheet.header.length == 10.0
    assert sheet.header.title == "B"


def test_define_lines_emit_no_tokens() -> None:
    assert parse_sheet("#length 0:10\n#comment anything [ ] |").tokens == ()


def test_define_without_value_separator_fails() -> None:
    with pytest.raises(MalformedDefineLine) as info:
        parse_sheet("#length\na")
    assert info.value.line == 1


def test_missing_length_fails() -> None:
    with pytest.raises(MissingLengthDefine):
        parse_sheet("#title Song\nabc")


def test_length_without_colon_fails() -> None:
    with pytest.raises(MalformedLengthFormat) as info:
        parse_sheet("#length 90")
    assert info.value.field is None


@pytest.mark.parametrize(
    ("value", "field"),
    [
        ("x:30", "minutes"),
        (":30", "minutes"),
        ("1:", "seconds"),
        ("1:3o", "seconds"),
        ("1: 30", "seconds"),
        ("-1:30", "minutes"),
        ("1:nan", "seconds"),
        ("1_0:0", "minutes"),
        ("0:1_5", "seconds"),
        ("\u0661:00", "minutes"),
    ],
)
def test_bad_length_field_is_reported(value: str, field: str) -> None:
    with pytest.raises(MalformedLengthFormat) as info:
        parse_sheet(f"#length {value}")
    assert info.value.field == field


# ---------------------------------------------------------------------------
# Group errors
# ---------------------------------------------------------------------------

def test_close_without_open_fails() -> None:
    with pytest.raises(GroupCloseWithoutOpen) as info:
        parse_sheet(HEADER + "ab]")
    assert info.value.line == 2


def test_reopen_inside_group_fails() -> None:
    with pytest.raises(GroupReopened):
        parse_sheet(HEADER + "[a[b]")


def test_empty_group_fails() -> None:
    with pytest.raises(EmptyGroup):
        parse_sheet(HEADER + "[]")


def test_unclosed_group_fails() -> None:
    with pytest.raises(UnclosedGroup):
        parse_sheet(HEADER + "[ab\ncd]")


def test_missing_payload_subclasses_parse_error() -> None:
    assert issubclass(GroupCloseMissingPayload, ParseError)


def test_parse_errors_are_value_errors() -> None:
    with pytest.raises(ValueError):
        parse_sheet("no length here")


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------

def test_parsing_twice_gives_equal_sheets() -> None:
    text = "#title T\n#length 0:42\n[ab] c|d\n\n\n[e f]"
    parser = SheetParser()
    assert parser.parse(text) == parser.parse(text)


def test_parser_keeps_no_defines_between_calls() -> None:
    parser = SheetParser()
    parser.parse("#title First\n#length 0:10")
    assert parser.parse("#length 0:10").header.title is None
