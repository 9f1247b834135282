"""keysheet CLI entry point."""

import functools
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Any, Callable, NoReturn

import click

from keysheet import __version__
from keysheet.duration_allocator import PauseDistribution, TokenDurations, allocate
from keysheet.errors import KeysheetError
from keysheet.key_sinks import PynputKeySink
from keysheet.midi_exporter import MidiExporter
from keysheet.playback import DEFAULT_COUNTDOWN, Player
from keysheet.sheet_library import load_sheets
from keysheet.sheet_models import Sheet
from keysheet.sheet_parser import parse_sheet

_DEFAULTS = PauseDistribution()


def _fail(message: str) -> NoReturn:
    click.echo(f"  ERROR: {message}", err=True)
    sys.exit(1)


def _read_sheet(path: str) -> Sheet:
    try:
        return parse_sheet(Path(path).read_text(encoding="utf-8"))
    except (KeysheetError, UnicodeDecodeError) as exc:
        _fail(f"Could not parse '{path}': {exc}")


def _durations_for(sheet: Sheet, dist: PauseDistribution) -> TokenDurations:
    try:
        return allocate(sheet.multiplier, dist)
    except KeysheetError as exc:
        _fail(str(exc))


def _describe(sheet: Sheet) -> str:
    return f"'{sheet.header.display_title}' by {sheet.header.display_writer}"


def _announce(countdown: float) -> Callable[[Sheet], None]:
    def announce(sheet: Sheet) -> None:
        click.echo(f"Playing {_describe(sheet)}")
        if countdown > 0:
            click.echo(f"Starting in {countdown:g} seconds...")

    return announce


def distribution_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the pause distribution options and pass a PauseDistribution as ``dist``."""

    @click.option("--short", type=float, default=_DEFAULTS.short, show_default=True,
                  help="Share of pause time for short pauses (spaces).")
    @click.option("--standard", type=float, default=_DEFAULTS.standard, show_default=True,
                  help="Share of pause time for '|' pauses.")
    @click.option("--long", "long_", type=float, default=_DEFAULTS.long, show_default=True,
                  help="Share of pause time for the long category.")
    @click.option("--pause-ratio", type=float, default=_DEFAULTS.pause_ratio, show_default=True,
                  help="Notes-to-pauses weighting (20 means 20:1).")
    @click.option("--fast-proportion", type=float, default=_DEFAULTS.many_fast_proportion,
                  show_default=True, help="Fraction of each token's time per arpeggio key.")
    @click.option("--blank-pause", type=float, default=None, metavar="SECS",
                  help="Seconds for blank-line pauses. Defaults to the long pause duration.")
    @functools.wraps(func)
    def wrapper(
        short: float,
        standard: float,
        long_: float,
        pause_ratio: float,
        fast_proportion: float,
        **kwargs: Any,
    ) -> Any:
        dist = PauseDistribution(
            short=short,
            standard=standard,
            long=long_,
            pause_ratio=pause_ratio,
            many_fast_proportion=fast_proportion,
        )
        return func(dist=dist, **kwargs)

    return wrapper


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="keysheet")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """keysheet — play key-press sheets on the host keyboard."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ── list subcommand ────────────────────────────────────────────────────────────

@main.command(name="list")
@click.argument("directory", type=click.Path(file_okay=False))
def list_sheets(directory: str) -> None:
    """List every sheet found in DIRECTORY."""
    try:
        library = load_sheets(directory)
    except FileNotFoundError as exc:
        _fail(str(exc))

    if not library.sheets:
        click.echo(f"No sheets found in '{directory}'.")
    for i, (path, sheet) in enumerate(library.sheets, start=1):
        click.echo(f"{i:3d}. {_describe(sheet)}  [{path.name}]")
    for path, error in library.failures:
        click.echo(f"  SKIPPED {path.name}: {error}", err=True)


# ── inspect subcommand ─────────────────────────────────────────────────────────

@main.command()
@click.argument("sheet_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@distribution_options
def inspect(sheet_file: str, dist: PauseDistribution, blank_pause: float | None) -> None:
    """
    Show the header, token counts and computed durations of SHEET_FILE.

    \b
    Examples:
      keysheet inspect sheets/song.txt
      keysheet inspect sheets/song.txt --pause-ratio 10 --fast-proportion 0.2
    """
    sheet = _read_sheet(sheet_file)
    header = sheet.header

    click.echo(f"  Title  : {header.display_title}")
    click.echo(f"  Writer : {header.display_writer}")
    click.echo(f"  Length : {header.length:g} s")
    click.echo(f"  Tokens : {sheet.token_count}")

    counts = Counter(type(token).__name__ for token in sheet.tokens)
    for name, count in sorted(counts.items()):
        click.echo(f"    {name:<12} {count}")

    durations = _durations_for(sheet, dist)
    click.echo("  Durations (s):")
    click.echo(f"    single       {durations.single_duration:.5f}")
    click.echo(f"    arpeggio key {durations.arpeggio_key_duration:.5f}")
    click.echo(f"    short pause  {durations.short_pause_duration:.5f}")
    click.echo(f"    pause        {durations.pause_duration:.5f}")
    click.echo(f"    long pause   {durations.long_pause_duration:.5f}")
    if blank_pause is not None:
        click.echo(f"    blank line   {blank_pause:.5f}")


# ── play subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.argument("sheet_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--countdown",
    type=click.FloatRange(min=0),
    default=DEFAULT_COUNTDOWN,
    show_default=True,
    metavar="SECS",
    help="Delay before the first key, to focus the target window.",
)
@distribution_options
def play(sheet_file: str, countdown: float, dist: PauseDistribution, blank_pause: float | None) -> None:
    """
    Play SHEET_FILE by sending keystrokes to the focused window.

    \b
    Examples:
      keysheet play sheets/song.txt
      keysheet play sheets/song.txt --countdown 3 --blank-pause 0.5
    """
    sheet = _read_sheet(sheet_file)
    durations = _durations_for(sheet, dist)

    player = Player(
        PynputKeySink(),
        countdown=countdown,
        blank_pause=blank_pause,
        on_start=_announce(countdown),
    )
    player.play(sheet, durations)
    click.echo("Done!")


# ── menu subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.argument("directory", type=click.Path(file_okay=False), default="./sheets")
@click.option(
    "--countdown",
    type=click.FloatRange(min=0),
    default=DEFAULT_COUNTDOWN,
    show_default=True,
    metavar="SECS",
    help="Delay before the first key of each song.",
)
@distribution_options
def menu(directory: str, countdown: float, dist: PauseDistribution, blank_pause: float | None) -> None:
    """Pick songs from DIRECTORY in an interactive menu and play them."""
    try:
        library = load_sheets(directory)
    except FileNotFoundError:
        _fail(f"Could not read the '{directory}' directory.")

    for path, error in library.failures:
        click.echo(f"  SKIPPED {path.name}: {error}", err=True)

    player = Player(
        PynputKeySink(),
        countdown=countdown,
        blank_pause=blank_pause,
        on_start=_announce(countdown),
    )

    while True:
        click.echo("\nSong Selection Menu:")
        if not library.sheets:
            click.echo(f"No songs found in the '{directory}' directory.")
            break
        for i, (_, sheet) in enumerate(library.sheets, start=1):
            click.echo(f"{i}. {_describe(sheet)}")
        exit_choice = len(library.sheets) + 1
        click.echo(f"{exit_choice}. Exit")

        choice = click.prompt("Enter your choice", type=int)
        if choice == exit_choice:
            break
        if not 1 <= choice <= len(library.sheets):
            click.echo("Invalid choice. Please try again.")
            continue

        _, sheet = library.sheets[choice - 1]
        try:
            durations = allocate(sheet.multiplier, dist)
        except KeysheetError as exc:
            click.echo(f"  ERROR: {exc}", err=True)
            continue
        player.play(sheet, durations)


# ── export subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("sheet_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination MIDI file path. Defaults to the sheet path with a .mid suffix.",
)
@click.option(
    "--tempo",
    type=click.IntRange(20, 300),
    default=MidiExporter.DEFAULT_TEMPO,
    show_default=True,
    help="Tempo written to the MIDI file, in BPM.",
)
@distribution_options
def export(
    sheet_file: str,
    output: str | None,
    tempo: int,
    dist: PauseDistribution,
    blank_pause: float | None,
) -> None:
    """
    Write the timed playback of SHEET_FILE to a MIDI file for preview.

    \b
    Examples:
      keysheet export sheets/song.txt
      keysheet export sheets/song.txt -o preview.mid --tempo 90
    """
    sheet = _read_sheet(sheet_file)
    durations = _durations_for(sheet, dist)
    resolved_output = output if output is not None else str(Path(sheet_file).with_suffix(".mid"))

    click.echo(f"[1/2] Replaying {_describe(sheet)}...")
    click.echo(f"[2/2] Writing MIDI file → '{resolved_output}'...")
    exporter = MidiExporter(tempo=tempo)
    try:
        written = exporter.export(sheet, durations, resolved_output, blank_pause=blank_pause)
    except OSError as exc:
        _fail(f"Could not write MIDI file — {exc}")

    click.echo(f"Done!  Wrote {written} note(s) to '{resolved_output}'.")
