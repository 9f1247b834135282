"""Duration allocation: spreads a sheet's per-token time across token categories."""

import math
from dataclasses import dataclass

from keysheet.errors import (
    InvalidDistributionRatio,
    InvalidDistributionSum,
    InvalidFastProportion,
)

#: Largest absolute error accepted when checking that the three pause
#: proportions add up to 1.0.
SUM_TOLERANCE = 1e-9


@dataclass(frozen=True)
class PauseDistribution:
    """
    How a sheet's timeline is weighted between notes and pauses.

    Attributes:
        short:                Share of pause time given to short pauses.
        standard:             Share of pause time given to ``|`` pauses.
        long:                 Share of pause time given to the long category.
        pause_ratio:          Notes-to-pauses weighting (20 means 20:1).
        many_fast_proportion: Fraction of each token's time reserved for
                              every arpeggio key.

    ``short``, ``standard`` and ``long`` must add up to 1.0.
    """

    short: float = 0.2
    standard: float = 0.3
    long: float = 0.5
    pause_ratio: float = 20.0
    many_fast_proportion: float = 0.15


@dataclass(frozen=True)
class TokenDurations:
    """Seconds spent on each token category during playback."""

    short_pause_duration: float
    pause_duration: float
    long_pause_duration: float
    single_duration: float
    arpeggio_key_duration: float


def validate_distribution(dist: PauseDistribution) -> None:
    """
    Check a distribution, raising on the first problem found.

    Raises:
        InvalidDistributionRatio: ``pause_ratio`` is not positive.
        InvalidDistributionSum:   The pause proportions do not add up to 1.0.
        InvalidFastProportion:    ``many_fast_proportion`` is outside [0, 1].
    """
    if dist.pause_ratio <= 0:
        raise InvalidDistributionRatio("Note-pause ratio must be greater than zero.")

    total = dist.short + dist.standard + dist.long
    if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=SUM_TOLERANCE):
        raise InvalidDistributionSum(f"Pause distribution proportions must add up to 1.0, got {total}.")

    if not 0.0 <= dist.many_fast_proportion <= 1.0:
        raise InvalidFastProportion("many_fast_proportion must be between 0.0 and 1.0.")


def allocate(multiplier: float, dist: PauseDistribution) -> TokenDurations:
    """
    Compute per-category durations for a sheet.

    The timeline is first split between notes and pauses by ``pause_ratio``,
    after a ``many_fast_proportion`` slice has been set aside for arpeggio
    keys. What is left of the pause share is divided between the three pause
    categories.

    Args:
        multiplier: Average seconds per token (sheet length / token count).
        dist:       The distribution to apply.

    Returns:
        TokenDurations for the sheet.
    """
    validate_distribution(dist)

    note_share = dist.pause_ratio / (dist.pause_ratio + 1.0)
    pause_share = 1.0 - note_share
    remaining_share = 1.0 - dist.many_fast_proportion

    pause_block_share = pause_share * remaining_share

    return TokenDurations(
        short_pause_duration=pause_block_share * dist.short,
        pause_duration=pause_block_share * dist.standard,
        long_pause_duration=pause_block_share * dist.long,
        single_duration=note_share * remaining_share * multiplier,
        arpeggio_key_duration=dist.many_fast_proportion * multiplier,
    )
