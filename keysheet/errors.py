"""Exceptions raised while parsing sheets and allocating durations."""


class KeysheetError(ValueError):
    """Base class for every keysheet failure."""


class EmptySheet(KeysheetError):
    """Raised when per-token timing is requested for a sheet with no tokens."""


# ── Parsing ────────────────────────────────────────────────────────────────────

class ParseError(KeysheetError):
    """
    A sheet could not be parsed.

    Attributes:
        line: 1-based source line of the failure, or None when the failure
              concerns the sheet as a whole (e.g. a missing define).
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class GroupCloseWithoutOpen(ParseError):
    """``]`` found with no group open."""


class GroupCloseMissingPayload(ParseError):
    """A group is marked open but holds no pending key sequence."""


class GroupReopened(ParseError):
    """``[`` found while a group is already open."""


class EmptyGroup(ParseError):
    """A group was closed without any keys in it."""


class UnclosedGroup(ParseError):
    """A line ended while a group was still open."""


class MalformedDefineLine(ParseError):
    """A define line has no space separating its name from its value."""


class MissingLengthDefine(ParseError):
    """The sheet has no ``#length`` define."""


class MalformedLengthFormat(ParseError):
    """
    The ``#length`` value is not ``minutes:seconds``.

    Attributes:
        field: ``"minutes"`` or ``"seconds"`` when that part failed to parse,
               None when the separator itself is missing.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


# ── Distribution ───────────────────────────────────────────────────────────────

class DistributionError(KeysheetError):
    """A pause distribution failed validation."""


class InvalidDistributionRatio(DistributionError):
    """``pause_ratio`` is not greater than zero."""


class InvalidDistributionSum(DistributionError):
    """The short, standard and long proportions do not add up to 1.0."""


class InvalidFastProportion(DistributionError):
    """``many_fast_proportion`` lies outside [0, 1]."""
