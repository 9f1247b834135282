"""SheetLibrary: loads every sheet file found in a directory."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from keysheet.errors import ParseError
from keysheet.sheet_models import Sheet
from keysheet.sheet_parser import SheetParser

logger = logging.getLogger(__name__)


@dataclass
class SheetLibrary:
    """
    Sheets loaded from one directory.

    Attributes:
        sheets:   ``(path, sheet)`` pairs in file-name order.
        failures: ``(path, error)`` pairs for files that could not be read
                  or parsed.
    """

    sheets: list[tuple[Path, Sheet]] = field(default_factory=list)
    failures: list[tuple[Path, Exception]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.sheets)


def load_sheets(directory: str | Path, *, strict: bool = False) -> SheetLibrary:
    """
    Parse every regular file in ``directory``.

    Args:
        directory: Folder holding sheet files (UTF-8 text).
        strict:    Re-raise the first read or parse error instead of
                   collecting it.

    Raises:
        FileNotFoundError: If ``directory`` does not exist or is not a folder.
        ParseError:        In strict mode, for the first malformed sheet.
        OSError:           In strict mode, for the first unreadable file
                           (UnicodeDecodeError for non-UTF-8 content).
    """
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Sheet directory not found: {root}")

    parser = SheetParser()
    library = SheetLibrary()
    for path in sorted(p for p in root.iterdir() if p.is_file()):
        try:
            sheet = parser.parse(path.read_text(encoding="utf-8"))
        except (ParseError, UnicodeDecodeError, OSError) as exc:
            if strict:
                raise
            logger.debug("skipping %s: %s", path, exc)
            library.failures.append((path, exc))
            continue
        library.sheets.append((path, sheet))
    return library
