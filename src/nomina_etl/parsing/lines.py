"""Line normalization for raw CSV file content."""

from __future__ import annotations

from pathlib import Path
from typing import NamedTuple

from nomina_etl.core.exceptions import ReadError


class Line(NamedTuple):
    number: int  # 1-based physical line in the source file
    text: str


def normalize_lines(content: str) -> list[Line]:
    """Split content into trimmed, non-empty lines.

    ``\\r\\n`` and lone ``\\r`` are folded to ``\\n`` first. Blank lines are
    dropped but the survivors keep their physical line numbers.
    """
    text = content.replace("\r\n", "\n").replace("\r", "\n")
    lines: list[Line] = []
    for number, raw in enumerate(text.split("\n"), start=1):
        stripped = raw.strip()
        if stripped:
            lines.append(Line(number, stripped))
    return lines


def read_lines(path: Path) -> list[Line]:
    """Read a UTF-8 file and normalize it.

    Raises:
        ReadError: If the file cannot be opened or is not valid UTF-8.
    """
    try:
        content = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadError(path, str(exc)) from exc
    return normalize_lines(content)
