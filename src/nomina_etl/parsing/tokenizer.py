"""Single-line CSV tokenizer with double-quote quoting."""

from __future__ import annotations

from nomina_etl.core.types import RawRow

QUOTE = '"'
DELIMITER = ","


def tokenize_line(line: str) -> RawRow:
    """Split one logical line into raw field strings.

    Inside quotes a doubled quote is a literal quote. Quote balance is not
    checked: an unterminated quoted field runs to the end of the line. The
    last field is always emitted, even when empty.
    """
    fields: RawRow = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        char = line[i]
        if char == QUOTE:
            if in_quotes and i + 1 < n and line[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return fields


def quote_field(field: str) -> str:
    """Quote a field if it holds a delimiter or a quote character."""
    if DELIMITER in field or QUOTE in field:
        return QUOTE + field.replace(QUOTE, QUOTE * 2) + QUOTE
    return field


def join_fields(fields: RawRow) -> str:
    """Inverse of :func:`tokenize_line` up to quoting choices."""
    return DELIMITER.join(quote_field(f) for f in fields)
