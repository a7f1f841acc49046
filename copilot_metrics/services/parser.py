from __future__ import annotations

import json
from typing import List

from pydantic import ValidationError

from ..schemas.metrics import UsageRecord


class IngestionError(Exception):
    """Base class for failures while loading a metrics export."""


class FetchError(IngestionError):
    """Raised when the export cannot be retrieved from its source."""


class EmptyInputError(IngestionError):
    """Raised when the input holds no non-blank lines."""

    def __init__(self, message: str = "The metrics file is empty.") -> None:
        super().__init__(message)


class LineParseError(IngestionError):
    """Raised when a single line is not a valid usage record."""

    def __init__(self, line_number: int) -> None:
        self.line_number = line_number
        super().__init__(f"Parse error on line {line_number}.")


BYTE_ORDER_MARK = "\ufeff"


def split_lines(text: str) -> List[str]:
    cleaned = (text or "").lstrip(BYTE_ORDER_MARK).strip()
    return [line for line in cleaned.split("\n") if line.strip()]


def parse_line(line: str, line_number: int) -> UsageRecord:
    try:
        payload = json.loads(line)
        return UsageRecord.model_validate(payload)
    except (ValueError, ValidationError) as exc:
        raise LineParseError(line_number) from exc


def parse_records(text: str) -> List[UsageRecord]:
    """Parse NDJSON text into usage records.

    Blank lines are dropped before numbering, so the line number in a
    ``LineParseError`` is the 1-indexed position among non-blank lines. The
    first bad line aborts the whole parse.
    """
    lines = split_lines(text)
    if not lines:
        raise EmptyInputError()
    return [parse_line(line, index) for index, line in enumerate(lines, start=1)]
