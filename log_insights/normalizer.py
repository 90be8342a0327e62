"""CSV ingestion — localized headers mapped onto LogRecord, invalid rows dropped."""

import csv
import io
import logging
import sys
from typing import Iterable, Mapping

from log_insights.models import LogRecord

logger = logging.getLogger(__name__)

HEADER_MAPPING = {
    "问题ID": "question_id",
    "问题内容": "content",
    "提问时间": "timestamp",
    "来源": "source",
    "用户ID": "user_id",
    "公司名": "company",
    "用户姓名": "user_name",
    "用户昵称": "nickname",
    "邮箱": "email",
    "反馈状态": "feedback_status",
    "反馈内容": "feedback_content",
}

REQUIRED_FIELDS = ("content", "timestamp")

# Oversized cells are row content, not a tokenization failure.
MAX_FIELD_SIZE = min(sys.maxsize, 2**31 - 1)


class ParseError(Exception):
    """Raised when the input cannot be read as delimited text at all."""


def normalize_row(row: Mapping[str, str | None]) -> LogRecord | None:
    """Map one raw row onto a LogRecord. Returns None if a required field is empty."""
    values = {}
    for header, field_name in HEADER_MAPPING.items():
        raw = row.get(header)
        values[field_name] = raw.strip() if isinstance(raw, str) else ""

    if any(not values[name] for name in REQUIRED_FIELDS):
        return None
    return LogRecord(**values)


def normalize(rows: Iterable[Mapping[str, str | None]]) -> tuple[LogRecord, ...]:
    """Normalize a sequence of raw rows, silently dropping the invalid ones."""
    records = []
    for row in rows:
        record = normalize_row(row)
        if record is not None:
            records.append(record)
    return tuple(records)


def ingest(file_bytes: bytes, encoding: str = "utf-8-sig") -> tuple[LogRecord, ...]:
    """Decode and tokenize an uploaded CSV export into normalized records.

    Raises ParseError if the bytes cannot be decoded or tokenized. Row-level
    defects never raise; those rows are filtered out.
    """
    try:
        text = file_bytes.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise ParseError(f"Cannot decode input as {encoding}: {exc}") from exc

    if "\x00" in text:
        raise ParseError("Input contains NUL bytes; not a delimited text file")

    csv.field_size_limit(MAX_FIELD_SIZE)
    try:
        reader = csv.DictReader(io.StringIO(text, newline=""))
        rows = list(reader)
    except csv.Error as exc:
        raise ParseError(f"Cannot tokenize input as CSV: {exc}") from exc

    headers = reader.fieldnames or []
    missing = [h for h, name in HEADER_MAPPING.items() if name in REQUIRED_FIELDS and h not in headers]
    if rows and missing:
        logger.warning("Required columns missing from header: %s", ", ".join(missing))

    records = normalize(rows)
    logger.info("Ingested %d rows: %d kept, %d dropped", len(rows), len(records), len(rows) - len(records))
    return records


def read_file(path: str, encoding: str = "utf-8-sig") -> tuple[LogRecord, ...]:
    """Read a CSV export from disk and ingest it."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise ParseError(f"Cannot read {path}: {exc}") from exc
    return ingest(data, encoding=encoding)
