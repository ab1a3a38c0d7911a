"""
Incremental CSV reader that turns a binary stream into header/row events.

The reader holds one record at a time; the underlying stream is consumed in
buffered chunks by ``io.TextIOWrapper``. Iteration is single pass: re-reading
requires reopening the source.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Union

from stockdata.services.ingest.errors import StreamError
from stockdata.services.ingest.rows import RawRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeaderEvent:
    columns: tuple[str, ...]


@dataclass(frozen=True)
class RowEvent:
    row: RawRow


ParseEvent = Union[HeaderEvent, RowEvent]


def _build_row(headers: tuple[str, ...], values: list[str], line_number: int) -> RawRow:
    mapped = dict(zip(headers, values))
    # Values beyond the header width are kept under positional keys.
    for index in range(len(headers), len(values)):
        mapped[f"_{index}"] = values[index]
    return RawRow(mapped, line_number=line_number)


def iter_csv_events(stream: BinaryIO, *, encoding: str = "utf-8-sig") -> Iterator[ParseEvent]:
    """
    Yield exactly one HeaderEvent followed by one RowEvent per record.

    Header names are whitespace-trimmed and blank lines are skipped. An empty input
    yields a HeaderEvent with no columns. Decoding, quoting and I/O failures are
    raised as StreamError and end the sequence. The caller keeps ownership of
    ``stream``; it is not closed here.
    """
    text_stream = io.TextIOWrapper(stream, encoding=encoding, newline="")
    try:
        reader = csv.reader(text_stream, strict=True)
        try:
            first = next(reader, None)
            # Skip leading blank lines before the header.
            while first is not None and not first:
                first = next(reader, None)
            headers = tuple(h.strip() for h in first) if first else ()
            yield HeaderEvent(columns=headers)
            if not headers:
                return

            for values in reader:
                if not values:
                    continue
                yield RowEvent(row=_build_row(headers, values, reader.line_num))
        except UnicodeDecodeError as exc:
            raise StreamError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise StreamError(f"Invalid CSV format at line {reader.line_num}: {exc}") from exc
        except OSError as exc:
            raise StreamError(f"Failed reading CSV stream: {exc}") from exc
    finally:
        try:
            text_stream.detach()
        except ValueError:
            pass
