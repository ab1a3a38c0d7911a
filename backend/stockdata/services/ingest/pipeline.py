"""
Ingestion pipeline: folds parser events into an IngestionSummary.

States::

    AWAITING_HEADER --on_header(ok)------> STREAMING --on_end--> COMPLETED
    AWAITING_HEADER --on_header(missing)-> HEADER_REJECTED
    AWAITING_HEADER | STREAMING --on_error--> STREAM_ERROR

Header rejection is terminal: no row is read after it. A stream error discards
every row accumulated so far; the attempt counts as nothing ingested.
Row-level validation failures never stop the run, they are collected in
``invalid_rows`` in input order.
"""

from __future__ import annotations

import logging
from contextlib import closing
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterable

from stockdata.services.ingest.contract import STOCK_SCHEMA, StockSchema
from stockdata.services.ingest.errors import StreamError
from stockdata.services.ingest.parser import HeaderEvent, ParseEvent, RowEvent, iter_csv_events
from stockdata.services.ingest.rows import RawRow, RowError, RowVerdict, validate_row

logger = logging.getLogger(__name__)

MISSING_COLUMNS_MESSAGE = "Missing required columns"


class PipelineState(str, Enum):
    AWAITING_HEADER = "awaiting_header"
    STREAMING = "streaming"
    COMPLETED = "completed"
    HEADER_REJECTED = "header_rejected"
    STREAM_ERROR = "stream_error"


TERMINAL_STATES = frozenset(
    {PipelineState.COMPLETED, PipelineState.HEADER_REJECTED, PipelineState.STREAM_ERROR}
)


class FailureKind(str, Enum):
    SCHEMA = "schema"
    STREAM = "stream"


class PipelineStateError(RuntimeError):
    """A transition was requested from a state that does not allow it."""


@dataclass(frozen=True)
class IngestionSummary:
    success: bool
    total_records: int = 0
    successful_records: int = 0
    failed_records: int = 0
    valid_rows: tuple[RawRow, ...] = ()
    invalid_rows: tuple[RawRow, ...] = ()
    row_errors: tuple[RowError, ...] = ()
    failure: FailureKind | None = None
    message: str | None = None
    missing_columns: tuple[str, ...] | None = None

    def to_dict(self, *, include_rows: bool = True) -> dict:
        if not self.success:
            data: dict = {"success": False, "message": self.message}
            if self.missing_columns is not None:
                data["missing_columns"] = list(self.missing_columns)
            return data
        data = {
            "success": True,
            "total_records": self.total_records,
            "successful_records": self.successful_records,
            "failed_records": self.failed_records,
            "row_errors": [err.to_dict() for err in self.row_errors],
        }
        if include_rows:
            data["valid_rows"] = [row.to_dict() for row in self.valid_rows]
            data["invalid_rows"] = [row.to_dict() for row in self.invalid_rows]
        return data


@dataclass
class IngestionPipeline:
    """Owns the accumulators of a single ingestion attempt; never shared between uploads."""

    schema: StockSchema = STOCK_SCHEMA
    state: PipelineState = field(default=PipelineState.AWAITING_HEADER, init=False)
    summary: IngestionSummary | None = field(default=None, init=False)
    _valid_rows: list[RawRow] = field(default_factory=list, init=False, repr=False)
    _invalid_rows: list[RawRow] = field(default_factory=list, init=False, repr=False)
    _row_errors: list[RowError] = field(default_factory=list, init=False, repr=False)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def _expect(self, *allowed: PipelineState) -> None:
        if self.state not in allowed:
            raise PipelineStateError(f"Cannot transition from {self.state.value}")

    def on_header(self, columns: Iterable[str]) -> IngestionSummary | None:
        self._expect(PipelineState.AWAITING_HEADER)
        missing = self.schema.missing_columns(columns)
        if missing:
            self.state = PipelineState.HEADER_REJECTED
            self.summary = IngestionSummary(
                success=False,
                failure=FailureKind.SCHEMA,
                message=MISSING_COLUMNS_MESSAGE,
                missing_columns=tuple(missing),
            )
            return self.summary
        self.state = PipelineState.STREAMING
        return None

    def on_row(self, row: RawRow) -> RowVerdict:
        self._expect(PipelineState.STREAMING)
        verdict = validate_row(row, self.schema)
        if verdict.valid:
            self._valid_rows.append(verdict.row)
        else:
            self._invalid_rows.append(verdict.row)
            self._row_errors.append(
                RowError(line_number=verdict.row.line_number, failed_fields=tuple(sorted(verdict.failed_fields)))
            )
        return verdict

    def on_end(self) -> IngestionSummary:
        self._expect(PipelineState.STREAMING)
        self.state = PipelineState.COMPLETED
        successful = len(self._valid_rows)
        failed = len(self._invalid_rows)
        self.summary = IngestionSummary(
            success=True,
            total_records=successful + failed,
            successful_records=successful,
            failed_records=failed,
            valid_rows=tuple(self._valid_rows),
            invalid_rows=tuple(self._invalid_rows),
            row_errors=tuple(self._row_errors),
        )
        return self.summary

    def on_error(self, exc: Exception) -> IngestionSummary:
        self._expect(PipelineState.AWAITING_HEADER, PipelineState.STREAMING)
        self.state = PipelineState.STREAM_ERROR
        self._valid_rows.clear()
        self._invalid_rows.clear()
        self._row_errors.clear()
        message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
        self.summary = IngestionSummary(success=False, failure=FailureKind.STREAM, message=message)
        return self.summary

    def run(self, events: Iterable[ParseEvent]) -> IngestionSummary:
        """Drive the state machine to a terminal state and return the summary."""
        iterator = iter(events)
        try:
            for event in iterator:
                if isinstance(event, HeaderEvent):
                    self.on_header(event.columns)
                elif isinstance(event, RowEvent):
                    self.on_row(event.row)
                if self.finished:
                    break
            else:
                if self.state == PipelineState.AWAITING_HEADER:
                    # Event source ended without a header at all.
                    self.on_header(())
                else:
                    self.on_end()
        except StreamError as exc:
            self.on_error(exc)
        finally:
            close = getattr(iterator, "close", None)
            if close is not None:
                close()
        return self.summary


def _log_summary(summary: IngestionSummary, source: str) -> None:
    if summary.success:
        logger.info(
            "csv_ingest source=%s total=%s valid=%s invalid=%s",
            source,
            summary.total_records,
            summary.successful_records,
            summary.failed_records,
        )
    else:
        logger.warning(
            "csv_ingest_failed source=%s failure=%s message=%s missing_columns=%s",
            source,
            summary.failure.value if summary.failure else None,
            summary.message,
            summary.missing_columns,
        )


def ingest_csv(stream: BinaryIO, schema: StockSchema = STOCK_SCHEMA, *, source: str = "<stream>") -> IngestionSummary:
    """Validate a binary CSV stream in one pass. The caller owns ``stream``."""
    with closing(iter_csv_events(stream)) as events:
        summary = IngestionPipeline(schema=schema).run(events)
    _log_summary(summary, source)
    return summary


def ingest_csv_file(path: str | Path, schema: StockSchema = STOCK_SCHEMA) -> IngestionSummary:
    """Open ``path`` for the duration of one ingestion; the handle is released on every exit path."""
    with open(path, "rb") as fh:
        return ingest_csv(fh, schema, source=str(path))
