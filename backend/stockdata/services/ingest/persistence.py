from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockdata.models.stock_record import StockRecord
from stockdata.services.ingest.contract import STOCK_SCHEMA, ColumnKind, StockSchema
from stockdata.services.ingest.errors import PersistenceError

logger = logging.getLogger(__name__)


def _coerce(kind: ColumnKind, value):
    if value is None:
        return None
    if kind is ColumnKind.DATE:
        return date.fromisoformat(value)
    if kind is ColumnKind.NUMERIC:
        return float(value.strip())
    return value


def to_record_fields(row: Mapping[str, str], schema: StockSchema = STOCK_SCHEMA) -> dict:
    """Rename CSV columns to StockRecord attributes and coerce types; no re-validation."""
    fields = {}
    for col in schema.columns:
        value = row.get(col.name)
        try:
            fields[col.field] = _coerce(col.kind, value)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Cannot convert column '{col.name}' value {value!r}: {exc}") from exc
    return fields


def insert_many(
    db: Session,
    rows: Iterable[Mapping[str, str]],
    *,
    ingest_run_id: str | None = None,
    schema: StockSchema = STOCK_SCHEMA,
    batch_size: int = 500,
) -> list[StockRecord]:
    """
    Add one StockRecord per accepted row, flushing every ``batch_size`` records.

    The caller owns the transaction: commit on success, rollback on PersistenceError.
    """
    batch_size = max(1, batch_size)
    inserted: list[StockRecord] = []
    try:
        for row in rows:
            record = StockRecord(ingest_run_id=ingest_run_id, **to_record_fields(row, schema))
            db.add(record)
            inserted.append(record)
            if len(inserted) % batch_size == 0:
                db.flush()
        db.flush()
    except SQLAlchemyError as exc:
        logger.error("stock_insert_failed inserted_before_failure=%s error=%s", len(inserted), exc)
        raise PersistenceError(f"Failed to persist stock records: {exc}") from exc

    logger.info("stock_insert count=%s ingest_run_id=%s", len(inserted), ingest_run_id)
    return inserted
