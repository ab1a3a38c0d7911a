from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from sqlalchemy.orm import Session

from stockdata.models.ingest_run import IngestRun
from stockdata.models.stock_record import StockRecord
from stockdata.services.ingest.persistence import insert_many
from stockdata.services.ingest.pipeline import IngestionSummary, ingest_csv_file

logger = logging.getLogger(__name__)

DATASET = "stock_data"
NO_VALID_ROWS_MESSAGE = "No valid rows to insert into the database"


@dataclass
class IngestOutcome:
    summary: IngestionSummary
    ingest_run: IngestRun
    inserted: list[StockRecord] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.summary.success and self.summary.successful_records > 0


def summary_stats(summary: IngestionSummary, inserted: int = 0) -> dict:
    if not summary.success:
        stats: dict = {"failure": summary.failure.value if summary.failure else None}
        if summary.missing_columns is not None:
            stats["missing_columns"] = list(summary.missing_columns)
        return stats
    return {
        "total": summary.total_records,
        "valid": summary.successful_records,
        "invalid": summary.failed_records,
        "inserted": inserted,
    }


def create_ingest_run(
    *,
    db: Session,
    source_name: str | None,
    source_hash: str | None,
    stats: dict,
    status_value: str = "SUCCESS",
    error: str | None = None,
) -> IngestRun:
    ingest_run = IngestRun(
        dataset=DATASET,
        source_name=source_name,
        source_hash=source_hash,
        status=status_value,
        stats=stats,
        error=error[:2000] if error else None,
    )
    db.add(ingest_run)
    db.flush()  # ensures ingest_run.id is available to the stock rows
    return ingest_run


def run_stock_ingest(
    *,
    db: Session,
    path: str | Path,
    source_name: str | None,
    source_hash: str | None,
    batch_size: int = 500,
) -> IngestOutcome:
    """
    Validate the CSV at ``path`` and stage its accepted rows in ``db``.

    Rejected uploads (bad header, unreadable stream, no valid rows) get a FAILED
    IngestRun and no stock rows. PersistenceError propagates; the caller rolls back
    and commits otherwise.
    """
    summary = ingest_csv_file(path)

    if not summary.success or summary.successful_records == 0:
        error = summary.message if not summary.success else NO_VALID_ROWS_MESSAGE
        ingest_run = create_ingest_run(
            db=db,
            source_name=source_name,
            source_hash=source_hash,
            stats=summary_stats(summary),
            status_value="FAILED",
            error=error,
        )
        return IngestOutcome(summary=summary, ingest_run=ingest_run)

    ingest_run = create_ingest_run(
        db=db,
        source_name=source_name,
        source_hash=source_hash,
        stats=summary_stats(summary),
    )
    inserted = insert_many(db, summary.valid_rows, ingest_run_id=ingest_run.id, batch_size=batch_size)
    ingest_run.stats = summary_stats(summary, inserted=len(inserted))
    logger.info(
        "stock_ingest_run id=%s source=%s inserted=%s rejected=%s",
        ingest_run.id,
        source_name,
        len(inserted),
        summary.failed_records,
    )
    return IngestOutcome(summary=summary, ingest_run=ingest_run, inserted=inserted)
