from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockdata.core.config import settings
from stockdata.db.session import get_db
from stockdata.schemas.ingest import UploadResult, ValidationDetails
from stockdata.schemas.stock_record import StockRecordOut
from stockdata.services.ingest.errors import PersistenceError, TransportError
from stockdata.services.ingest.run import NO_VALID_ROWS_MESSAGE, create_ingest_run, run_stock_ingest
from stockdata.services.ingest.transport import (
    NO_FILE_MESSAGE,
    check_declared_size,
    check_file_type,
    store_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _transport_error(message: str) -> HTTPException:
    if message == NO_FILE_MESSAGE:
        detail = {"error": message, "msg": "Please upload a CSV file"}
    else:
        detail = {"error": message, "msg": "Error occurred while uploading file"}
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.post("/upload", response_model=UploadResult, status_code=status.HTTP_201_CREATED)
def upload_csv(
    csv_file: UploadFile | None = File(default=None, alias="csvFile"),
    db: Session = Depends(get_db),
) -> UploadResult:
    try:
        if csv_file is None:
            raise TransportError(NO_FILE_MESSAGE)
        check_file_type(csv_file.filename, csv_file.content_type)
        check_declared_size(csv_file.size, settings.CSV_FILE_SIZE_LIMIT)
        stored = store_upload(
            csv_file.file,
            csv_file.filename,
            upload_dir=settings.UPLOAD_DIR,
            size_limit=settings.CSV_FILE_SIZE_LIMIT,
            chunk_size=settings.UPLOAD_CHUNK_SIZE,
        )
    except TransportError as exc:
        logger.warning("csv_upload_rejected filename=%s reason=%s", getattr(csv_file, "filename", None), exc.message)
        raise _transport_error(exc.message)

    try:
        outcome = run_stock_ingest(
            db=db,
            path=stored.path,
            source_name=stored.original_filename,
            source_hash=stored.source_hash,
            batch_size=settings.INSERT_BATCH_SIZE,
        )
        # Serialize before commit so the response does not reload every record.
        inserted_records = [StockRecordOut.model_validate(record) for record in outcome.inserted]
        ingest_run_id = outcome.ingest_run.id
        db.commit()
    except (PersistenceError, SQLAlchemyError) as exc:
        db.rollback()
        error = exc.message if isinstance(exc, PersistenceError) else str(exc)
        logger.error("csv_upload_db_failed filename=%s error=%s", stored.original_filename, error)
        create_ingest_run(
            db=db,
            source_name=stored.original_filename,
            source_hash=stored.source_hash,
            stats={},
            status_value="FAILED",
            error=error,
        )
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"msg": "DB insertion failed", "error": error},
        )

    summary = outcome.summary
    if not summary.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "msg": "CSV validation failed",
                "details": summary.to_dict(),
                "ingest_run_id": ingest_run_id,
            },
        )
    if not outcome.accepted:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "msg": NO_VALID_ROWS_MESSAGE,
                "details": summary.to_dict(),
                "ingest_run_id": ingest_run_id,
            },
        )

    return UploadResult(
        msg="Records inserted successfully",
        ingest_run_id=ingest_run_id,
        inserted_records=inserted_records,
        validation_details=ValidationDetails(**summary.to_dict()),
    )
