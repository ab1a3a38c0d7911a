from __future__ import annotations

from pydantic import BaseModel, Field

from stockdata.schemas.stock_record import StockRecordOut


class RowErrorOut(BaseModel):
    line_number: int | None = None
    failed_fields: list[str] = Field(default_factory=list)


class ValidationDetails(BaseModel):
    success: bool
    total_records: int = Field(..., ge=0)
    successful_records: int = Field(..., ge=0)
    failed_records: int = Field(..., ge=0)
    valid_rows: list[dict[str, str]] = Field(default_factory=list)
    invalid_rows: list[dict[str, str]] = Field(default_factory=list)
    row_errors: list[RowErrorOut] = Field(default_factory=list)


class UploadResult(BaseModel):
    msg: str
    ingest_run_id: str
    inserted_records: list[StockRecordOut]
    validation_details: ValidationDetails
