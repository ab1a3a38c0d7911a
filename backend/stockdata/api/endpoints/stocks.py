from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockdata.db.session import get_db
from stockdata.schemas.stocks import AverageCloseOut, AverageVwapOut, HighestVolumeOut, VolumePeakOut
from stockdata.services import stocks
from stockdata.services.ingest.validators import is_valid_date

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_DATE_MESSAGE = (
    "Invalid date format. Please provide 'start_date' and 'end_date' in a valid format (e.g., YYYY-MM-DD)."
)


def _parse_range(start_date: str, end_date: str) -> tuple[date, date]:
    if not is_valid_date(start_date) or not is_valid_date(end_date):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"message": INVALID_DATE_MESSAGE})
    return date.fromisoformat(start_date), date.fromisoformat(end_date)


def _parse_limit(limit: str | None) -> int:
    try:
        value = int(limit) if limit is not None else 1
    except ValueError:
        return 1
    return value if value > 0 else 1


def _query_failed(what: str, exc: SQLAlchemyError) -> HTTPException:
    logger.error("stock_query_failed query=%s error=%s", what, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": f"An error occurred while {what}. Please try again later."},
    )


@router.get("/highest_volume", response_model=HighestVolumeOut)
def get_highest_volume(
    db: Session = Depends(get_db),
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    symbol: str | None = Query(default=None),
    limit: str | None = Query(default=None),
) -> HighestVolumeOut:
    if not start_date or not end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Missing required query parameters: 'start_date' and 'end_date' are required."},
        )
    start, end = _parse_range(start_date, end_date)
    try:
        peaks = stocks.highest_volume(db, start_date=start, end_date=end, symbol=symbol, limit=_parse_limit(limit))
    except SQLAlchemyError as exc:
        raise _query_failed("fetching the highest volume", exc)
    if not peaks:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "No records found for the given criteria."},
        )
    return HighestVolumeOut(
        highest_volume=[VolumePeakOut(date=p.date, symbol=p.symbol, volume=p.volume) for p in peaks]
    )


def _require_symbol_range(start_date: str | None, end_date: str | None, symbol: str | None) -> None:
    if not start_date or not end_date or not symbol:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Missing required query parameters: 'start_date', 'end_date', and 'symbol' are required."
            },
        )


@router.get("/average_close", response_model=AverageCloseOut)
def get_average_close(
    db: Session = Depends(get_db),
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    symbol: str | None = Query(default=None),
) -> AverageCloseOut:
    _require_symbol_range(start_date, end_date, symbol)
    start, end = _parse_range(start_date, end_date)
    try:
        value = stocks.average_close(db, start_date=start, end_date=end, symbol=symbol)
    except SQLAlchemyError as exc:
        raise _query_failed("calculating the average close", exc)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": f"No records found for symbol '{symbol}' between '{start_date}' and '{end_date}'."},
        )
    return AverageCloseOut(symbol=symbol, start_date=start, end_date=end, average_close=value)


@router.get("/average_vwap", response_model=AverageVwapOut)
def get_average_vwap(
    db: Session = Depends(get_db),
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    symbol: str | None = Query(default=None),
) -> AverageVwapOut:
    _require_symbol_range(start_date, end_date, symbol)
    start, end = _parse_range(start_date, end_date)
    try:
        value = stocks.average_vwap(db, start_date=start, end_date=end, symbol=symbol)
    except SQLAlchemyError as exc:
        raise _query_failed("calculating the average VWAP", exc)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": f"No records found for symbol '{symbol}' within the date range."},
        )
    return AverageVwapOut(symbol=symbol, start_date=start, end_date=end, average_vwap=value)
