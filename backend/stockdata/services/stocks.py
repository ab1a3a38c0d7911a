from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from stockdata.models.stock_record import StockRecord


@dataclass(frozen=True)
class VolumePeak:
    date: date
    symbol: str
    volume: float


def _range_filter(start_date: date, end_date: date, symbol: str | None = None) -> list:
    clauses = [StockRecord.date >= start_date, StockRecord.date <= end_date]
    if symbol:
        clauses.append(StockRecord.symbol == symbol)
    return clauses


def highest_volume(
    db: Session,
    *,
    start_date: date,
    end_date: date,
    symbol: str | None = None,
    limit: int = 1,
) -> list[VolumePeak]:
    """
    Largest daily volume per symbol in the inclusive range, biggest first.

    ``date`` is the earliest day on which that symbol hit its peak volume.
    """
    clauses = _range_filter(start_date, end_date, symbol)
    peaks = (
        select(StockRecord.symbol.label("symbol"), func.max(StockRecord.volume).label("volume"))
        .where(*clauses)
        .group_by(StockRecord.symbol)
        .subquery()
    )
    stmt = (
        select(func.min(StockRecord.date), StockRecord.symbol, peaks.c.volume)
        .join(peaks, and_(StockRecord.symbol == peaks.c.symbol, StockRecord.volume == peaks.c.volume))
        .where(*clauses)
        .group_by(StockRecord.symbol, peaks.c.volume)
        .order_by(peaks.c.volume.desc(), StockRecord.symbol)
        .limit(max(1, limit))
    )
    return [VolumePeak(date=row[0], symbol=row[1], volume=row[2]) for row in db.execute(stmt).all()]


def average_close(db: Session, *, start_date: date, end_date: date, symbol: str) -> float | None:
    stmt = select(func.avg(StockRecord.close), func.count(StockRecord.id)).where(
        *_range_filter(start_date, end_date, symbol)
    )
    avg, count = db.execute(stmt).one()
    if not count:
        return None
    return round(float(avg), 2)


def average_vwap(db: Session, *, start_date: date, end_date: date, symbol: str) -> float | None:
    stmt = select(func.avg(StockRecord.vwap), func.count(StockRecord.id)).where(
        *_range_filter(start_date, end_date, symbol)
    )
    avg, count = db.execute(stmt).one()
    if not count:
        return None
    return float(avg)
