from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class StockRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    ingest_run_id: Optional[str] = None
    date: date
    symbol: str
    series: str
    prev_close: float
    open: float
    high: float
    low: float
    last: float
    close: float
    vwap: float
    volume: float
    turnover: float
    trades: float
    deliverable: float
    percentage_deliverable: float
