from stockdata.db.base import Base
from stockdata.models.ingest_run import IngestRun
from stockdata.models.stock_record import StockRecord

__all__ = [
    "Base",
    "IngestRun",
    "StockRecord",
]
