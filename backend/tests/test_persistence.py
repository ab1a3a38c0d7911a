from datetime import date

import pytest

from conftest import HEADER, VALID_ROW

from stockdata.models.stock_record import StockRecord
from stockdata.services.ingest.errors import PersistenceError
from stockdata.services.ingest.persistence import insert_many, to_record_fields
from stockdata.services.ingest.rows import RawRow


def _row(**overrides) -> RawRow:
    values = dict(zip(HEADER.split(","), VALID_ROW.split(",")))
    values.update(overrides)
    return RawRow(values)


def test_columns_are_renamed_and_coerced():
    fields = to_record_fields(_row())
    assert fields == {
        "date": date(2024, 10, 22),
        "symbol": "AAPL",
        "series": "EQ",
        "prev_close": 150.0,
        "open": 152.0,
        "high": 153.0,
        "low": 149.0,
        "last": 151.0,
        "close": 150.5,
        "vwap": 151.25,
        "volume": 1000000.0,
        "turnover": 150000000.0,
        "trades": 1000.0,
        "deliverable": 800000.0,
        "percentage_deliverable": 80.0,
    }


def test_numeric_values_are_trimmed_before_conversion():
    assert to_record_fields(_row(Close=" 99.5 "))["close"] == 99.5


def test_unconvertible_value_is_a_persistence_error():
    with pytest.raises(PersistenceError, match="Volume"):
        to_record_fields(_row(Volume="lots"))


def test_insert_many_stages_records(db):
    rows = [_row(), _row(Symbol="MSFT"), _row(Symbol="INFY")]
    records = insert_many(db, rows, batch_size=2)
    db.commit()
    assert [r.symbol for r in records] == ["AAPL", "MSFT", "INFY"]
    assert all(r.id for r in records)
    assert db.query(StockRecord).count() == 3


def test_database_failure_is_a_persistence_error(db):
    with pytest.raises(PersistenceError):
        insert_many(db, [_row(Symbol=None)])
    db.rollback()
    assert db.query(StockRecord).count() == 0


def test_series_column_is_as_wide_as_symbol(db):
    columns = StockRecord.__table__.c
    assert columns.series.type.length == columns.symbol.type.length == 64

    [record] = insert_many(db, [_row(Series="EQ-" + "X" * 40)], ingest_run_id=None)
    db.flush()
    assert db.get(StockRecord, record.id).series == "EQ-" + "X" * 40
