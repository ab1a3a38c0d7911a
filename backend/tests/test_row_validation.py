from conftest import HEADER, VALID_ROW

from stockdata.services.ingest.contract import REQUIRED_COLUMNS, STOCK_SCHEMA, ColumnKind
from stockdata.services.ingest.rows import RawRow, validate_row


def _row(line: str = VALID_ROW, **overrides) -> RawRow:
    values = dict(zip(HEADER.split(","), line.split(",")))
    values.update(overrides)
    return RawRow(values, line_number=2)


def test_contract_lists_fifteen_columns_in_order():
    assert REQUIRED_COLUMNS == tuple(HEADER.split(","))
    assert len(STOCK_SCHEMA.columns) == 15


def test_symbol_and_series_are_not_validated_per_row():
    validated = {col.name for col in STOCK_SCHEMA.validated_columns}
    assert "Symbol" not in validated
    assert "Series" not in validated
    assert len(validated) == 13
    kinds = {col.name: col.kind for col in STOCK_SCHEMA.columns}
    assert kinds["Date"] is ColumnKind.DATE
    assert kinds["%Deliverble"] is ColumnKind.NUMERIC


def test_missing_columns_are_reported_in_contract_order():
    headers = [h for h in HEADER.split(",") if h not in {"Prev Close", "VWAP"}]
    assert STOCK_SCHEMA.missing_columns(headers) == ["Prev Close", "VWAP"]
    assert STOCK_SCHEMA.missing_columns([f" {h} " for h in HEADER.split(",")]) == []


def test_valid_row_passes():
    verdict = validate_row(_row())
    assert verdict.valid
    assert verdict.failed_fields == frozenset()


def test_failed_fields_name_every_bad_column():
    verdict = validate_row(_row(Date="22-10-2024", Volume="lots", Close=""))
    assert not verdict.valid
    assert verdict.failed_fields == {"Date", "Volume", "Close"}


def test_blank_symbol_does_not_fail_validation():
    assert validate_row(_row(Symbol="")).valid


def test_short_row_is_invalid_not_an_error():
    values = dict(zip(HEADER.split(","), VALID_ROW.split(",")[:10]))
    verdict = validate_row(RawRow(values, line_number=5))
    assert not verdict.valid
    assert verdict.failed_fields == {"Volume", "Turnover", "Trades", "Deliverable Volume", "%Deliverble"}


def test_plain_dict_rows_are_accepted():
    values = dict(zip(HEADER.split(","), VALID_ROW.split(",")))
    verdict = validate_row(values)
    assert verdict.valid
    assert isinstance(verdict.row, RawRow)


def test_validation_is_deterministic():
    row = _row(High="n/a")
    assert validate_row(row) == validate_row(row)


def test_raw_row_lookup_miss_returns_none():
    row = RawRow({"Date": "2024-10-22"})
    assert row.get("Volume") is None
    assert "Volume" not in row
    assert list(row) == ["Date"]
