from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from stockdata.services.ingest.validators import is_numeric, is_valid_date


class ColumnKind(str, Enum):
    DATE = "date"
    NUMERIC = "numeric"
    TEXT = "text"  # required as a header, never checked per row


VALIDATORS: dict[ColumnKind, Callable[[object], bool]] = {
    ColumnKind.DATE: is_valid_date,
    ColumnKind.NUMERIC: is_numeric,
}


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    kind: ColumnKind
    field: str

    @property
    def validator(self) -> Callable[[object], bool] | None:
        return VALIDATORS.get(self.kind)


@dataclass(frozen=True)
class StockSchema:
    """Ordered, immutable list of the columns an upload must carry."""

    columns: tuple[ColumnSpec, ...]

    @property
    def required_columns(self) -> tuple[str, ...]:
        return tuple(col.name for col in self.columns)

    @property
    def validated_columns(self) -> tuple[ColumnSpec, ...]:
        return tuple(col for col in self.columns if col.validator is not None)

    def missing_columns(self, headers: Iterable[str]) -> list[str]:
        present = {h.strip() for h in headers}
        return [name for name in self.required_columns if name not in present]


STOCK_SCHEMA = StockSchema(
    columns=(
        ColumnSpec("Date", ColumnKind.DATE, "date"),
        ColumnSpec("Symbol", ColumnKind.TEXT, "symbol"),
        ColumnSpec("Series", ColumnKind.TEXT, "series"),
        ColumnSpec("Prev Close", ColumnKind.NUMERIC, "prev_close"),
        ColumnSpec("Open", ColumnKind.NUMERIC, "open"),
        ColumnSpec("High", ColumnKind.NUMERIC, "high"),
        ColumnSpec("Low", ColumnKind.NUMERIC, "low"),
        ColumnSpec("Last", ColumnKind.NUMERIC, "last"),
        ColumnSpec("Close", ColumnKind.NUMERIC, "close"),
        ColumnSpec("VWAP", ColumnKind.NUMERIC, "vwap"),
        ColumnSpec("Volume", ColumnKind.NUMERIC, "volume"),
        ColumnSpec("Turnover", ColumnKind.NUMERIC, "turnover"),
        ColumnSpec("Trades", ColumnKind.NUMERIC, "trades"),
        ColumnSpec("Deliverable Volume", ColumnKind.NUMERIC, "deliverable"),
        # Misspelling matches the exchange's published header.
        ColumnSpec("%Deliverble", ColumnKind.NUMERIC, "percentage_deliverable"),
    )
)

REQUIRED_COLUMNS = STOCK_SCHEMA.required_columns
