from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterator

from stockdata.services.ingest.contract import STOCK_SCHEMA, StockSchema


class RawRow(Mapping):
    """
    One CSV record as parsed: column name -> raw string, in file column order.

    Missing columns (short lines) are simply absent; ``row.get(name)`` returns None
    and validators treat that as a failed check.
    """

    __slots__ = ("_values", "line_number")

    def __init__(self, values: Mapping[str, str] | None = None, line_number: int | None = None) -> None:
        self._values = dict(values or {})
        self.line_number = line_number

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"RawRow(line={self.line_number}, values={self._values!r})"

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)


@dataclass(frozen=True)
class RowVerdict:
    row: RawRow
    valid: bool
    failed_fields: frozenset[str] = frozenset()


@dataclass(frozen=True)
class RowError:
    line_number: int | None
    failed_fields: tuple[str, ...]

    def to_dict(self) -> dict:
        return {"line_number": self.line_number, "failed_fields": list(self.failed_fields)}


def validate_row(row: Mapping[str, str], schema: StockSchema = STOCK_SCHEMA) -> RowVerdict:
    failed = frozenset(
        col.name for col in schema.validated_columns if not col.validator(row.get(col.name))
    )
    if not isinstance(row, RawRow):
        row = RawRow(row)
    return RowVerdict(row=row, valid=not failed, failed_fields=failed)
