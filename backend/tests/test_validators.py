import pytest

from stockdata.services.ingest.validators import is_numeric, is_valid_date


@pytest.mark.parametrize("value", ["2024-10-22", "2024-02-29", "1999-12-31", "2000-01-01"])
def test_valid_dates(value):
    assert is_valid_date(value)


@pytest.mark.parametrize(
    "value",
    [
        "2024-02-30",
        "2023-02-29",
        "2024-13-01",
        "22-10-2024",
        "2024/10/22",
        "2024-1-5",
        "24-10-22",
        " 2024-10-22",
        "2024-10-22T00:00:00",
        "2024-10-22 ",
        "",
        None,
    ],
)
def test_invalid_dates(value):
    assert not is_valid_date(value)


@pytest.mark.parametrize(
    "value", ["150", "150.5", "-3.25", "+7", ".5", "5.", "1e6", "2.5E-3", " 42 ", "0", "1000000"]
)
def test_numeric_values(value):
    assert is_numeric(value)


@pytest.mark.parametrize(
    "value", ["", "   ", "abc", "NaN", "nan", "Infinity", "-inf", "1e999", "0x1A", "1_000", "1,000", "12abc", ".", None]
)
def test_non_numeric_values(value):
    assert not is_numeric(value)


def test_validators_never_raise_on_unexpected_types():
    assert is_numeric(12) is False
    assert is_valid_date(20241022) is False
