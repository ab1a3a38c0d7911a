import io

import pytest

from conftest import HEADER, VALID_ROW, make_csv

from stockdata.services.ingest.errors import StreamError
from stockdata.services.ingest.parser import HeaderEvent, RowEvent, iter_csv_events


def test_header_event_comes_first_and_once():
    events = list(iter_csv_events(io.BytesIO(make_csv(VALID_ROW, VALID_ROW))))
    assert isinstance(events[0], HeaderEvent)
    assert events[0].columns == tuple(HEADER.split(","))
    assert [type(e) for e in events[1:]] == [RowEvent, RowEvent]


def test_rows_keep_raw_strings_and_line_numbers():
    events = list(iter_csv_events(io.BytesIO(make_csv(VALID_ROW, VALID_ROW.replace("AAPL", "MSFT")))))
    first, second = events[1].row, events[2].row
    assert first["Symbol"] == "AAPL"
    assert first["VWAP"] == "151.25"
    assert second["Symbol"] == "MSFT"
    assert (first.line_number, second.line_number) == (2, 3)


def test_bom_and_padded_headers_are_normalised():
    payload = "\ufeff" + HEADER.replace(",", " , ") + "\n" + VALID_ROW + "\n"
    events = list(iter_csv_events(io.BytesIO(payload.encode("utf-8"))))
    assert events[0].columns[0] == "Date"
    assert events[0].columns[-1] == "%Deliverble"
    assert events[1].row["Date"] == "2024-10-22"


def test_blank_lines_are_skipped():
    payload = make_csv("", VALID_ROW, "", VALID_ROW)
    rows = [e for e in iter_csv_events(io.BytesIO(payload)) if isinstance(e, RowEvent)]
    assert len(rows) == 2


def test_short_and_long_lines():
    payload = make_csv("2024-10-22,AAPL,EQ", VALID_ROW + ",extra")
    _, short, wide = list(iter_csv_events(io.BytesIO(payload)))
    assert short.row.get("Volume") is None
    assert len(short.row) == 3
    assert wide.row["_15"] == "extra"


def test_quoted_fields_with_commas():
    payload = make_csv(VALID_ROW.replace("AAPL", '"AAPL, INC"'))
    row = list(iter_csv_events(io.BytesIO(payload)))[1].row
    assert row["Symbol"] == "AAPL, INC"
    assert row["Series"] == "EQ"


def test_empty_input_yields_header_without_columns():
    assert list(iter_csv_events(io.BytesIO(b""))) == [HeaderEvent(columns=())]


def test_unterminated_quote_raises_stream_error():
    payload = make_csv(VALID_ROW) + b'2024-10-23,"AAPL,EQ,150,152\n'
    events = iter_csv_events(io.BytesIO(payload))
    assert isinstance(next(events), HeaderEvent)
    assert isinstance(next(events), RowEvent)
    with pytest.raises(StreamError) as excinfo:
        next(events)
    assert excinfo.value.message


def test_invalid_utf8_raises_stream_error():
    payload = make_csv(VALID_ROW) + b"2024-10-23,\xff\xfe,EQ\n"
    with pytest.raises(StreamError, match="UTF-8"):
        list(iter_csv_events(io.BytesIO(payload)))


def test_stream_is_left_open_for_the_caller():
    stream = io.BytesIO(make_csv(VALID_ROW))
    list(iter_csv_events(stream))
    assert not stream.closed


def test_parsing_is_lazy():
    rows = "\n".join([VALID_ROW] * 20000)
    stream = io.BytesIO(make_csv(rows))
    events = iter_csv_events(stream)
    next(events)
    next(events)
    assert stream.tell() < len(stream.getvalue())
    events.close()
