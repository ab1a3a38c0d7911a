import logging

from stockdata.core.logging import configure_logging


def _console_handler() -> logging.Handler:
    [handler] = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
    return handler


def test_console_lines_are_key_value():
    configure_logging("INFO")
    record = logging.LogRecord(
        "stockdata.services.ingest.transport",
        logging.INFO,
        __file__,
        1,
        "upload_stored path=%s size=%s",
        ("a.csv", 10),
        None,
    )
    line = _console_handler().format(record)
    assert line.startswith("ts=")
    assert line.endswith(" level=INFO logger=stockdata.services.ingest.transport upload_stored path=a.csv size=10")


def test_noisy_libraries_stay_quiet():
    configure_logging("DEBUG")
    try:
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("python_multipart").level == logging.WARNING
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging("INFO")
