import io
import os
import sys
import tempfile

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ENV", "dev")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="stockdata-uploads-"))
os.environ.setdefault("CSV_FILE_SIZE_LIMIT", str(64 * 1024))

import stockdata.models  # noqa: E402,F401
from stockdata.db.base import Base  # noqa: E402
from stockdata.db.session import SessionLocal, engine  # noqa: E402

from main import app  # noqa: E402

HEADER = (
    "Date,Symbol,Series,Prev Close,Open,High,Low,Last,Close,VWAP,Volume,"
    "Turnover,Trades,Deliverable Volume,%Deliverble"
)
VALID_ROW = "2024-10-22,AAPL,EQ,150,152,153,149,151,150.5,151.25,1000000,150000000,1000,800000,80"


def make_csv(*rows: str, header: str = HEADER) -> bytes:
    return ("\n".join([header, *rows]) + "\n").encode("utf-8")


def as_stream(payload: bytes) -> io.BytesIO:
    return io.BytesIO(payload)


@pytest.fixture()
def client():
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as test_client:
        yield test_client
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
