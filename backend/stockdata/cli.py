"""
stockdata-ingest

Validate (and optionally load) a daily stock CSV without going through the HTTP API.

Usage:
  stockdata-ingest validate data/sbin_2024.csv --show-rows
  stockdata-ingest load data/sbin_2024.csv
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from stockdata.core.config import settings
from stockdata.core.logging import configure_logging
from stockdata.services.ingest.errors import PersistenceError
from stockdata.services.ingest.pipeline import ingest_csv_file
from stockdata.services.ingest.utils import compute_file_sha256


def _print(payload: dict) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2, default=str)
    sys.stdout.write("\n")


def cmd_validate(args: argparse.Namespace) -> int:
    summary = ingest_csv_file(args.path)
    _print(summary.to_dict(include_rows=args.show_rows))
    return 0 if summary.success and summary.successful_records > 0 else 1


def cmd_load(args: argparse.Namespace) -> int:
    from stockdata.db.base import Base
    from stockdata.db.session import SessionLocal, engine
    from stockdata.services.ingest.run import create_ingest_run, run_stock_ingest

    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)

    path = Path(args.path)
    source_hash = compute_file_sha256(path, settings.UPLOAD_CHUNK_SIZE)
    db = SessionLocal()
    try:
        try:
            outcome = run_stock_ingest(
                db=db,
                path=path,
                source_name=path.name,
                source_hash=source_hash,
                batch_size=settings.INSERT_BATCH_SIZE,
            )
            payload = outcome.summary.to_dict(include_rows=False)
            payload["ingest_run_id"] = outcome.ingest_run.id
            payload["inserted"] = len(outcome.inserted)
            db.commit()
        except PersistenceError as exc:
            db.rollback()
            create_ingest_run(
                db=db,
                source_name=path.name,
                source_hash=source_hash,
                stats={},
                status_value="FAILED",
                error=exc.message,
            )
            db.commit()
            _print({"success": False, "message": exc.message})
            return 2
    finally:
        db.close()

    _print(payload)
    return 0 if outcome.accepted else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stockdata-ingest", description="Validate or load a daily stock CSV")
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Validate the CSV and print the summary as JSON")
    validate.add_argument("path", help="Path to the CSV file")
    validate.add_argument("--show-rows", action="store_true", help="Include valid/invalid rows in the output")
    validate.set_defaults(func=cmd_validate)

    load = sub.add_parser("load", help="Validate the CSV and insert accepted rows into DATABASE_URL")
    load.add_argument("path", help="Path to the CSV file")
    load.set_defaults(func=cmd_load)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging(settings.LOG_LEVEL)
    parser = build_parser()
    args = parser.parse_args(argv)
    if not Path(args.path).is_file():
        parser.error(f"file not found: {args.path}")
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
