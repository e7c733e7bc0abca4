"""Import SLA configurations from a CSV file straight into the database.

Usage:

    python scripts/import_sla_csv.py path/to/sla.csv
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.append(str(BASE_DIR))

from sla_engine.core.config import settings  # noqa: E402
from sla_engine.core.exceptions import BadRequestError  # noqa: E402
from sla_engine.core.logging import setup_logging  # noqa: E402
from sla_engine.db.session import SessionLocal  # noqa: E402
from sla_engine.services.sla import SLAConfigurationEngine, SqlAlchemySLAConfigurationStore, ThresholdLimits  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import SLA configurations from CSV")
    parser.add_argument("path", type=Path, help="CSV file with a company_id,department_id,... header row")
    parser.add_argument("--encoding", default="utf-8", help="File encoding (default: utf-8)")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging(settings.LOG_LEVEL)
    csv_data = args.path.read_text(encoding=args.encoding)

    db = SessionLocal()
    try:
        engine = SLAConfigurationEngine(
            SqlAlchemySLAConfigurationStore(db),
            limits=ThresholdLimits.from_settings(settings),
            csv_max_rows=settings.SLA_CSV_MAX_ROWS,
        )
        try:
            result = engine.import_csv(csv_data)
        except BadRequestError as exc:
            print(f"Rejected: {exc.message} {exc.details or ''}".rstrip())
            return 1
    finally:
        db.close()

    print("Summary:")
    print(f"- processed: {result.processed}")
    print(f"- created: {len(result.success)}")
    print(f"- duplicates: {len(result.duplicates)}")
    print(f"- failed: {len(result.errors)}")
    for issue in (result.errors + result.duplicates)[:10]:
        print(f"  - line {issue.line}: {issue.message}")
    return 0 if not result.errors else 2


if __name__ == "__main__":
    raise SystemExit(main())
