# import_cli.py

from __future__ import annotations

import argparse
from pathlib import Path

from src.tools.listing_import import import_csv_to_json


def main() -> int:
    p = argparse.ArgumentParser(description="Import a listings CSV export into the JSON listing pool")
    p.add_argument("csv", type=str, help="CSV export to read")
    p.add_argument("--out", type=str, default="data/listings.json", help="JSON pool to write")
    p.add_argument("--show-errors", type=int, choices=(0, 1), default=0)

    args = p.parse_args()

    report = import_csv_to_json(Path(args.csv), Path(args.out))

    print(f"rows: {report.rows}, imported: {report.imported}, invalid: {report.invalid}, non-positive price: {report.non_positive_price}")
    if args.show_errors:
        for err in report.errors:
            print(f"  {err}")
    print(f"wrote {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
