from __future__ import annotations

import argparse
import logging
from pathlib import Path

from ratesheet_pipeline.cli.loader import import_file, validate_file
from ratesheet_pipeline.db.az_destinations import export_destinations_csv
from ratesheet_pipeline.db.connect import connect
from ratesheet_pipeline.db.initialize import db_init
from ratesheet_pipeline.identifiers.short_codes import parse_short_code, resolve_identifier
from ratesheet_pipeline.parsing.increments import normalize_billing_increment
from ratesheet_pipeline.parsing.validator import DEFAULT_MAX_ERRORS, format_validation_errors


def main(argv: list[str] | None = None) -> int:
    """
    A CLI for validating and importing AZ rate sheets into Postgres.

    The `cmd` options are:
    ## validate:
    Check a rate sheet (CSV, JSONL or XLSX) without touching the DB.
    Prints `OK` or an error digest; exits 1 when the sheet has errors.

    ## import:
    Validate then upsert a rate sheet into `az_destinations`.
    - `--mode update` (default) upserts by code,
    - `--mode replace` clears the table first.
    Nothing is written when the sheet has errors.

    ### Example usage:
    - `azrates validate --input data/sample/az_codes.csv`
    - `azrates import --input data/sample/az_codes.xlsx --mode replace`

    ## resolve / normalize:
    Classify an identifier (UUID, short code, business code), or normalize a
    billing increment like `60-6`.

    ## export:
    Write all destinations as CSV.

    ## db:
    Database controlling commands, includes DB initalization functionality.
    """
    p = argparse.ArgumentParser(prog="azrates")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    # validate cmd
    validate = sub.add_parser("validate", help="Validate a rate sheet without importing it.")
    validate.add_argument("--input", required=True, help="Path to input file (CSV, JSONL or XLSX).")
    validate.add_argument("--sheet", default=None, help="Worksheet name for XLSX input (default: active sheet).")
    validate.add_argument("--max-errors", type=int, default=DEFAULT_MAX_ERRORS)

    # import cmd
    imp = sub.add_parser("import", help="Validate and import a rate sheet into az_destinations.")
    imp.add_argument("--input", required=True, help="Path to input file (CSV, JSONL or XLSX).")
    imp.add_argument("--sheet", default=None, help="Worksheet name for XLSX input (default: active sheet).")
    imp.add_argument("--mode", choices=["update", "replace"], default="update")
    imp.add_argument("--max-errors", type=int, default=DEFAULT_MAX_ERRORS)

    # resolve cmd
    resolve = sub.add_parser("resolve", help="Classify an identifier as uuid, shortCode or code.")
    resolve.add_argument("identifier")

    # normalize cmd
    normalize = sub.add_parser("normalize", help="Normalize a billing increment, e.g. 60-6.")
    normalize.add_argument("value")

    # export cmd
    export = sub.add_parser("export", help="Export az_destinations as CSV.")
    export.add_argument("--output", required=True, help="Path of the CSV file to write.")

    # db cmd
    db = sub.add_parser("db", help="Database utilities.")
    db_sub = db.add_subparsers(dest="db_cmd", required=True)

    db_init_p = db_sub.add_parser("init", help="Initialize DB schema from SQL file(s).")
    db_init_p.add_argument("--sql", default="sql", help="Path to schema SQL file OR a directory of `.sql` files.")

    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.cmd == "validate":
        result = validate_file(Path(args.input), sheet_name=args.sheet)
        if result.is_valid:
            print(f"OK: {len(result.normalized_data)} rows valid")
            return 0
        print(f"{len(result.errors)} errors in {len(result.normalized_data)} rows")
        print(format_validation_errors(result.errors, max_errors=args.max_errors))
        return 1

    if args.cmd == "import":
        with connect() as conn:
            summary = import_file(conn, input_path=Path(args.input), mode=args.mode, sheet_name=args.sheet)
        print(summary.render_one_line())
        if summary.rejected:
            print(summary.render_errors(max_errors=args.max_errors))
            return 1
        return 0

    if args.cmd == "resolve":
        resolved = resolve_identifier(args.identifier)
        line = f"{resolved.type} {resolved.value}"
        if resolved.type == "shortCode":
            sc = parse_short_code(resolved.value)
            assert sc is not None
            line += f" {sc.prefix.entity_kind} {sc.sequence}"
        print(line)
        return 0

    if args.cmd == "normalize":
        res = normalize_billing_increment(args.value)
        if res.normalized_value is None:
            print(res.error)
            return 1
        print(res.normalized_value.value)
        return 0

    if args.cmd == "export":
        out_path = Path(args.output)
        with connect() as conn, out_path.open("w", encoding="utf-8", newline="") as f:
            n = export_destinations_csv(conn, f)
        print(f"Exported {n} destinations to {out_path}")
        return 0

    if args.cmd == "db" and args.db_cmd == "init":
        files = db_init(sql_path=Path(args.sql))
        print(f"Initialized schema from {args.sql} ({len(files)} files)")
        return 0

    return 2
