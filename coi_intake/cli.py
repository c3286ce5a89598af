"""Command-line interface for certificate parsing and employee matching.

Provides subcommands for parsing a single certificate, batch intake of
a folder of certificate text files with CSV export, matching a name
against a roster, and benchmarking parsing accuracy.
"""

import argparse
import csv
import json
import sys
import time
from dataclasses import asdict
from pathlib import Path

from coi_intake.benchmark.evaluator import Evaluator, load_ground_truth, run_benchmark
from coi_intake.errors import COIIntakeError
from coi_intake.extraction.certificate_parser import CertificateParser
from coi_intake.intake import IntakeService
from coi_intake.matching.employee_matcher import EmployeeMatcher
from coi_intake.matching.models import EmployeeRecord
from coi_intake.matching.name_tables import load_name_tables
from coi_intake.matching.roster import load_roster
from coi_intake.utils.config import AppConfig, load_config
from coi_intake.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_TEXT_SUFFIXES = (".txt",)
_META_COLUMNS = [
    "filename",
    "status",
    "processing_time_s",
    "confidence",
    "employee_id",
    "match_confidence",
    "match_type",
    "message",
    "error",
]
_FIELD_COLUMNS = [
    "insured_name",
    "raw_insured_name",
    "policy_number",
    "effective_date",
    "expiration_date",
    "insurer_name",
    "document_type",
    "coverage_amount",
]


def _find_documents(input_dir: Path) -> list[Path]:
    return sorted(
        p for p in input_dir.iterdir() if p.is_file() and p.suffix.lower() in _TEXT_SUFFIXES
    )


def _read_text(file_path: Path) -> str:
    return file_path.read_text(encoding="utf-8", errors="replace")


def process_folder(
    input_dir: Path,
    roster: list[EmployeeRecord],
    output_csv: Path,
    config: AppConfig | None = None,
    verbose: bool = False,
) -> dict[str, int]:
    """Run intake on every certificate text file in a folder.

    Args:
        input_dir: Directory containing ``.txt`` certificate files.
        roster: Employees to match against.
        output_csv: Path for the output CSV file.
        config: Application configuration.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, failed and matched counts.
    """
    service = IntakeService(config or load_config())

    files = _find_documents(input_dir)
    if not files:
        logger.warning("No documents found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0, "matched": 0}

    logger.info("Found %d documents to process", len(files))

    results: list[dict[str, object]] = []
    successful = failed = matched = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            intake = service.process(_read_text(file_path), roster)
        except (COIIntakeError, OSError) as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            results.append({"filename": file_path.name, "status": "failed", "error": str(exc)})
            failed += 1
            continue

        parsed = intake.parsed
        row: dict[str, object] = {
            "filename": file_path.name,
            "status": "success",
            "processing_time_s": round(time.time() - start_time, 3),
            "confidence": parsed.confidence,
            "employee_id": intake.match.employee_id,
            "match_confidence": intake.match.confidence,
            "match_type": intake.match.match_type.value,
            "message": intake.message,
            "error": None,
            "insured_name": parsed.insured_name,
            "raw_insured_name": parsed.raw_insured_name,
            "policy_number": parsed.policy_number,
            "effective_date": parsed.effective_date,
            "expiration_date": parsed.expiration_date,
            "insurer_name": parsed.insurer_name,
            "document_type": parsed.document_type.value,
            "coverage_amount": next(iter(parsed.coverage_amounts.values()), None),
        }
        results.append(row)
        successful += 1
        if intake.match.matched:
            matched += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {
        "total": len(files),
        "successful": successful,
        "failed": failed,
        "matched": matched,
    }
    _print_summary(summary, output_csv)
    return summary


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    if not results:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(
            f, fieldnames=_META_COLUMNS + _FIELD_COLUMNS, extrasaction="ignore"
        )
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    rule = "=" * 50
    print(f"\n{rule}\nBatch Intake Complete\n{rule}")
    for key in ("total", "successful", "failed", "matched"):
        print(f"{key.capitalize() + ':':<12}{summary[key]}")
    print(f"{'Output:':<12}{output_csv}")


def parse_single(file_path: Path, config: AppConfig | None = None) -> dict[str, object]:
    """Parse one certificate text file.

    Returns:
        Dictionary with the filename and the parsed fields.
    """
    config = config or load_config()
    parser = CertificateParser(
        config.extraction, load_name_tables(config.tables.name_tables_path)
    )
    parsed = parser.parse(_read_text(file_path))
    return {"filename": file_path.name, **asdict(parsed)}


def match_name(
    name: str,
    roster: list[EmployeeRecord],
    email: str | None = None,
    config: AppConfig | None = None,
) -> dict[str, object]:
    """Match a name (and optional email) against a roster."""
    config = config or load_config()
    matcher = EmployeeMatcher(
        config.matching, load_name_tables(config.tables.name_tables_path)
    )
    return asdict(matcher.match_employee(name, email, roster))


def _emit(payload: dict[str, object], output: Path | None) -> None:
    output_str = json.dumps(payload, indent=2, default=str)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str)
        print(f"Output written to {output}")
    else:
        print(output_str)


def _require(path: Path, directory: bool = False) -> None:
    ok = path.is_dir() if directory else path.exists()
    if not ok:
        kind = "is not a directory" if directory else "does not exist"
        print(f"Error: {path} {kind}", file=sys.stderr)
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Certificate of insurance intake",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--config", type=Path, help="Configuration YAML file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser("parse", help="Parse a single certificate")
    parse_parser.add_argument("file", type=Path, help="Certificate text file")
    parse_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Run intake on a folder of certificates")
    batch_parser.add_argument("input_dir", type=Path, help="Directory with .txt certificates")
    batch_parser.add_argument(
        "-r", "--roster", type=Path, required=True, help="Roster file (JSON or CSV)"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    match_parser = subparsers.add_parser("match", help="Match a name against a roster")
    match_parser.add_argument("name", help="Insured name to match")
    match_parser.add_argument(
        "-r", "--roster", type=Path, required=True, help="Roster file (JSON or CSV)"
    )
    match_parser.add_argument("--email", help="Email address to try first")

    bench_parser = subparsers.add_parser("benchmark", help="Measure parsing accuracy")
    bench_parser.add_argument("input_dir", type=Path, help="Directory with .txt certificates")
    bench_parser.add_argument(
        "-g", "--ground-truth", type=Path, required=True, help="Ground truth (JSON or CSV)"
    )
    bench_parser.add_argument("-o", "--output", type=Path, help="Report output file")
    bench_parser.add_argument(
        "-r", "--roster", type=Path, help="Roster file; scores employee_id labels too"
    )

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level)

    if args.command == "parse":
        _require(args.file)
        try:
            result = parse_single(args.file, config)
        except COIIntakeError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        _emit(result, args.output)
    elif args.command == "batch":
        _require(args.input_dir, directory=True)
        _require(args.roster)
        process_folder(
            args.input_dir, load_roster(args.roster), args.output, config, args.verbose
        )
    elif args.command == "match":
        _require(args.roster)
        _emit(match_name(args.name, load_roster(args.roster), args.email, config), None)
    elif args.command == "benchmark":
        _require(args.input_dir, directory=True)
        _require(args.ground_truth)
        roster = None
        if args.roster:
            _require(args.roster)
            roster = load_roster(args.roster)
        tables = load_name_tables(config.tables.name_tables_path)
        evaluator = Evaluator()
        result = run_benchmark(
            args.input_dir,
            load_ground_truth(args.ground_truth),
            CertificateParser(config.extraction, tables),
            evaluator,
            roster,
            EmployeeMatcher(config.matching, tables),
        )
        print(evaluator.generate_report(result, args.output))
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
