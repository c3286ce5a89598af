"""Field-level accuracy benchmarking for certificate parsing.

Each labeled value is compared with what the parser produced and
classified as an exact match, an equivalent value (same amount or same
calendar date written differently), a wrong value or a missing one.
Per-field precision, recall, F1 and exact accuracy follow from those
counts. With a roster, the proposed ``employee_id`` is scored as one
more field.
"""

import csv
import json
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from coi_intake.errors import COIIntakeError
from coi_intake.extraction.certificate_parser import CertificateParser
from coi_intake.extraction.dates import parse_date
from coi_intake.extraction.models import ParsedCertificate
from coi_intake.matching.employee_matcher import EmployeeMatcher
from coi_intake.matching.models import EmployeeRecord
from coi_intake.matching.normalize import collapse_whitespace
from coi_intake.utils.logger import get_logger

logger = get_logger(__name__)

BENCHMARK_FIELDS = (
    "insured_name",
    "raw_insured_name",
    "policy_number",
    "effective_date",
    "expiration_date",
    "insurer_name",
    "document_type",
)


class Outcome(StrEnum):
    """Result of comparing one predicted value with its label."""

    EXACT = "exact"
    EQUIVALENT = "equivalent"
    WRONG = "wrong"
    MISSING = "missing"


def certificate_fields(parsed: ParsedCertificate) -> dict[str, str]:
    """Flatten the found fields of a parsed certificate for comparison.

    Coverage amounts appear as ``<kind>_amount`` entries.
    """
    values = {
        name: str(getattr(parsed, name))
        for name in BENCHMARK_FIELDS
        if getattr(parsed, name) is not None
    }
    for kind, amount in parsed.coverage_amounts.items():
        values[f"{kind}_amount"] = f"{amount:.2f}"
    return values


@dataclass
class FieldMetrics:
    """Comparison counts for one field across all documents."""

    field_name: str
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    exact_matches: int = 0
    total: int = 0

    def record(self, outcome: Outcome) -> None:
        self.total += 1
        if outcome is Outcome.MISSING:
            self.false_negatives += 1
        elif outcome is Outcome.WRONG:
            self.false_positives += 1
        else:
            self.true_positives += 1
            if outcome is Outcome.EXACT:
                self.exact_matches += 1

    @property
    def precision(self) -> float:
        found = self.true_positives + self.false_positives
        return self.true_positives / found if found else 0.0

    @property
    def recall(self) -> float:
        labeled = self.true_positives + self.false_negatives
        return self.true_positives / labeled if labeled else 0.0

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        return 2 * p * r / (p + r) if p + r else 0.0

    @property
    def accuracy(self) -> float:
        """Share of labeled values reproduced exactly."""
        return self.exact_matches / self.total if self.total else 0.0


@dataclass
class BenchmarkResult:
    """Aggregated results across all documents and fields."""

    total_documents: int
    successful_documents: int
    overall_accuracy: float
    overall_f1: float
    field_metrics: dict[str, FieldMetrics]
    avg_processing_time_ms: float = 0.0
    errors: list[str] = field(default_factory=list)


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def _as_amount(value: str) -> float:
    return float(value.replace("$", "").replace(",", "").replace(" ", ""))


class Evaluator:
    """Scores parsed certificate fields against ground truth labels.

    Args:
        amount_tolerance: Largest difference at which two amounts are equal.
        target_accuracy: Overall exact accuracy reported as passing.
    """

    def __init__(self, amount_tolerance: float = 0.01, target_accuracy: float = 0.9) -> None:
        self.amount_tolerance = amount_tolerance
        self.target_accuracy = target_accuracy

    def compare(self, predicted: str | None, expected: str) -> Outcome:
        """Classify one predicted value against its label.

        Both sides are case-folded and whitespace-collapsed first.
        """
        if predicted is None:
            return Outcome.MISSING
        pred = collapse_whitespace(str(predicted)).lower()
        exp = collapse_whitespace(str(expected)).lower()
        if pred == exp:
            return Outcome.EXACT
        if self._same_amount(pred, exp) or self._same_date(pred, exp):
            return Outcome.EQUIVALENT
        return Outcome.WRONG

    def _same_amount(self, first: str, second: str) -> bool:
        try:
            return abs(_as_amount(first) - _as_amount(second)) < self.amount_tolerance
        except ValueError:
            return False

    @staticmethod
    def _same_date(first: str, second: str) -> bool:
        first_date = parse_date(first)
        return first_date is not None and first_date == parse_date(second)

    def evaluate(
        self,
        predictions: dict[str, dict[str, str]],
        ground_truth: dict[str, dict[str, str]],
    ) -> BenchmarkResult:
        """Score predictions for every labeled document.

        Args:
            predictions: Parsed field values per filename.
            ground_truth: Labeled field values per filename.

        Returns:
            Per-field metrics and their averages.
        """
        metrics: dict[str, FieldMetrics] = {}
        errors: list[str] = []

        for filename, labels in ground_truth.items():
            predicted = predictions.get(filename)
            if predicted is None:
                errors.append(f"Missing prediction for {filename}")
                predicted = {}
            for name, expected in labels.items():
                outcome = self.compare(predicted.get(name), expected)
                metrics.setdefault(name, FieldMetrics(name)).record(outcome)

        scored = [m for m in metrics.values() if m.total]
        return BenchmarkResult(
            total_documents=len(ground_truth),
            successful_documents=sum(1 for name in ground_truth if name in predictions),
            overall_accuracy=_mean(m.accuracy for m in scored),
            overall_f1=_mean(m.f1 for m in scored),
            field_metrics=metrics,
            errors=errors,
        )

    def generate_report(self, result: BenchmarkResult, output_path: Path | None = None) -> str:
        """Render a text report, optionally writing it to ``output_path``."""
        rule = "=" * 64
        verdict = "PASSED" if result.overall_accuracy >= self.target_accuracy else "FAILED"
        lines = [
            rule,
            "COI PARSING BENCHMARK",
            rule,
            f"Documents parsed:  {result.successful_documents}/{result.total_documents}",
            f"Exact accuracy:    {result.overall_accuracy:.2%} "
            f"(target {self.target_accuracy:.0%}: {verdict})",
            f"Mean F1:           {result.overall_f1:.3f}",
            f"Avg parse time:    {result.avg_processing_time_ms:.1f}ms",
            "",
            f"{'Field':<26}{'Precision':>10}{'Recall':>10}{'F1':>8}{'Exact':>10}",
            "-" * 64,
        ]
        lines.extend(
            f"{m.field_name:<26}{m.precision:>10.2%}{m.recall:>10.2%}"
            f"{m.f1:>8.3f}{m.accuracy:>10.2%}"
            for _, m in sorted(result.field_metrics.items())
        )
        lines.append(rule)
        if result.errors:
            lines.extend(["", "Errors:", *(f"  - {error}" for error in result.errors)])

        report = "\n".join(lines)
        if output_path is not None:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(report)
            logger.info("Benchmark report written to %s", output_path)
        return report


def load_ground_truth(path: Path) -> dict[str, dict[str, str]]:
    """Load labeled field values per filename.

    A JSON file maps filenames to ``{field: value}`` objects. A CSV file
    has a ``filename`` column plus one column per field; empty cells are
    unlabeled.

    Raises:
        ValueError: If the file is neither JSON nor CSV.
    """
    suffix = path.suffix.lower()
    labels: dict[str, dict[str, str]] = {}
    if suffix == ".json":
        for filename, values in json.loads(path.read_text()).items():
            labels[filename] = {k: str(v) for k, v in values.items() if v not in (None, "")}
    elif suffix == ".csv":
        with open(path, newline="") as f:
            for row in csv.DictReader(f):
                filename = row.pop("filename")
                labels[filename] = {k: v for k, v in row.items() if v}
    else:
        raise ValueError(f"Unsupported ground truth format: {path.suffix}")
    return labels


def run_benchmark(
    input_dir: Path,
    ground_truth: dict[str, dict[str, str]],
    parser: CertificateParser | None = None,
    evaluator: Evaluator | None = None,
    roster: list[EmployeeRecord] | None = None,
    matcher: EmployeeMatcher | None = None,
) -> BenchmarkResult:
    """Parse every labeled document in ``input_dir`` and score it.

    Documents are text files named as in the ground truth. Missing files
    and files that fail to parse count as missing predictions. When a
    roster is given, the matched employee id is predicted as
    ``employee_id``.
    """
    parser = parser or CertificateParser()
    evaluator = evaluator or Evaluator()
    if roster is not None:
        matcher = matcher or EmployeeMatcher()

    predictions: dict[str, dict[str, str]] = {}
    errors: list[str] = []
    times_ms: list[float] = []

    for filename in ground_truth:
        path = input_dir / filename
        if not path.exists():
            continue
        start = time.perf_counter()
        try:
            parsed = parser.parse(path.read_text(errors="replace"))
        except COIIntakeError as exc:
            errors.append(f"{filename}: {exc}")
            logger.warning("Failed to parse %s: %s", filename, exc)
            continue
        times_ms.append((time.perf_counter() - start) * 1000)

        fields = certificate_fields(parsed)
        if matcher is not None and roster is not None:
            match = matcher.match_by_name(parsed.insured_name, roster)
            if match.employee_id is not None:
                fields["employee_id"] = match.employee_id
        predictions[filename] = fields

    result = evaluator.evaluate(predictions, ground_truth)
    result.errors = errors + result.errors
    result.avg_processing_time_ms = _mean(times_ms)
    return result
