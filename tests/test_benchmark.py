"""Tests for the certificate parsing benchmark."""

import json
from pathlib import Path

import pytest

from coi_intake.benchmark.evaluator import (
    BenchmarkResult,
    Evaluator,
    FieldMetrics,
    Outcome,
    certificate_fields,
    load_ground_truth,
    run_benchmark,
)
from coi_intake.extraction.certificate_parser import CertificateParser
from coi_intake.matching.models import EmployeeRecord


class TestFieldMetrics:
    """Tests for the FieldMetrics data class."""

    def test_precision_and_recall(self) -> None:
        m = FieldMetrics("policy_number", true_positives=3, false_positives=1, false_negatives=2)
        assert m.precision == 0.75
        assert m.recall == 0.6

    def test_zero_denominators(self) -> None:
        m = FieldMetrics("policy_number")
        assert m.precision == 0.0
        assert m.recall == 0.0
        assert m.f1 == 0.0
        assert m.accuracy == 0.0

    def test_f1_perfect(self) -> None:
        m = FieldMetrics("insurer_name", true_positives=4, exact_matches=4, total=4)
        assert m.f1 == 1.0
        assert m.accuracy == 1.0


class TestEvaluator:
    """Tests for Evaluator.evaluate."""

    def setup_method(self) -> None:
        self.evaluator = Evaluator()

    def test_perfect_predictions(self) -> None:
        gt = {"a.txt": {"insured_name": "John Doe", "policy_number": "GL123456"}}
        result = self.evaluator.evaluate(gt, gt)
        assert result.overall_accuracy == 1.0
        assert result.overall_f1 == 1.0
        assert result.successful_documents == 1

    def test_case_and_whitespace_folded(self) -> None:
        gt = {"a.txt": {"insurer_name": "Hartford  Fire"}}
        pred = {"a.txt": {"insurer_name": "HARTFORD FIRE"}}
        metrics = self.evaluator.evaluate(pred, gt).field_metrics["insurer_name"]
        assert metrics.exact_matches == 1

    def test_same_date_different_notation(self) -> None:
        gt = {"a.txt": {"expiration_date": "January 15, 2025"}}
        pred = {"a.txt": {"expiration_date": "01/15/2025"}}
        metrics = self.evaluator.evaluate(pred, gt).field_metrics["expiration_date"]
        assert metrics.true_positives == 1
        assert metrics.exact_matches == 0

    def test_wrong_value(self) -> None:
        gt = {"a.txt": {"policy_number": "GL123456"}}
        pred = {"a.txt": {"policy_number": "GL654321"}}
        metrics = self.evaluator.evaluate(pred, gt).field_metrics["policy_number"]
        assert metrics.false_positives == 1

    def test_missing_prediction(self) -> None:
        result = self.evaluator.evaluate({}, {"a.txt": {"insured_name": "John Doe"}})
        assert result.successful_documents == 0
        assert result.errors == ["Missing prediction for a.txt"]
        assert result.field_metrics["insured_name"].false_negatives == 1

    def test_empty_ground_truth(self) -> None:
        result = self.evaluator.evaluate({}, {})
        assert result.total_documents == 0
        assert result.overall_accuracy == 0.0


class TestCompare:
    """Tests for classifying one predicted value."""

    def setup_method(self) -> None:
        self.evaluator = Evaluator()

    def test_exact_after_folding(self) -> None:
        assert self.evaluator.compare("Hartford  FIRE", "hartford fire") == Outcome.EXACT

    def test_amount_formatting(self) -> None:
        assert self.evaluator.compare("$1,000,000", "1000000.00") == Outcome.EQUIVALENT

    def test_amount_tolerance(self) -> None:
        assert self.evaluator.compare("100.005", "100.00") == Outcome.EQUIVALENT
        assert self.evaluator.compare("100.05", "100.00") == Outcome.WRONG

    def test_dates(self) -> None:
        assert self.evaluator.compare("1/15/25", "01/15/2025") == Outcome.EQUIVALENT
        assert self.evaluator.compare("1/15/2025", "2025-01-15") == Outcome.WRONG

    def test_text(self) -> None:
        assert self.evaluator.compare("acme", "acne") == Outcome.WRONG

    def test_missing(self) -> None:
        assert self.evaluator.compare(None, "GL123456") == Outcome.MISSING

    def test_record_outcomes(self) -> None:
        metrics = FieldMetrics("policy_number")
        for outcome in Outcome:
            metrics.record(outcome)
        assert metrics.true_positives == 2
        assert metrics.false_positives == 1
        assert metrics.false_negatives == 1
        assert metrics.exact_matches == 1
        assert metrics.total == 4


class TestGenerateReport:
    """Tests for report generation."""

    def _result(self, accuracy: float, errors: list[str] | None = None) -> BenchmarkResult:
        return BenchmarkResult(
            total_documents=1,
            successful_documents=1,
            overall_accuracy=accuracy,
            overall_f1=accuracy,
            field_metrics={"policy_number": FieldMetrics("policy_number", 1, 0, 0, 1, 1)},
            errors=errors or [],
        )

    def test_header_and_metrics(self) -> None:
        report = Evaluator().generate_report(self._result(0.95))
        assert "COI PARSING BENCHMARK" in report
        assert "policy_number" in report
        assert "PASSED" in report

    def test_target_failed(self) -> None:
        assert "FAILED" in Evaluator(target_accuracy=0.99).generate_report(self._result(0.95))

    def test_errors_listed(self) -> None:
        report = Evaluator().generate_report(self._result(1.0, ["a.txt: unreadable"]))
        assert "Errors:" in report
        assert "a.txt: unreadable" in report

    def test_written_to_file(self, tmp_path: Path) -> None:
        output = tmp_path / "reports" / "benchmark.txt"
        report = Evaluator().generate_report(self._result(1.0), output)
        assert output.read_text() == report


class TestLoadGroundTruth:
    """Tests for ground truth file loading."""

    def test_json(self, tmp_path: Path) -> None:
        data = {"a.txt": {"policy_number": "GL123456"}}
        path = tmp_path / "gt.json"
        path.write_text(json.dumps(data))
        assert load_ground_truth(path) == data

    def test_csv_skips_empty_cells(self, tmp_path: Path) -> None:
        path = tmp_path / "gt.csv"
        path.write_text("filename,policy_number,insurer_name\na.txt,GL123456,\n")
        assert load_ground_truth(path) == {"a.txt": {"policy_number": "GL123456"}}

    def test_unsupported(self, tmp_path: Path) -> None:
        path = tmp_path / "gt.yaml"
        path.touch()
        with pytest.raises(ValueError, match="Unsupported"):
            load_ground_truth(path)


class TestRunBenchmark:
    """Tests for benchmarking a folder of certificate texts."""

    def test_certificate_fields(self, certificate_text: str) -> None:
        fields = certificate_fields(CertificateParser().parse(certificate_text))
        assert fields["document_type"] == "GENERAL_LIABILITY"
        assert fields["general_liability_amount"] == "2000000.00"
        assert fields["policy_number"] == "WC123456789"

    def test_run(self, tmp_path: Path, certificate_text: str) -> None:
        (tmp_path / "cert.txt").write_text(certificate_text)
        (tmp_path / "bad.txt").write_text("\x00\x01\x02")
        gt = {
            "cert.txt": {
                "insured_name": "christopher aycock",
                "policy_number": "WC123456789",
                "expiration_date": "1/15/2025",
                "general_liability_amount": "$2,000,000",
            },
            "bad.txt": {"insured_name": "John Doe"},
            "missing.txt": {"insured_name": "Jane Doe"},
        }

        result = run_benchmark(tmp_path, gt)

        assert result.total_documents == 3
        assert result.successful_documents == 1
        assert result.field_metrics["policy_number"].exact_matches == 1
        assert result.field_metrics["expiration_date"].true_positives == 1
        assert result.field_metrics["general_liability_amount"].true_positives == 1
        assert result.field_metrics["insured_name"].false_negatives == 2
        assert any(e.startswith("bad.txt:") for e in result.errors)
        assert result.avg_processing_time_ms > 0

    def test_run_with_roster(
        self, tmp_path: Path, certificate_text: str, roster: list[EmployeeRecord]
    ) -> None:
        (tmp_path / "cert.txt").write_text(certificate_text)
        gt = {"cert.txt": {"employee_id": "e1"}}
        result = run_benchmark(tmp_path, gt, roster=roster)
        assert result.field_metrics["employee_id"].exact_matches == 1
        assert result.overall_accuracy == 1.0
