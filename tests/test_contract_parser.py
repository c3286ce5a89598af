"""Tests for document routing and contract parsing."""

import logging
from pathlib import Path

import pytest
import yaml

from coi_intake.errors import UnsupportedInput
from coi_intake.extraction.contract_parser import (
    ContractParser,
    detect_contract_type,
    parse_document,
)
from coi_intake.extraction.document_classifier import DocumentClassifier, DocumentKind
from coi_intake.extraction.models import NO_EXTRACTABLE_TEXT, ParsedCertificate, ParsedContract

CONTRACT_TEXT = (
    "SERVICE AGREEMENT\n"
    "This agreement is made between Acme Holdings and Bright Exteriors LLC.\n"
    "Effective Date: 03/01/2024\n"
    "1. The contractor shall provide roofing services.\n"
    "2. Payment is due within thirty days.\n"
)


class TestDocumentClassifier:
    """Tests for DocumentClassifier."""

    def setup_method(self) -> None:
        self.classifier = DocumentClassifier(Path("does/not/exist.yaml"))

    def test_certificate(self, certificate_text: str) -> None:
        match = self.classifier.classify(certificate_text)
        assert match.kind == DocumentKind.COI
        assert match.scores["coi"] > match.scores["contract"]

    def test_contract(self) -> None:
        assert self.classifier.classify(CONTRACT_TEXT).kind == DocumentKind.CONTRACT

    def test_tie_goes_to_contract(self) -> None:
        match = self.classifier.classify("Nothing recognizable here")
        assert match.kind == DocumentKind.CONTRACT
        assert match.scores == {"coi": 0, "contract": 0}

    def test_loads_project_templates(self, config_dir: Path) -> None:
        classifier = DocumentClassifier(config_dir / "templates.yaml")
        assert "acord" in classifier.identifiers[DocumentKind.COI]

    def test_custom_identifiers(self, tmp_path: Path) -> None:
        path = tmp_path / "templates.yaml"
        path.write_text(yaml.dump({"coi": {"identifiers": ["zebra"]}}))
        classifier = DocumentClassifier(path)
        assert classifier.identifiers[DocumentKind.COI] == ["zebra"]
        assert classifier.identifiers[DocumentKind.CONTRACT]
        assert classifier.classify("A ZEBRA crossing").kind == DocumentKind.COI

    def test_unknown_kind_ignored(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "templates.yaml"
        path.write_text(yaml.dump({"invoice": {"identifiers": ["amount due"]}}))
        with caplog.at_level(logging.WARNING):
            classifier = DocumentClassifier(path)
        assert set(classifier.identifiers) == {DocumentKind.COI, DocumentKind.CONTRACT}
        assert "invoice" in caplog.text


class TestContractParser:
    """Tests for ContractParser."""

    def setup_method(self) -> None:
        self.parser = ContractParser()

    def test_service_agreement(self) -> None:
        result = self.parser.parse(CONTRACT_TEXT)
        assert result.party_names == ["Acme Holdings"]
        assert result.effective_date == "03/01/2024"
        assert result.contract_type == "SERVICE"
        assert result.key_terms == [
            "The contractor shall provide roofing services.",
            "Payment is due within thirty days.",
        ]
        assert result.confidence == 100

    def test_nothing_found(self) -> None:
        result = self.parser.parse("lorem ipsum")
        assert result == ParsedContract(raw_text_excerpt="lorem ipsum")

    def test_no_text_raises(self) -> None:
        with pytest.raises(UnsupportedInput):
            self.parser.parse(NO_EXTRACTABLE_TEXT)

    def test_key_terms_capped(self) -> None:
        text = "\n".join(f"{i}. Clause number {i} applies here." for i in range(1, 15))
        assert len(self.parser.parse(text).key_terms) == 10


class TestContractType:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("EMPLOYMENT AGREEMENT between", "EMPLOYMENT"),
            ("Mutual NDA", "NDA"),
            ("Confidentiality terms", "NDA"),
            ("Independent Contractor Agreement", "CONTRACTOR"),
            ("Master Services Agreement", "SERVICE"),
            ("Standard lease", None),
        ],
    )
    def test_detect(self, text: str, expected: str | None) -> None:
        assert detect_contract_type(text) == expected


class TestParseDocument:
    """Tests for routing a document to its parser."""

    def test_certificate_routed(self, certificate_text: str) -> None:
        result = parse_document(certificate_text)
        assert isinstance(result, ParsedCertificate)
        assert result.insured_name == "Christopher Aycock"

    def test_contract_routed(self) -> None:
        assert isinstance(parse_document(CONTRACT_TEXT), ParsedContract)

    @pytest.mark.parametrize("text", [NO_EXTRACTABLE_TEXT, "", "  "])
    def test_no_text_is_unextractable_certificate(self, text: str) -> None:
        assert parse_document(text) == ParsedCertificate.unextractable()

    def test_injected_classifier(self, tmp_path: Path) -> None:
        path = tmp_path / "templates.yaml"
        path.write_text(yaml.dump({"coi": {"identifiers": ["zebra"]}}))
        result = parse_document("zebra", classifier=DocumentClassifier(path))
        assert isinstance(result, ParsedCertificate)
