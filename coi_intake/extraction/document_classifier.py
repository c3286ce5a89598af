"""Document kind routing.

Decides whether a document is a certificate of insurance or a contract
by counting identifier hits for each kind. Identifiers are configurable
through a YAML file and fall back to built-in defaults.
"""

import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

import yaml

from coi_intake.utils.logger import get_logger

logger = get_logger(__name__)


class DocumentKind(StrEnum):
    COI = "coi"
    CONTRACT = "contract"


DEFAULT_IDENTIFIERS: dict[DocumentKind, list[str]] = {
    DocumentKind.COI: [
        "certificate of insurance",
        "certificate of liability",
        "acord",
        "insured",
        "policy number",
        "coverage",
    ],
    DocumentKind.CONTRACT: [
        "agreement",
        "contract",
        "hereby agrees",
        "parties",
        "terms and conditions",
        "whereas",
    ],
}


@dataclass
class DocumentKindMatch:
    """Result of classifying a document."""

    kind: DocumentKind
    scores: dict[str, int] = field(default_factory=dict)


class DocumentClassifier:
    """Scores text against per-kind identifier lists.

    Each identifier is a case-insensitive regular expression. The kind
    with more hits wins; a tie routes to the contract parser.

    Args:
        templates_path: Path to the YAML file defining identifiers.
    """

    def __init__(self, templates_path: Path = Path("configs/templates.yaml")) -> None:
        self.identifiers = self._load_identifiers(templates_path)

    def _load_identifiers(self, path: Path) -> dict[DocumentKind, list[str]]:
        """Load identifier lists, keeping defaults for kinds the file omits.

        Args:
            path: Path to the templates YAML file.

        Returns:
            Identifier patterns per document kind.
        """
        identifiers = {kind: list(patterns) for kind, patterns in DEFAULT_IDENTIFIERS.items()}
        if not path.exists():
            logger.debug("No templates file at %s, using default identifiers", path)
            return identifiers

        with open(path) as f:
            data = yaml.safe_load(f) or {}
        for name, template in data.items():
            try:
                kind = DocumentKind(name)
            except ValueError:
                logger.warning("Ignoring unknown document kind '%s' in %s", name, path)
                continue
            patterns = (template or {}).get("identifiers")
            if patterns:
                identifiers[kind] = [str(p) for p in patterns]
        return identifiers

    def score(self, text: str, kind: DocumentKind) -> int:
        """Count how many identifiers of ``kind`` occur in the text."""
        return sum(
            1 for ident in self.identifiers[kind] if re.search(ident, text, re.IGNORECASE)
        )

    def classify(self, text: str) -> DocumentKindMatch:
        """Classify a document as a certificate or a contract.

        Args:
            text: Document text.

        Returns:
            The winning kind together with the score of every kind.
        """
        coi_score = self.score(text, DocumentKind.COI)
        contract_score = self.score(text, DocumentKind.CONTRACT)
        kind = DocumentKind.COI if coi_score > contract_score else DocumentKind.CONTRACT
        logger.info(
            "Document kind %s (coi=%d, contract=%d)", kind, coi_score, contract_score
        )
        return DocumentKindMatch(
            kind=kind,
            scores={DocumentKind.COI.value: coi_score, DocumentKind.CONTRACT.value: contract_score},
        )
