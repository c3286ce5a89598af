"""Versioned reference tables for name extraction and matching.

The nickname groups, exclusion lists and form-label lists live in a
YAML file shipped with the package. They are loaded once per path and
exposed as an immutable :class:`NameTables` instance.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import yaml

from coi_intake.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TABLES_PATH = Path(__file__).resolve().parent.parent / "data" / "name_tables.yaml"

_REQUIRED_KEYS = (
    "version",
    "nicknames",
    "person_name_exclusions",
    "business_indicators",
    "name_suffixes",
    "company_indicators",
    "skip_labels",
    "skip_phrases",
    "address_words",
)


@dataclass(frozen=True)
class NameTables:
    """Immutable name reference data."""

    version: int
    nickname_groups: tuple[frozenset[str], ...]
    person_name_exclusions: tuple[str, ...]
    business_indicators: tuple[str, ...]
    name_suffixes: tuple[str, ...]
    company_indicators: tuple[str, ...]
    skip_labels: frozenset[str]
    skip_phrases: tuple[str, ...]
    address_words: frozenset[str]

    def name_variations(self, first_name: str) -> frozenset[str]:
        """Return ``first_name`` plus every name sharing a nickname group."""
        lower = first_name.strip().lower()
        variations = {lower}
        for group in self.nickname_groups:
            if lower in group:
                variations |= group
        return frozenset(variations)

    def are_equivalent(self, first: str, second: str) -> bool:
        """Check whether two first names are the same or nickname variants.

        Names are equivalent when their variations overlap, so "Katherine"
        and "Catherine" meet through "kate".

        The relation is symmetric: ``are_equivalent(a, b)`` always equals
        ``are_equivalent(b, a)``.
        """
        a = first.strip().lower()
        b = second.strip().lower()
        if not a or not b:
            return False
        if a == b:
            return True
        return bool(self.name_variations(a) & self.name_variations(b))

    def is_excluded(self, candidate: str) -> bool:
        """Check a scanned name against the recurring false-positive list."""
        lower = candidate.lower()
        for excluded in self.person_name_exclusions:
            other = excluded.lower()
            if other in lower or lower in other:
                return True
        return False


def _parse_tables(data: dict) -> NameTables:
    missing = [key for key in _REQUIRED_KEYS if key not in data]
    if missing:
        raise ValueError(f"Name tables missing keys: {', '.join(missing)}")

    groups = tuple(
        frozenset([canonical.lower(), *(v.lower() for v in variants or [])])
        for canonical, variants in data["nicknames"].items()
    )
    return NameTables(
        version=int(data["version"]),
        nickname_groups=groups,
        person_name_exclusions=tuple(data["person_name_exclusions"]),
        business_indicators=tuple(w.lower() for w in data["business_indicators"]),
        name_suffixes=tuple(w.lower() for w in data["name_suffixes"]),
        company_indicators=tuple(w.lower() for w in data["company_indicators"]),
        skip_labels=frozenset(w.lower() for w in data["skip_labels"]),
        skip_phrases=tuple(p.lower() for p in data["skip_phrases"]),
        address_words=frozenset(w.lower() for w in data["address_words"]),
    )


@lru_cache(maxsize=8)
def _load_cached(path: Path) -> NameTables:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    tables = _parse_tables(data)
    logger.info("Loaded name tables v%d from %s", tables.version, path)
    return tables


def load_name_tables(path: Path | str | None = None) -> NameTables:
    """Load the name tables, once per resolved path.

    Args:
        path: YAML file to load. Defaults to the tables shipped with the
            package.

    Returns:
        Immutable name tables.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required sections are missing.
    """
    resolved = Path(path).resolve() if path is not None else DEFAULT_TABLES_PATH
    if not resolved.exists():
        raise FileNotFoundError(f"Name tables not found: {resolved}")
    return _load_cached(resolved)
