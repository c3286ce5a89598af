"""Shared test fixtures for the COI intake test suite."""

from pathlib import Path

import pytest

from coi_intake.matching.models import EmployeeRecord
from coi_intake.matching.name_tables import NameTables, load_name_tables

ACORD_CERTIFICATE = """CERTIFICATE OF LIABILITY INSURANCE
DATE (MM/DD/YYYY) 01/05/2024
PRODUCER
Harbor Insurance Agency
100 Harbor Blvd
Baltimore, MD 21201
CONTACT NAME: Jane Agent
E-MAIL ADDRESS: certs@harboragency.com
INSURED
Christopher Aycock
4521 Oak Ridge Rd
Towson, MD 21204
INSURER A : Accident Fund General Insurance Co NAIC # 10166
COVERAGES
COMMERCIAL GENERAL LIABILITY
POLICY NUMBER: WC123456789
POLICY EFF 01/15/2024 01/15/2025
EACH OCCURRENCE $1,000,000
GENERAL AGGREGATE $2,000,000
"""


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"


@pytest.fixture
def tables() -> NameTables:
    """Return the packaged name tables."""
    return load_name_tables()


@pytest.fixture
def certificate_text() -> str:
    """A standard ACORD-style certificate with every field present."""
    return ACORD_CERTIFICATE


@pytest.fixture
def roster() -> list[EmployeeRecord]:
    """A small roster including an inactive employee."""
    return [
        EmployeeRecord("e1", "Chris", "Aycock", "chris.aycock@example.com"),
        EmployeeRecord("e2", "John", "Smith", "jsmith@example.com"),
        EmployeeRecord("e3", "Maria", "Gonzalez", "maria@example.com"),
        EmployeeRecord("e4", "Robert", "Jones", "bob.jones@example.com"),
        EmployeeRecord("e5", "Jane", "Miller", "jane.miller@example.com", active=False),
    ]
