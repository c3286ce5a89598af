"""Load employee rosters from JSON or CSV files."""

import csv
import json
from pathlib import Path

from coi_intake.utils.logger import get_logger

from .models import EmployeeRecord

logger = get_logger(__name__)

_FALSE_VALUES = {"false", "0", "no", "n", "inactive"}


def _parse_active(value: object) -> bool:
    if value is None or value == "":
        return True
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in _FALSE_VALUES


def employee_from_dict(data: dict) -> EmployeeRecord:
    """Build a roster entry from a mapping with snake_case or camelCase keys."""
    return EmployeeRecord(
        id=str(data["id"]),
        first_name=str(data.get("first_name", data.get("firstName")) or ""),
        last_name=str(data.get("last_name", data.get("lastName")) or ""),
        email=str(data.get("email") or ""),
        active=_parse_active(data.get("active", data.get("isActive"))),
    )


def load_roster(path: Path) -> list[EmployeeRecord]:
    """Load a roster file.

    JSON files hold a list of employee objects (or an object with an
    ``employees`` list); CSV files have a header row with ``id``,
    ``first_name``, ``last_name``, ``email`` and optionally ``active``.

    Args:
        path: Roster file.

    Returns:
        The roster entries in file order.

    Raises:
        ValueError: If the file format is not supported.
    """
    suffix = path.suffix.lower()
    if suffix == ".json":
        with open(path) as f:
            data = json.load(f)
        rows = data.get("employees", []) if isinstance(data, dict) else data
    elif suffix == ".csv":
        with open(path, newline="") as f:
            rows = list(csv.DictReader(f))
    else:
        raise ValueError(f"Unsupported roster format: {path.suffix}")

    roster = [employee_from_dict(row) for row in rows]
    logger.info("Loaded %d employees from %s", len(roster), path)
    return roster
