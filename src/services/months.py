from src.services.errors import InvalidMonth
from typing import List
import re

# YYYY-MM identifiers sort lexicographically in chronological order
MONTH_PATTERN = re.compile(r"[0-9]{4}-(0[1-9]|1[0-2])")


def is_valid_month(month) -> bool:
    return isinstance(month, str) and MONTH_PATTERN.fullmatch(month) is not None


def validate_month(month) -> str:
    """Return month unchanged if it is a YYYY-MM identifier, raise InvalidMonth otherwise"""
    if not is_valid_month(month):
        raise InvalidMonth(month)
    return month


def next_month(month: str) -> str:
    """Month identifier following the given one (2025-12 -> 2026-01)"""
    year, num = map(int, validate_month(month).split("-"))
    if num == 12:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{num + 1:02d}"


def months_between(start_month: str, end_month: str) -> List[str]:
    """All month identifiers from start_month to end_month inclusive"""
    validate_month(end_month)
    months = []
    current = validate_month(start_month)
    while current <= end_month:
        months.append(current)
        current = next_month(current)
    return months
