import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent.parent))

import pytest
from src.services.errors import InvalidMonth
from src.services.months import is_valid_month, validate_month, next_month, months_between


class TestMonthHelpers:
    """Test suite for YYYY-MM month identifiers"""

    @pytest.mark.parametrize("month", ["2025-01", "1999-12", "2030-10"])
    def test_valid(self, month):
        assert is_valid_month(month)
        assert validate_month(month) == month

    @pytest.mark.parametrize("month", ["2025-00", "2025-13", "25-01", "2025-1", "2025-01-01", "", None, 202501, "2025-01\n", "２０２５-０１"])
    def test_invalid(self, month):
        assert not is_valid_month(month)
        with pytest.raises(InvalidMonth):
            validate_month(month)

    def test_next_month(self):
        assert next_month("2025-01") == "2025-02"
        assert next_month("2025-09") == "2025-10"
        assert next_month("2025-12") == "2026-01"

    def test_months_between(self):
        assert months_between("2024-11", "2025-02") == ["2024-11", "2024-12", "2025-01", "2025-02"]

    def test_months_between_single(self):
        assert months_between("2025-05", "2025-05") == ["2025-05"]

    def test_months_between_reversed(self):
        assert months_between("2025-05", "2025-01") == []
