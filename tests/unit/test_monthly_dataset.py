import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent.parent))

import pytest
import logging
import pandas as pd
from src.models.billing import MonthlyVolumes, NetworkCosts
from src.services.monthly_dataset import (
    normalize_monthly_data,
    aggregate_monthly_volumes,
    extract_network_costs,
)

EAN_A = "541448000000000001"
EAN_B = "541448000000000002"


@pytest.fixture
def readings():
    """Quarter-hourly rows for two EAN codes across a month boundary"""
    timestamps = pd.date_range("2025-01-31 23:00", periods=8, freq="15min")
    rows = []
    for ts in timestamps:
        rows.append({
            "ean_code": EAN_A,
            "timestamp": ts,
            "volume_partage": 1.0,
            "volume_complementaire": 0.5,
            "injection_partagee": 0.0,
            "injection_complementaire": 0.0,
        })
        rows.append({
            "ean_code": f" {EAN_B} ",
            "timestamp": ts,
            "volume_partage": 0.0,
            "volume_complementaire": 0.0,
            "injection_partagee": 2.0,
            "injection_complementaire": 0.25,
        })
    return pd.DataFrame(rows)


@pytest.fixture
def cost_table():
    return pd.DataFrame({
        "EAN": [EAN_A, EAN_B],
        "Utilisation du réseau € HTVA": ["12,50", "8.00"],
        "Surcharges € HTVA": [1.5, 0.0],
        "Tarif capac. (>2020) € HTVA": [3.0, 2.0],
        "Tarif mesure & comptage € HTVA": [4.0, 4.0],
        "Tarif OSP € HTVA": [0.75, None],
        "Transport - coût ELIA € HTVA": [2.25, 1.0],
        "Redevance de voirie € HTVA": [0.5, 0.5],
        "Gridfee € HTVA": [1.0, 1.0],
    })


class TestNormalizeMonthlyData:
    """Test suite for ingestion-boundary validation"""

    def test_records_validated(self):
        normalized = normalize_monthly_data({
            "2025-01": {"volume_partage": 10, "injection_partagee": "2,5"},
            "2025-02": MonthlyVolumes(shared_volume=3),
            "2025-03": None,
        })

        assert normalized["2025-01"] == MonthlyVolumes(shared_volume=10, shared_injection=2.5)
        assert normalized["2025-02"].shared_volume == 3.0
        assert normalized["2025-03"] == MonthlyVolumes()

    def test_malformed_month_skipped(self):
        normalized = normalize_monthly_data({
            "2025-1": {"volume_partage": 10},
            "janvier": {"volume_partage": 10},
            "2025-02\n": {"volume_partage": 10},
            "2025-04": {"volume_partage": 1},
        })

        assert list(normalized) == ["2025-04"]

    def test_empty(self):
        assert normalize_monthly_data({}) == {}
        assert normalize_monthly_data(None) == {}


class TestAggregateMonthlyVolumes:
    """Test suite for monthly aggregation of quarter-hourly readings"""

    def test_grouped_by_ean_and_month(self, readings):
        result = aggregate_monthly_volumes(readings)

        assert set(result) == {EAN_A, EAN_B}
        assert set(result[EAN_A]) == {"2025-01", "2025-02"}
        assert result[EAN_A]["2025-01"].shared_volume == pytest.approx(4.0)
        assert result[EAN_A]["2025-01"].complementary_volume == pytest.approx(2.0)
        assert result[EAN_A]["2025-02"].shared_volume == pytest.approx(4.0)
        assert result[EAN_B]["2025-02"].shared_injection == pytest.approx(8.0)
        assert result[EAN_B]["2025-02"].complementary_injection == pytest.approx(1.0)

    def test_missing_volume_columns(self):
        df = pd.DataFrame({
            "ean_code": [EAN_A, EAN_A],
            "timestamp": ["2025-03-01 00:00", "2025-03-01 00:15"],
            "shared_volume": [1.25, 1.25],
        })

        result = aggregate_monthly_volumes(df)

        assert result[EAN_A]["2025-03"] == MonthlyVolumes(shared_volume=2.5)

    def test_unreadable_values_count_as_zero(self):
        df = pd.DataFrame({
            "ean_code": [EAN_A, EAN_A],
            "timestamp": ["2025-03-01 00:00", "2025-03-01 00:15"],
            "volume_partage": [1.0, "n/a"],
        })

        result = aggregate_monthly_volumes(df)

        assert result[EAN_A]["2025-03"].shared_volume == pytest.approx(1.0)

    def test_empty_frame(self):
        df = pd.DataFrame(columns=["ean_code", "timestamp", "volume_partage"])

        assert aggregate_monthly_volumes(df) == {}

    def test_required_columns(self):
        df = pd.DataFrame({"timestamp": ["2025-03-01 00:00"], "volume_partage": [1.0]})

        with pytest.raises(ValueError, match="ean_code"):
            aggregate_monthly_volumes(df)


class TestExtractNetworkCosts:
    """Test suite for reading network costs from an operator cost table"""

    def test_known_ean(self, cost_table):
        costs = extract_network_costs(cost_table, EAN_A)

        assert costs.network_usage == 12.5
        assert costs.surcharges == 1.5
        assert costs.capacity_tariff == 3.0
        assert costs.metering_tariff == 4.0
        assert costs.public_service_obligation_tariff == 0.75
        assert costs.transport_fee == 2.25
        assert costs.road_usage_fee == 0.5
        assert costs.grid_fee == 1.0
        assert costs.total == pytest.approx(25.5)

    def test_blank_cell_is_zero(self, cost_table):
        costs = extract_network_costs(cost_table, EAN_B)

        assert costs.public_service_obligation_tariff == 0.0
        assert costs.network_usage == 8.0

    def test_unknown_ean(self, cost_table):
        assert extract_network_costs(cost_table, "000") == NetworkCosts()

    def test_no_ean_column(self, cost_table):
        table = cost_table.rename(columns={"EAN": "Compteur"})

        assert extract_network_costs(table, EAN_A) == NetworkCosts()

    def test_missing_cost_column(self, cost_table):
        table = cost_table.drop(columns=["Gridfee € HTVA"])

        costs = extract_network_costs(table, EAN_A)

        assert costs.grid_fee == 0.0
        assert costs.network_usage == 12.5

    def test_currency_formatted_cells(self, cost_table):
        """Euro signs and thousands separators are stripped before parsing"""
        table = cost_table.assign(**{"Gridfee € HTVA": ["12,50 €", "1 234,50"]})

        assert extract_network_costs(table, EAN_A).grid_fee == 12.5
        assert extract_network_costs(table, EAN_B).grid_fee == 1234.5

    def test_unreadable_cell_logged(self, cost_table, caplog):
        table = cost_table.assign(**{"Surcharges € HTVA": ["voir annexe", 0.0]})

        with caplog.at_level(logging.WARNING, logger="src.services.monthly_dataset"):
            costs = extract_network_costs(table, EAN_A)

        assert costs.surcharges == 0.0
        assert any("surcharges" in r.getMessage() and EAN_A in r.getMessage() for r in caplog.records)
