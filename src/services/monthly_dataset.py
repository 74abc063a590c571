import pandas as pd
from typing import Any, Dict, Mapping
import logging

from src.models.billing import MonthlyVolumes, NetworkCosts
from src.services.months import is_valid_month

logger = logging.getLogger(__name__)

VOLUME_FIELDS = ["shared_volume", "complementary_volume", "shared_injection", "complementary_injection"]

# Column names used by the upstream meter exports
UPSTREAM_VOLUME_COLUMNS = {
    "volume_partage": "shared_volume",
    "volume_complementaire": "complementary_volume",
    "injection_partagee": "shared_injection",
    "injection_complementaire": "complementary_injection",
}

NETWORK_COST_COLUMNS = {
    "network_usage": "Utilisation du réseau € HTVA",
    "surcharges": "Surcharges € HTVA",
    "capacity_tariff": "Tarif capac. (>2020) € HTVA",
    "metering_tariff": "Tarif mesure & comptage € HTVA",
    "public_service_obligation_tariff": "Tarif OSP € HTVA",
    "transport_fee": "Transport - coût ELIA € HTVA",
    "road_usage_fee": "Redevance de voirie € HTVA",
    "grid_fee": "Gridfee € HTVA",
}

# Headers are matched on this many leading characters
HEADER_MATCH_LENGTH = 10


def normalize_monthly_data(raw: Mapping[str, Any]) -> Dict[str, MonthlyVolumes]:
    """
    Validate a participant's raw monthly records once, at the ingestion boundary.

    Args:
        raw: Records keyed by YYYY-MM; each record is a MonthlyVolumes, a
             mapping with volume fields, or None

    Returns:
        Dictionary of MonthlyVolumes keyed by month. Months with a malformed
        key are dropped; missing or unreadable volumes become 0.
    """
    normalized = {}
    for month, record in (raw or {}).items():
        if not is_valid_month(month):
            logger.warning(f"Skipping malformed month key {month!r}")
            continue
        if isinstance(record, MonthlyVolumes):
            normalized[month] = record
        else:
            normalized[month] = MonthlyVolumes.model_validate(record or {})
    return normalized


def aggregate_monthly_volumes(readings: pd.DataFrame) -> Dict[str, Dict[str, MonthlyVolumes]]:
    """
    Sum quarter-hourly readings into monthly volumes per EAN code.

    Args:
        readings: DataFrame with 'ean_code', 'timestamp' and any of the volume
                  columns (English or upstream names). Missing volume columns
                  count as 0.

    Returns:
        Nested dictionary {ean_code: {YYYY-MM: MonthlyVolumes}}
    """
    missing = [col for col in ("ean_code", "timestamp") if col not in readings.columns]
    if missing:
        raise ValueError(f"Readings are missing required columns: {', '.join(missing)}")
    if readings.empty:
        return {}

    df = readings.rename(columns=UPSTREAM_VOLUME_COLUMNS)
    df = df.assign(
        ean_code=df["ean_code"].astype(str).str.strip(),
        month=pd.to_datetime(df["timestamp"]).dt.strftime("%Y-%m"),
    )

    for col in VOLUME_FIELDS:
        if col not in df.columns:
            df[col] = 0.0
            continue
        values = pd.to_numeric(df[col], errors="coerce")
        unreadable = int((values.isna() & df[col].notna()).sum())
        if unreadable:
            logger.warning(f"{unreadable} unreadable values in column {col} counted as 0")
        df[col] = values.fillna(0.0)

    monthly = df.groupby(["ean_code", "month"])[VOLUME_FIELDS].sum()

    result: Dict[str, Dict[str, MonthlyVolumes]] = {}
    for (ean_code, month), row in monthly.iterrows():
        result.setdefault(ean_code, {})[month] = MonthlyVolumes(**row.to_dict())

    logger.info(f"Aggregated {len(df)} readings into {len(monthly)} participant-months for {len(result)} EAN codes")
    return result


def _parse_amount(value, ean_code: str, field: str) -> float:
    if value is None or pd.isna(value):
        return 0.0
    # Cells like "12,50 €" or "1 234,50" come straight from the operator sheets
    text = str(value).replace("€", "").replace("\u00a0", "").replace(" ", "").replace(",", ".")
    if not text:
        return 0.0
    amount = pd.to_numeric(text, errors="coerce")
    if pd.isna(amount):
        logger.warning(f"Unreadable {field} value {value!r} for EAN {ean_code}, using 0")
        return 0.0
    return float(amount)


def extract_network_costs(table: pd.DataFrame, ean_code: str) -> NetworkCosts:
    """
    Read the network cost components of one EAN from an operator cost table.

    Columns are located by the leading characters of their header
    (case-insensitive). An unknown EAN, a missing EAN column or a missing
    cost column all yield zero for the affected components.

    Args:
        table: Cost table, one row per EAN
        ean_code: EAN code of the participant

    Returns:
        NetworkCosts for the participant
    """
    headers = [str(h).lower() for h in table.columns]

    ean_index = next((i for i, h in enumerate(headers) if "ean" in h), None)
    if ean_index is None:
        logger.warning("Network cost table has no EAN column")
        return NetworkCosts()

    column_indices = {}
    for field, header in NETWORK_COST_COLUMNS.items():
        prefix = header.lower()[:HEADER_MATCH_LENGTH]
        index = next((i for i, h in enumerate(headers) if prefix in h), None)
        if index is not None:
            column_indices[field] = index

    ean_values = table.iloc[:, ean_index].astype(str).str.strip()
    matches = table[ean_values == str(ean_code).strip()]
    if matches.empty:
        logger.warning(f"EAN {ean_code} not found in network cost table")
        return NetworkCosts()

    row = matches.iloc[0]
    return NetworkCosts(**{field: _parse_amount(row.iloc[index], ean_code, field) for field, index in column_indices.items()})
