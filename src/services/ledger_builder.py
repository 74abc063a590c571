from src.models.billing import (
    Participant,
    ParticipantLedger,
    ClientSnapshot,
    LedgerMetadata,
    MonthlyVolumes,
    NetworkCosts,
    RateTable,
)
from src.services.billing_calculator import compute_month
from src.services.months import validate_month
from src.config import DEFAULT_RATES
from datetime import datetime, timezone
from typing import Mapping
import logging

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_ledger(
    participant: Participant,
    monthly_data: Mapping[str, MonthlyVolumes],
    network_costs: NetworkCosts,
    rates: RateTable = DEFAULT_RATES,
) -> ParticipantLedger:
    """
    Build the billing ledger of a participant from its monthly volumes.

    Every month present in monthly_data is computed with the given rates,
    which are stored in the ledger so later rate changes leave these
    months untouched. Building twice from the same inputs gives the same
    month entries; only metadata.last_updated differs.

    Args:
        participant: Participant the ledger belongs to
        monthly_data: Validated volumes keyed by YYYY-MM month
        network_costs: Fixed network charges of the participant
        rates: Rate table applied to every month

    Returns:
        A new ParticipantLedger (empty month mapping if monthly_data is empty)

    Raises:
        InvalidMonth: If a month key is not a YYYY-MM identifier
    """
    ledger = ParticipantLedger(
        client=ClientSnapshot(
            name=participant.name,
            address=participant.address,
            ean_code=participant.ean_code,
            email=participant.email,
            entry_date=participant.entry_date,
        ),
        network_costs=network_costs,
        rates=rates,
        metadata=LedgerMetadata(last_updated=_utcnow()),
    )

    for month, volumes in monthly_data.items():
        validate_month(month)
        ledger.monthly_data[month] = compute_month(volumes, rates)
        logger.debug(f"Computed {month} for participant {participant.id}")

    logger.info(f"Built ledger for participant {participant.id} with {len(ledger.monthly_data)} months")
    return ledger


def update_ledger(ledger: ParticipantLedger, monthly_data: Mapping[str, MonthlyVolumes]) -> ParticipantLedger:
    """
    Return a copy of the ledger with the given months (re)computed.

    Months already in the ledger but absent from monthly_data are kept;
    supplied months overwrite existing entries. The ledger's own rate
    snapshot is used so all entries stay consistent with it.
    """
    updated = ledger.model_copy(deep=True)
    for month, volumes in monthly_data.items():
        validate_month(month)
        updated.monthly_data[month] = compute_month(volumes, ledger.rates)
    updated.metadata.last_updated = _utcnow()

    logger.info(f"Updated {len(monthly_data)} months, ledger now holds {len(updated.monthly_data)} months")
    return updated
