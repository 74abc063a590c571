from src.models.billing import Participant, ParticipantLedger
from src.models.invoice import (
    Invoice,
    InvoiceParticipant,
    BillingPeriod,
    EnergyTotals,
    InvoiceCosts,
    InvoiceRevenues,
    FinalAmount,
    InvoiceDetails,
)
from src.services.errors import InvalidPeriod
from src.services.months import is_valid_month
from src.config import INVOICE_PREFIX, PAYMENT_TERM_DAYS
from datetime import date, timedelta
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def generate_invoice_number(participant_id: str, end_month: str, prefix: str = INVOICE_PREFIX) -> str:
    """
    Build the invoice number PREFIX-YYYYMM-<first 8 chars of participant id>.

    The same participant and end month always give the same number; no
    sequence or collision check is involved.
    """
    year, num = end_month.split("-")
    return f"{prefix}-{year}{num}-{participant_id[:8]}"


def _check_period(start_month, end_month):
    if not is_valid_month(start_month):
        raise InvalidPeriod(start_month, end_month, "start month is not YYYY-MM")
    if not is_valid_month(end_month):
        raise InvalidPeriod(start_month, end_month, "end month is not YYYY-MM")
    # YYYY-MM sorts lexicographically in chronological order
    if start_month > end_month:
        raise InvalidPeriod(start_month, end_month, "start month is after end month")


def generate_invoice(
    participant: Participant,
    ledger: ParticipantLedger,
    start_month: str,
    end_month: str,
    issue_date: Optional[date] = None,
    prefix: str = INVOICE_PREFIX,
) -> Invoice:
    """
    Aggregate the ledger months of [start_month, end_month] into an invoice.

    Months of the range missing from the ledger are skipped, so a range
    without data gives an all-zero invoice. Network costs are added once
    per invoice whatever the number of months. The ledger is only read.

    Args:
        participant: Participant being invoiced
        ledger: Billing ledger of the participant
        start_month: First month of the period (YYYY-MM, inclusive)
        end_month: Last month of the period (YYYY-MM, inclusive)
        issue_date: Invoice date, defaults to today
        prefix: Invoice number prefix

    Returns:
        Invoice value object ready for rendering

    Raises:
        InvalidPeriod: If a bound is malformed or start_month > end_month
    """
    _check_period(start_month, end_month)

    months = sorted(m for m in ledger.monthly_data if start_month <= m <= end_month)

    total_shared_volume = 0.0
    total_complementary_volume = 0.0
    total_shared_injection = 0.0
    total_complementary_injection = 0.0
    cost_shared = 0.0
    cost_complementary = 0.0
    remuneration_shared = 0.0
    remuneration_complementary = 0.0
    total_costs = 0.0
    total_revenues = 0.0

    for month in months:
        entry = ledger.monthly_data[month]
        total_shared_volume += entry.shared_volume
        total_complementary_volume += entry.complementary_volume
        total_shared_injection += entry.shared_injection
        total_complementary_injection += entry.complementary_injection
        cost_shared += entry.cost_shared
        cost_complementary += entry.cost_complementary
        remuneration_shared += entry.remuneration_shared_injection
        remuneration_complementary += entry.remuneration_complementary_injection
        total_costs += entry.total_costs
        total_revenues += entry.total_remunerations

    network_costs_total = ledger.network_costs.total

    subtotal = total_revenues - total_costs - network_costs_total
    vat = subtotal * (ledger.rates.vat_rate_percent / 100)
    total_with_vat = subtotal + vat

    if issue_date is None:
        issue_date = date.today()
    invoice_number = generate_invoice_number(participant.id, end_month, prefix)

    invoice = Invoice(
        participant=InvoiceParticipant(
            id=participant.id,
            name=participant.name,
            address=participant.address,
            ean_code=participant.ean_code,
            email=participant.email,
            type=participant.type,
        ),
        billing_period=BillingPeriod(
            start_month=start_month,
            end_month=end_month,
            start_date=date.fromisoformat(f"{start_month}-01"),
            end_date=date.fromisoformat(f"{end_month}-01"),
            months=months,
        ),
        energy_data=EnergyTotals(
            total_shared_volume=total_shared_volume,
            total_complementary_volume=total_complementary_volume,
            total_shared_injection=total_shared_injection,
            total_complementary_injection=total_complementary_injection,
        ),
        costs=InvoiceCosts(
            shared_volume=cost_shared,
            complementary_volume=cost_complementary,
            network_costs=network_costs_total,
            total_costs=total_costs,
            grand_total=total_costs + network_costs_total,
        ),
        revenues=InvoiceRevenues(
            shared_injection=remuneration_shared,
            complementary_injection=remuneration_complementary,
            total_revenues=total_revenues,
        ),
        final_amount=FinalAmount(
            subtotal=subtotal,
            vat=vat,
            total_with_vat=total_with_vat,
        ),
        invoice_details=InvoiceDetails(
            invoice_number=invoice_number,
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=PAYMENT_TERM_DAYS),
        ),
    )

    if not months:
        logger.warning(f"No ledger data for participant {participant.id} between {start_month} and {end_month}")
    logger.info(f"Generated invoice {invoice_number} covering {len(months)} months")
    return invoice
