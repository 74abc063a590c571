import os
import logging
from typing import Optional

from src.models.billing import RateTable

logger = logging.getLogger(__name__)

# Invoice configuration
INVOICE_PREFIX = os.getenv("BILLING_INVOICE_PREFIX", "SIU")
PAYMENT_TERM_DAYS = int(os.getenv("BILLING_PAYMENT_TERM_DAYS", "30"))

# Default community tariffs (EUR/kWh) and VAT (%)
PRICE_SHARED_VOLUME = float(os.getenv("BILLING_PRICE_SHARED_VOLUME", "0.10"))
PRICE_COMPLEMENTARY_VOLUME = float(os.getenv("BILLING_PRICE_COMPLEMENTARY_VOLUME", "0.25"))
PRICE_SHARED_INJECTION = float(os.getenv("BILLING_PRICE_SHARED_INJECTION", "0.08"))
PRICE_COMPLEMENTARY_INJECTION = float(os.getenv("BILLING_PRICE_COMPLEMENTARY_INJECTION", "0.05"))
VAT_RATE_PERCENT = float(os.getenv("BILLING_VAT_RATE", "21"))

LOG_LEVEL = os.getenv("BILLING_LOG_LEVEL", "INFO")


def load_default_rates() -> RateTable:
    """
    Build the rate table configured through the environment.

    Returns:
        Immutable RateTable to pass explicitly to the ledger builder
    """
    return RateTable(
        shared_volume_price=PRICE_SHARED_VOLUME,
        complementary_volume_price=PRICE_COMPLEMENTARY_VOLUME,
        shared_injection_price=PRICE_SHARED_INJECTION,
        complementary_injection_price=PRICE_COMPLEMENTARY_INJECTION,
        vat_rate_percent=VAT_RATE_PERCENT,
    )


DEFAULT_RATES = load_default_rates()


def configure_logging(level: Optional[str] = None):
    """Configure root logging for scripts and demos."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Logging configured")
