from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from datetime import date, datetime
from typing import Optional, Dict, List, Any
from enum import Enum
import logging
import math

logger = logging.getLogger(__name__)


class ParticipantType(str, Enum):
    """Role of a participant inside the energy community"""
    PRODUCER = "producer"
    CONSUMER = "consumer"


class Participant(BaseModel):
    """Community member identified by the EAN code of its connection point"""
    id: str = Field(..., min_length=1, description="Participant identifier")
    name: str = Field(..., description="Display name used on invoices")
    address: str = Field(default="", description="Postal address")
    ean_code: str = Field(default="", description="18-digit EAN meter code")
    email: Optional[str] = None
    type: ParticipantType = Field(default=ParticipantType.CONSUMER, validate_default=True)
    entry_date: Optional[date] = None

    @field_validator("ean_code", mode="before")
    @classmethod
    def strip_ean_code(cls, v):
        """EAN codes often arrive with surrounding blanks from spreadsheets"""
        if v is None:
            return ""
        return str(v).strip()

    model_config = ConfigDict(use_enum_values=True)


class RateTable(BaseModel):
    """Per-kWh prices (EUR) and VAT rate frozen into every ledger"""
    shared_volume_price: float = Field(..., ge=0, description="Community consumption price")
    complementary_volume_price: float = Field(..., ge=0, description="Grid consumption price")
    shared_injection_price: float = Field(..., ge=0, description="Community injection remuneration")
    complementary_injection_price: float = Field(..., ge=0, description="Grid injection remuneration")
    vat_rate_percent: float = Field(..., ge=0, le=100, description="VAT rate in percent")

    model_config = ConfigDict(frozen=True)


class NetworkCosts(BaseModel):
    """
    Fixed network charges (EUR, excluding VAT) attributed to a participant.

    Field aliases match the column names used by the distribution system
    operator exports, so records coming straight from an import can be
    validated without renaming.
    """
    network_usage: float = Field(default=0.0, ge=0, validation_alias=AliasChoices("network_usage", "utilisation_reseau_htva"))
    surcharges: float = Field(default=0.0, ge=0, validation_alias=AliasChoices("surcharges", "surcharges_htva"))
    capacity_tariff: float = Field(default=0.0, ge=0, validation_alias=AliasChoices("capacity_tariff", "tarif_capacite_htva"))
    metering_tariff: float = Field(default=0.0, ge=0, validation_alias=AliasChoices("metering_tariff", "tarif_mesure_comptage_htva"))
    public_service_obligation_tariff: float = Field(default=0.0, ge=0, validation_alias=AliasChoices("public_service_obligation_tariff", "tarif_osp_htva"))
    transport_fee: float = Field(default=0.0, ge=0, validation_alias=AliasChoices("transport_fee", "transport_elia_htva"))
    road_usage_fee: float = Field(default=0.0, ge=0, validation_alias=AliasChoices("road_usage_fee", "redevance_voirie_htva"))
    grid_fee: float = Field(default=0.0, ge=0, validation_alias=AliasChoices("grid_fee", "gridfee_htva"))

    model_config = ConfigDict(frozen=True)

    @property
    def total(self) -> float:
        """Flat sum of all eight components"""
        return sum(self.model_dump().values())


def _coerce_volume(field_name: str, v: Any) -> float:
    if v is None or isinstance(v, bool):
        return 0.0
    if isinstance(v, str):
        v = v.strip().replace(",", ".")
        if not v:
            return 0.0
    try:
        value = float(v)
    except (TypeError, ValueError):
        logger.warning(f"Malformed value {v!r} for {field_name}, using 0")
        return 0.0
    if math.isnan(value):
        return 0.0
    return value


class MonthlyVolumes(BaseModel):
    """
    Energy volumes (kWh) of one participant for one month.

    Missing or unreadable fields default to 0. Negative values are kept
    as-is since corrections can legitimately be negative.
    """
    shared_volume: float = Field(default=0.0, validation_alias=AliasChoices("shared_volume", "volume_partage"))
    complementary_volume: float = Field(default=0.0, validation_alias=AliasChoices("complementary_volume", "volume_complementaire"))
    shared_injection: float = Field(default=0.0, validation_alias=AliasChoices("shared_injection", "injection_partagee"))
    complementary_injection: float = Field(default=0.0, validation_alias=AliasChoices("complementary_injection", "injection_complementaire"))

    model_config = ConfigDict(frozen=True)

    @field_validator("shared_volume", "complementary_volume", "shared_injection", "complementary_injection", mode="before")
    @classmethod
    def lenient_number(cls, v, info):
        return _coerce_volume(info.field_name, v)


class MonthlyLedgerEntry(BaseModel):
    """Billing figures derived for one participant-month"""
    shared_volume: float
    complementary_volume: float
    shared_injection: float
    complementary_injection: float
    cost_shared: float
    cost_complementary: float
    remuneration_shared_injection: float
    remuneration_complementary_injection: float
    total_costs: float
    total_remunerations: float
    monthly_balance: float

    model_config = ConfigDict(frozen=True)


class ClientSnapshot(BaseModel):
    """Participant identity as it was when the ledger was built"""
    name: str
    address: str = ""
    ean_code: str = ""
    email: Optional[str] = None
    entry_date: Optional[date] = None


class LedgerMetadata(BaseModel):
    last_updated: datetime
    billing_period_start: Optional[str] = None
    billing_period_end: Optional[str] = None
    invoice_number: Optional[str] = None


class ParticipantLedger(BaseModel):
    """
    Month-keyed billing record of a participant.

    The month mapping grows as new data is ingested; the rate table is the
    snapshot used for every entry it contains.
    """
    client: ClientSnapshot
    network_costs: NetworkCosts
    monthly_data: Dict[str, MonthlyLedgerEntry] = Field(default_factory=dict)
    rates: RateTable
    metadata: LedgerMetadata

    def months(self) -> List[str]:
        """Month identifiers present in the ledger, oldest first"""
        return sorted(self.monthly_data)
