from pydantic import BaseModel, ConfigDict
from datetime import date
from typing import Optional, List


class InvoiceParticipant(BaseModel):
    """Participant identity printed on the invoice"""
    id: str
    name: str
    address: str
    ean_code: str
    email: Optional[str] = None
    type: str

    model_config = ConfigDict(frozen=True)


class BillingPeriod(BaseModel):
    """Inclusive month range covered by the invoice"""
    start_month: str
    end_month: str
    start_date: date
    end_date: date
    months: List[str]

    model_config = ConfigDict(frozen=True)


class EnergyTotals(BaseModel):
    total_shared_volume: float
    total_complementary_volume: float
    total_shared_injection: float
    total_complementary_injection: float

    model_config = ConfigDict(frozen=True)


class InvoiceCosts(BaseModel):
    """Energy costs of the period plus the flat network charge"""
    shared_volume: float
    complementary_volume: float
    network_costs: float
    total_costs: float
    grand_total: float

    model_config = ConfigDict(frozen=True)


class InvoiceRevenues(BaseModel):
    shared_injection: float
    complementary_injection: float
    total_revenues: float

    model_config = ConfigDict(frozen=True)


class FinalAmount(BaseModel):
    """Amounts due; a negative subtotal is a credit in the participant's favour"""
    subtotal: float
    vat: float
    total_with_vat: float

    model_config = ConfigDict(frozen=True)


class InvoiceDetails(BaseModel):
    invoice_number: str
    issue_date: date
    due_date: date

    model_config = ConfigDict(frozen=True)


class Invoice(BaseModel):
    """Invoice summary handed to the document renderer; never persisted here"""
    participant: InvoiceParticipant
    billing_period: BillingPeriod
    energy_data: EnergyTotals
    costs: InvoiceCosts
    revenues: InvoiceRevenues
    final_amount: FinalAmount
    invoice_details: InvoiceDetails

    model_config = ConfigDict(frozen=True)
