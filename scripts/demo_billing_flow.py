#!/usr/bin/env python3
"""
Demo Script: Readings → Ledger → Invoice Flow

This script demonstrates the billing flow of the energy community:
1. Aggregate quarter-hourly readings into monthly volumes per EAN
2. Read network costs from the operator cost table
3. Build and store the participant ledger
4. Generate an invoice for a month range
"""

import sys
import os
from datetime import date

import pandas as pd

# Add project root to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from src.config import DEFAULT_RATES, configure_logging
from src.models.billing import Participant
from src.services.monthly_dataset import aggregate_monthly_volumes, extract_network_costs
from src.services.ledger_service import LedgerService, InMemoryLedgerStore
from src.services.errors import InvalidPeriod

EAN = "541448000000000001"


def demo_readings() -> pd.DataFrame:
    """Three months of flat quarter-hourly readings for one producer"""
    timestamps = pd.date_range("2025-01-01", "2025-03-31 23:45", freq="15min")
    return pd.DataFrame({
        "ean_code": EAN,
        "timestamp": timestamps,
        "volume_partage": 0.12,
        "volume_complementaire": 0.05,
        "injection_partagee": 0.08,
        "injection_complementaire": 0.02,
    })


def demo_cost_table() -> pd.DataFrame:
    return pd.DataFrame({
        "EAN": [EAN],
        "Utilisation du réseau € HTVA": ["18,40"],
        "Surcharges € HTVA": [2.10],
        "Tarif capac. (>2020) € HTVA": [6.75],
        "Tarif mesure & comptage € HTVA": [3.20],
        "Tarif OSP € HTVA": [1.15],
        "Transport - coût ELIA € HTVA": [4.60],
        "Redevance de voirie € HTVA": [0.95],
        "Gridfee € HTVA": [1.30],
    })


def demo_billing_flow():
    """Run the complete billing flow and print the invoice summary."""

    print("🚀 Starting Readings → Invoice Demo")
    print("=" * 60)

    participant = Participant(
        id="c0ffee42-demo-participant",
        name="Atelier Solaire",
        address="Rue de la Science 14B, 1040 Bruxelles",
        ean_code=EAN,
        type="producer",
    )

    print("\n📊 Step 1: Aggregating readings")
    monthly = aggregate_monthly_volumes(demo_readings())
    for month, volumes in sorted(monthly[EAN].items()):
        print(f"   📅 {month}: shared {volumes.shared_volume:.2f} kWh, "
              f"injected {volumes.shared_injection:.2f} kWh")

    print("\n💶 Step 2: Reading network costs")
    network_costs = extract_network_costs(demo_cost_table(), EAN)
    print(f"   ✅ Network costs: {network_costs.total:.2f} €")

    print("\n📒 Step 3: Building ledger")
    service = LedgerService(InMemoryLedgerStore(), DEFAULT_RATES)
    ledger = service.get_or_build_ledger(participant, monthly[EAN], network_costs)
    for month in ledger.months():
        entry = ledger.monthly_data[month]
        print(f"   📅 {month}: balance {entry.monthly_balance:.2f} €")

    print("\n🧾 Step 4: Generating invoice")
    invoice = service.invoice(participant, "2025-01", "2025-03", issue_date=date(2025, 4, 1))
    print(f"   🔖 Number: {invoice.invoice_details.invoice_number}")
    print(f"   📆 Due: {invoice.invoice_details.due_date.isoformat()}")
    print(f"   Subtotal: {invoice.final_amount.subtotal:.2f} €")
    print(f"   VAT: {invoice.final_amount.vat:.2f} €")
    print(f"   Total: {invoice.final_amount.total_with_vat:.2f} €")

    print("\n⚠️  Step 5: Rejecting an inverted period")
    try:
        service.invoice(participant, "2025-03", "2025-01")
    except InvalidPeriod as e:
        print(f"   ✅ {e}")

    print("\n" + "=" * 60)
    print("🎉 Demo completed")


if __name__ == "__main__":
    configure_logging()
    demo_billing_flow()
