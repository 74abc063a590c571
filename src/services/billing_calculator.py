from src.models.billing import MonthlyVolumes, MonthlyLedgerEntry, RateTable


def compute_month(volumes: MonthlyVolumes, rates: RateTable) -> MonthlyLedgerEntry:
    """
    Calculate the costs, remunerations and balance of one participant-month.

    Args:
        volumes: Consumed and injected volumes in kWh
        rates: Prices in EUR/kWh applied to each volume

    Returns:
        Ledger entry; a negative monthly_balance means the participant owes money
    """
    cost_shared = volumes.shared_volume * rates.shared_volume_price
    cost_complementary = volumes.complementary_volume * rates.complementary_volume_price

    remuneration_shared = volumes.shared_injection * rates.shared_injection_price
    remuneration_complementary = volumes.complementary_injection * rates.complementary_injection_price

    total_costs = cost_shared + cost_complementary
    total_remunerations = remuneration_shared + remuneration_complementary

    return MonthlyLedgerEntry(
        shared_volume=volumes.shared_volume,
        complementary_volume=volumes.complementary_volume,
        shared_injection=volumes.shared_injection,
        complementary_injection=volumes.complementary_injection,
        cost_shared=cost_shared,
        cost_complementary=cost_complementary,
        remuneration_shared_injection=remuneration_shared,
        remuneration_complementary_injection=remuneration_complementary,
        total_costs=total_costs,
        total_remunerations=total_remunerations,
        monthly_balance=total_remunerations - total_costs,
    )
