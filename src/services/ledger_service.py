from src.models.billing import Participant, ParticipantLedger, NetworkCosts, RateTable
from src.models.invoice import Invoice
from src.services.ledger_builder import build_ledger, update_ledger
from src.services.invoice_aggregator import generate_invoice
from src.services.monthly_dataset import normalize_monthly_data
from datetime import date
from typing import Any, Dict, Mapping, Optional, Protocol
import threading
import logging

logger = logging.getLogger(__name__)


class LedgerStore(Protocol):
    """Persistence collaborator holding one ledger per participant"""

    def load(self, participant_id: str) -> Optional[ParticipantLedger]:
        ...

    def save(self, participant_id: str, ledger: ParticipantLedger) -> None:
        ...


class InMemoryLedgerStore:
    """Process-local LedgerStore, mainly for tests and demos"""

    def __init__(self):
        self._ledgers: Dict[str, ParticipantLedger] = {}

    def load(self, participant_id: str) -> Optional[ParticipantLedger]:
        return self._ledgers.get(participant_id)

    def save(self, participant_id: str, ledger: ParticipantLedger) -> None:
        self._ledgers[participant_id] = ledger


class LedgerService:
    """
    Orchestrates load / build / save of participant ledgers.

    A per-participant lock makes concurrent first requests for the same
    participant build the ledger only once within this process. Stores
    shared between processes need their own upsert-if-absent primitive.
    Locks are kept for the lifetime of the service, one per participant seen.

    Ledgers are returned as copies; changes reach the store only through
    refresh_ledger.
    """

    def __init__(self, store: LedgerStore, rates: RateTable):
        self.store = store
        self.rates = rates
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, participant_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(participant_id, threading.Lock())

    def get_or_build_ledger(
        self,
        participant: Participant,
        raw_monthly_data: Mapping[str, Any],
        network_costs: NetworkCosts,
    ) -> ParticipantLedger:
        """
        Return the stored ledger of a participant, building it on first access.

        Args:
            participant: Participant the ledger belongs to
            raw_monthly_data: Raw monthly records, validated here before building
            network_costs: Network charges used when the ledger has to be built

        Returns:
            The stored or newly built ledger
        """
        with self._lock_for(participant.id):
            ledger = self.store.load(participant.id)
            if ledger is not None:
                logger.debug(f"Loaded existing ledger for participant {participant.id}")
                return ledger.model_copy(deep=True)

            ledger = build_ledger(participant, normalize_monthly_data(raw_monthly_data), network_costs, self.rates)
            self.store.save(participant.id, ledger)
            return ledger.model_copy(deep=True)

    def refresh_ledger(
        self,
        participant: Participant,
        raw_monthly_data: Mapping[str, Any],
        network_costs: NetworkCosts,
    ) -> ParticipantLedger:
        """Recompute the supplied months into the stored ledger, building it if absent"""
        monthly_data = normalize_monthly_data(raw_monthly_data)
        with self._lock_for(participant.id):
            ledger = self.store.load(participant.id)
            if ledger is None:
                ledger = build_ledger(participant, monthly_data, network_costs, self.rates)
            else:
                ledger = update_ledger(ledger, monthly_data)
            self.store.save(participant.id, ledger)
            return ledger.model_copy(deep=True)

    def invoice(
        self,
        participant: Participant,
        start_month: str,
        end_month: str,
        issue_date: Optional[date] = None,
    ) -> Invoice:
        """
        Generate an invoice from the stored ledger.

        A participant without a stored ledger gets an all-zero invoice built
        from an empty ledger; nothing is saved in that case.
        """
        ledger = self.store.load(participant.id)
        if ledger is None:
            logger.warning(f"No ledger stored for participant {participant.id}, invoicing empty ledger")
            ledger = build_ledger(participant, {}, NetworkCosts(), self.rates)
        return generate_invoice(participant, ledger, start_month, end_month, issue_date=issue_date)
