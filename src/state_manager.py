from typing import Dict

from models import ClientLedger


class StateManager:
    """
    Owns the ledgers of one partition of clients.
    Each worker gets its own StateManager, so no locking is needed here:
    a client's transactions are always routed to the same partition.
    """

    def __init__(self):
        self._ledgers: Dict[int, ClientLedger] = {}

    def get_or_create_ledger(self, client_id: int) -> ClientLedger:
        """Get existing ledger or create an empty one."""
        ledger = self._ledgers.get(client_id)
        if ledger is None:
            ledger = ClientLedger(client_id=client_id)
            self._ledgers[client_id] = ledger
        return ledger

    def get_all_ledgers(self) -> Dict[int, ClientLedger]:
        """Return all ledgers (for final output)."""
        return dict(self._ledgers)
