from typing import Dict

from ledger import AccountLedger
from models import ClientAccount
from transaction_store import TransactionStore


class StateManager:
    """
    State owned by a single processor: the account ledger, the deposit history
    (deposits eligible for dispute) and the dispute table (deposits under dispute).
    Not thread-safe; each shard worker owns its own instance.
    """

    def __init__(self):
        self.ledger = AccountLedger()
        self.deposit_history = TransactionStore()
        self.dispute_table = TransactionStore()

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        return self.ledger.get_or_create(client_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return self.ledger.accounts()
