from typing import Dict, Optional, Tuple

from amount import Amount

TransactionKey = Tuple[int, int]


class TransactionStore:
    """
    Amounts keyed by (client_id, transaction_id).
    Backs both the deposit history and the dispute table; keying on the client
    means a client can only ever reach transactions it created itself.
    """

    def __init__(self):
        self._amounts: Dict[TransactionKey, Amount] = {}

    def insert(self, client_id: int, transaction_id: int, amount: Amount) -> None:
        self._amounts[(client_id, transaction_id)] = amount

    def get(self, client_id: int, transaction_id: int) -> Optional[Amount]:
        return self._amounts.get((client_id, transaction_id))

    def remove(self, client_id: int, transaction_id: int) -> None:
        self._amounts.pop((client_id, transaction_id), None)

    def take(self, client_id: int, transaction_id: int) -> Optional[Amount]:
        """Remove and return the amount stored under the key, if any."""
        return self._amounts.pop((client_id, transaction_id), None)

    def __contains__(self, key: TransactionKey) -> bool:
        return key in self._amounts

    def __len__(self) -> int:
        return len(self._amounts)
