import logging
import threading
from typing import Dict, Iterable, List

from csv_io import SKIP, TransactionReader
from message_queue import InMemoryQueue
from models import ClientAccount, ProcessingResult, ProcessingStats, Transaction
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class ShardWorker:
    """Owns the state of every client routed to one shard and applies their transactions in order."""

    def __init__(self, shard_id: int, stats: ProcessingStats):
        self.shard_id = shard_id
        self.queue = InMemoryQueue()
        self.state = StateManager()
        self._processor = TransactionProcessor(self.state)
        self._stats = stats
        self._thread = threading.Thread(target=self._consume_transactions, name=f"shard-{shard_id}")

    def start(self) -> None:
        self._thread.start()

    def join(self) -> None:
        self._thread.join()

    def _consume_transactions(self) -> None:
        """Consumer loop: pull from queue and process until drained."""
        while True:
            transaction = self.queue.consume_message()
            if transaction is None:
                if self.queue.is_drained():
                    break
                continue
            _record(self._stats, self._processor.process_transaction(transaction))


def _record(stats: ProcessingStats, result: ProcessingResult) -> None:
    if result.is_success:
        stats.record_success()
    else:
        stats.record_failure()


class PaymentsEngine:
    """
    Feeds transactions into the processor and returns final account states.

    With shard_count == 1 everything runs in the calling thread in file order.
    With more shards the calling thread dispatches each transaction to the worker
    for client_id % shard_count; per-client order is preserved, cross-client
    order is not, and shards share no state.
    """

    def __init__(self, shard_count: int = 1, on_malformed: str = SKIP):
        if shard_count < 1:
            raise ValueError("shard_count must be at least 1")
        self._shard_count = shard_count
        self._on_malformed = on_malformed
        self.stats = ProcessingStats()

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", newline="") as f:
            reader = TransactionReader(f, on_malformed=self._on_malformed, stats=self.stats)
            accounts = self.process_transactions(reader)

        logger.info(
            f"Processed: {self.stats.processed}, "
            f"Failed: {self.stats.failed}, "
            f"Skipped records: {self.stats.skipped}"
        )
        return accounts

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        if self._shard_count == 1:
            return self._process_sequentially(transactions)
        return self._process_sharded(transactions)

    def _process_sequentially(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        state = StateManager()
        processor = TransactionProcessor(state)
        for transaction in transactions:
            _record(self.stats, processor.process_transaction(transaction))
        return state.get_all_accounts()

    def _process_sharded(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        logger.info(f"Starting {self._shard_count} shard workers")

        workers: List[ShardWorker] = [ShardWorker(i, self.stats) for i in range(self._shard_count)]
        for worker in workers:
            worker.start()

        try:
            for transaction in transactions:
                workers[transaction.client_id % self._shard_count].queue.publish_message(transaction)
        finally:
            # Workers drain what was already published even when the reader fails.
            for worker in workers:
                worker.queue.shutdown()
            for worker in workers:
                worker.join()

        logger.info("All shard workers finished")

        accounts: Dict[int, ClientAccount] = {}
        for worker in workers:
            accounts.update(worker.state.get_all_accounts())
        return accounts
