import logging
import threading
from typing import Iterable, List

from csv_io import read_transactions
from errors import TransactionProcessError
from message_queue import ShardedQueue
from models import AccountSnapshot, ProcessingStats, Transaction
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays a transaction log and returns the final account snapshots.

    With one worker the log is folded in the calling thread. With more,
    the calling thread publishes into a ShardedQueue and each worker owns
    the ledgers of its shard; partitions are merged only for the summary.
    """

    def __init__(self, num_workers: int = 4):
        if num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}")
        self._num_workers = num_workers
        self._processors = [TransactionProcessor(StateManager()) for _ in range(num_workers)]
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> List[AccountSnapshot]:
        """Process CSV file and return final account snapshots."""
        logger.info(f"Processing {filepath} with {self._num_workers} worker(s)")
        return self.process_transactions(read_transactions(filepath))

    def process_transactions(self, transactions: Iterable[Transaction]) -> List[AccountSnapshot]:
        """Apply transactions in order and return snapshots ordered by client id."""
        if self._num_workers == 1:
            for transaction in transactions:
                self._apply(self._processors[0], transaction)
        else:
            self._process_sharded(transactions)

        logger.info(
            f"Processed: {self._stats.processed}, "
            f"Failed: {self._stats.failed}"
            + "".join(f", {kind}: {count}" for kind, count in sorted(self._stats.failures_by_kind.items()))
        )
        return self.summary()

    def summary(self) -> List[AccountSnapshot]:
        snapshots = [snapshot for processor in self._processors for snapshot in processor.summary()]
        return sorted(snapshots, key=lambda snapshot: snapshot.client_id)

    def _process_sharded(self, transactions: Iterable[Transaction]) -> None:
        queue = ShardedQueue(self._num_workers)
        worker_errors: List[BaseException] = []

        worker_threads = []
        for shard in range(self._num_workers):
            worker_thread = threading.Thread(target=self._consume_transactions, args=(queue, shard, worker_errors))
            worker_thread.start()
            worker_threads.append(worker_thread)

        # Input errors propagate after the workers have drained and stopped
        try:
            for transaction in transactions:
                if worker_errors:
                    break
                queue.publish_message(transaction)
        finally:
            queue.shutdown()
            for worker_thread in worker_threads:
                worker_thread.join()

        # A failed worker leaves its shard partially applied; the run must not report success
        if worker_errors:
            raise worker_errors[0]

    def _consume_transactions(self, queue: ShardedQueue, shard: int, errors: List[BaseException]) -> None:
        """
        Worker loop: pull from own shard until shutdown and drained.
        An unexpected exception stops the worker and is handed back through errors.
        """
        processor = self._processors[shard]
        while True:
            transaction = queue.consume_message(shard)
            if transaction is None:
                if queue.is_shutdown() and queue.is_empty(shard):
                    break
                continue

            try:
                self._apply(processor, transaction)
            except Exception as e:
                logger.error(f"Worker {shard} failed on {transaction}: {e}")
                errors.append(e)
                return

    def _apply(self, processor: TransactionProcessor, transaction: Transaction) -> None:
        try:
            processor.process_transaction(transaction)
        except TransactionProcessError as e:
            self._stats.record_failure(e.kind)
            logger.info(f"Rejected {transaction}: {e}")
        else:
            self._stats.record_success()
            logger.debug(f"Applied {transaction}")
