"""
ParallelExecutor - Bounded worker pool with order-preserving results.
"""

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar('T')
R = TypeVar('R')


class ParallelExecutor:
    """
    Runs one function over a sequence of inputs with a fixed number of workers.

    Workers pull items from the pool's shared FIFO queue. Results are placed
    by input index, so the returned list is in input order no matter which
    item finishes first. Every call to map() is a full barrier.

    The first failing item is fatal: queued items are cancelled, items already
    running are allowed to finish, and the item's exception is re-raised.
    """

    def __init__(self, workers: int = 1, logger: Optional[logging.Logger] = None):
        """
        Initialize executor.

        Args:
            workers: Number of concurrent workers (at least 1)
            logger: Optional logger instance
        """
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.workers = workers
        self.logger = logger or logging.getLogger(__name__)

    def map(self, func: Callable[[T], R], items: Sequence[T]) -> List[R]:
        """
        Apply func to every item.

        Args:
            func: Per-item function
            items: Ordered inputs

        Returns:
            One result per input, in input order
        """
        items = list(items)
        if not items:
            return []

        self.logger.debug(f"Running {len(items)} items on {self.workers} worker(s)")

        pool = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix='albumgen')
        try:
            futures = [pool.submit(func, item) for item in items]
            done, _ = wait(futures, return_when=FIRST_EXCEPTION)

            for index, future in enumerate(futures):
                if future in done and future.exception() is not None:
                    pool.shutdown(wait=True, cancel_futures=True)
                    self.logger.debug(f"Item {index} failed, remaining items cancelled")
                    raise future.exception()

            return [future.result() for future in futures]
        finally:
            pool.shutdown(wait=True)
