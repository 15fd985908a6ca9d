"""Bounded worker pool for fire-and-forget side effects."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple


Job = Tuple[str, Callable[..., Awaitable[Any]], tuple]


class BackgroundTaskPool:
    """Run best-effort coroutines off the request path.

    Jobs go into a bounded queue drained by a fixed set of worker tasks.
    A full queue drops the job and logs a warning. Each job runs under its
    own timeout, and job failures are logged, never raised to the submitter.
    """

    def __init__(
        self,
        workers: int = 4,
        queue_size: int = 1000,
        task_timeout_seconds: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the pool.

        Args:
            workers: Number of worker tasks
            queue_size: Maximum number of pending jobs
            task_timeout_seconds: Time budget for each job
            logger: Optional logger instance
        """
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.workers = workers
        self.queue_size = queue_size
        self.task_timeout_seconds = task_timeout_seconds
        self.logger = logger or logging.getLogger(__name__)

        self._queue: Optional[asyncio.Queue] = None
        self._tasks: List[asyncio.Task] = []
        self.dropped = 0
        self.failed = 0

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def start(self) -> None:
        """Start worker tasks on the running event loop."""
        if self.running:
            return
        self._queue = asyncio.Queue(maxsize=self.queue_size)
        self._tasks = [
            asyncio.create_task(self._worker(i), name=f"background-worker-{i}")
            for i in range(self.workers)
        ]
        self.logger.debug(f"Started {self.workers} background workers")

    def submit(self, name: str, func: Callable[..., Awaitable[Any]], *args: Any) -> bool:
        """Queue ``func(*args)`` for background execution.

        Must be called from the event loop thread. Starts the workers on
        first use.

        Args:
            name: Label used in log messages
            func: Coroutine function to run
            *args: Arguments for ``func``

        Returns:
            True if queued, False if dropped because the queue is full
        """
        if not self.running:
            self.start()

        try:
            self._queue.put_nowait((name, func, args))
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            self.logger.warning(f"Background queue full, dropping job {name}")
            return False

    async def _worker(self, index: int) -> None:
        while True:
            name, func, args = await self._queue.get()
            try:
                await asyncio.wait_for(func(*args), timeout=self.task_timeout_seconds)
            except asyncio.TimeoutError:
                self.failed += 1
                self.logger.warning(
                    f"Background job {name} timed out after {self.task_timeout_seconds}s"
                )
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.failed += 1
                self.logger.warning(f"Background job {name} failed: {e}")
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every queued job has finished."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self, timeout: float = 5.0) -> None:
        """Drain pending jobs for up to ``timeout`` seconds, then stop workers."""
        if not self.running:
            return

        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            self.logger.warning(
                f"Background pool shutdown timed out with {self._queue.qsize()} jobs pending"
            )

        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self.logger.debug("Background workers stopped")
