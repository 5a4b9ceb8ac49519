import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

Job = Callable[[str], Awaitable[None]]
CrashHandler = Callable[[str, BaseException], Awaitable[None]]


class BatchWorker:
    """
    Owns the background tasks that process batches, one task per batch id.

    - start(): schedule processing and return immediately
    - wait(): completion signal for a running batch
    - shutdown(): cancel whatever is still running (application exit)
    A job that raises or is cancelled is reported to `on_crash`; it is never retried.
    """

    def __init__(self, job: Job, on_crash: Optional[CrashHandler] = None) -> None:
        self._job = job
        self._on_crash = on_crash
        self._tasks: Dict[str, asyncio.Task] = {}

    def running(self, batch_id: str) -> bool:
        task = self._tasks.get(batch_id)
        return task is not None and not task.done()

    def start(self, batch_id: str) -> asyncio.Task:
        if self.running(batch_id):
            return self._tasks[batch_id]
        task = asyncio.create_task(self._run(batch_id), name=f"batch:{batch_id}")
        self._tasks[batch_id] = task
        task.add_done_callback(lambda t, bid=batch_id: self._forget(bid, t))
        logger.info("worker.start batch=%s active=%d", batch_id, len(self._tasks))
        return task

    async def _run(self, batch_id: str) -> None:
        try:
            await self._job(batch_id)
        except asyncio.CancelledError as e:
            logger.warning("worker.cancelled batch=%s", batch_id)
            await self._report(batch_id, e)
            raise
        except Exception as e:
            logger.error("worker.crash batch=%s err=%s", batch_id, type(e).__name__, exc_info=True)
            await self._report(batch_id, e)

    async def _report(self, batch_id: str, error: BaseException) -> None:
        if self._on_crash is None:
            return
        try:
            await self._on_crash(batch_id, error)
        except Exception as e:
            logger.error("worker.report.error batch=%s err=%s", batch_id, type(e).__name__)

    def _forget(self, batch_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(batch_id) is task:
            del self._tasks[batch_id]

    async def wait(self, batch_id: str) -> None:
        task = self._tasks.get(batch_id)
        if task is not None:
            await asyncio.shield(task)

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("worker.shutdown cancelled=%d", len(tasks))
        self._tasks.clear()
