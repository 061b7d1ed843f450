"""Ingestion -> pipeline handoff

The ingestion handler only calls ``submit(job_id)``. Two dispatchers:
- ``InlineDispatcher`` runs the pipeline in the caller's thread, so one job is
  in flight per polling loop and errors reach the caller
- ``QueueDispatcher`` queues job ids for a fixed pool of worker threads; errors
  are logged by the worker
"""

import logging
import queue
import threading
from typing import List, Optional

logger = logging.getLogger(__name__)


class InlineDispatcher:
    """Run the pipeline synchronously"""

    def __init__(self, pipeline):
        self.pipeline = pipeline

    def submit(self, job_id: int) -> None:
        self.pipeline.run(job_id)

    def start(self) -> None:
        pass

    def stop(self, timeout: Optional[float] = None) -> None:
        pass


class QueueDispatcher:
    """Run the pipeline on ``workers`` background threads"""

    def __init__(self, pipeline, workers: int = 1):
        if workers < 1:
            raise ValueError("QueueDispatcher needs at least one worker")
        self.pipeline = pipeline
        self.workers = workers
        self._queue: "queue.Queue[Optional[int]]" = queue.Queue()
        self._threads: List[threading.Thread] = []

    def start(self) -> None:
        for i in range(self.workers):
            thread = threading.Thread(
                target=self._work, name=f"pipeline-worker-{i}", daemon=True,
            )
            thread.start()
            self._threads.append(thread)

    def submit(self, job_id: int) -> None:
        self._queue.put(job_id)

    def join(self) -> None:
        """Block until every queued job has been processed"""
        self._queue.join()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Drop queued jobs and wait up to ``timeout`` for each running one

        Dropped jobs stay PENDING and can be run later with ``resume``.
        """
        dropped = []
        while True:
            try:
                job_id = self._queue.get_nowait()
            except queue.Empty:
                break
            if job_id is not None:
                dropped.append(job_id)
            self._queue.task_done()
        if dropped:
            logger.warning(f"Shutting down with {len(dropped)} queued jobs left PENDING: {dropped}")

        # One poison pill per worker
        for _ in self._threads:
            self._queue.put(None)
        for thread in self._threads:
            thread.join(timeout)
        self._threads = []

    def _work(self) -> None:
        while True:
            job_id = self._queue.get()
            try:
                if job_id is None:
                    return
                self.pipeline.run(job_id)
            except Exception:
                logger.exception(f"Training pipeline failed for job {job_id}")
            finally:
                self._queue.task_done()


def create_dispatcher(pipeline, workers: int = 0):
    if workers > 0:
        return QueueDispatcher(pipeline, workers)
    return InlineDispatcher(pipeline)
