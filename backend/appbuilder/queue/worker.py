"""JobWorker: single background task that executes pending jobs one at a time."""

import asyncio

import structlog

from appbuilder.core.exceptions import LLMServiceError
from appbuilder.llm.adapter import LLMAdapter
from appbuilder.queue.diff import generate_git_diff
from appbuilder.queue.schemas import GenerateResponse, Job
from appbuilder.queue.store import JobStore

logger = structlog.get_logger(__name__)

# Progress checkpoints reported while a job runs
PROGRESS_STARTED = 10
PROGRESS_GENERATING = 30
PROGRESS_GENERATED = 80

LLM_UNAVAILABLE_MESSAGE = "LLM service is not available"


class JobWorker:
    """Pulls pending jobs from the store and runs them through the LLM adapter.

    Usage:
        worker = JobWorker(store, adapter)
        worker.start()        # spawns the loop on the running event loop
        worker.notify()       # optional: skip the rest of the idle sleep
        await worker.stop()   # cancels the loop

    Exactly one job is in flight at any time. Failures inside a job are
    recorded on the job and never stop the loop.
    """

    def __init__(self, store: JobStore, adapter: LLMAdapter, idle_interval: float = 1.0) -> None:
        self.store = store
        self.adapter = adapter
        self.idle_interval = idle_interval
        self._wakeup = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name="job-worker")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("job_worker_stopped")

    def notify(self) -> None:
        """Wake the loop early because a job was just enqueued."""
        self._wakeup.set()

    async def run(self) -> None:
        """Process jobs forever, sleeping idle_interval when the store is empty."""
        logger.info("job_worker_started", idle_interval=self.idle_interval)

        while True:
            try:
                processed = await self.process_next_job()
            except Exception as exc:
                logger.error(
                    "job_worker_iteration_failed",
                    error=str(exc),
                    error_type=type(exc).__name__,
                    exc_info=True,
                )
                processed = False

            if not processed:
                await self._idle()

    async def process_next_job(self) -> bool:
        """Run the oldest pending job to a terminal state.

        Returns:
            True if a job was processed, False if nothing was pending.
        """
        job = self.store.next_pending()
        if job is None:
            return False

        await self._execute(job)
        return True

    async def _execute(self, job: Job) -> None:
        log = logger.bind(job_id=job.id, target=job.target)

        try:
            self.store.mark_running(job.id, PROGRESS_STARTED)
            log.info("job_started")

            if not await self.adapter.is_available():
                raise LLMServiceError(LLM_UNAVAILABLE_MESSAGE)

            self.store.set_progress(job.id, PROGRESS_GENERATING)
            response = await self.adapter.generate_code(job.prompt, job.target)

            self.store.set_progress(job.id, PROGRESS_GENERATED)
            git_diff = generate_git_diff(response.files)

            self.store.complete(
                job.id,
                GenerateResponse(job_id=job.id, files=response.files, git_diff=git_diff),
            )
            log.info("job_completed", file_count=len(response.files))

        except Exception as exc:
            message = str(exc) or "Unknown error"
            log.error("job_failed", error=message, error_type=type(exc).__name__, exc_info=True)
            self.store.fail(job.id, message)

    async def _idle(self) -> None:
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=self.idle_interval)
        except TimeoutError:
            pass
        self._wakeup.clear()
