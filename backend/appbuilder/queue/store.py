"""In-memory job store with forward-only state transitions."""

import asyncio
import random
import string
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import structlog

from appbuilder.core.exceptions import InvalidTransitionError, JobNotFoundError
from appbuilder.queue.schemas import TERMINAL_STATES, GenerateRequest, GenerateResponse, Job, JobStatus

logger = structlog.get_logger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JobStore:
    """Owns every Job record for the lifetime of the process.

    Jobs are kept in insertion order, so ``next_pending()`` hands them out
    FIFO. Only the worker calls the transition methods after ``add_job``.
    Readers get copies, never the live record.
    """

    # Valid state transitions
    TRANSITIONS = {
        JobStatus.PENDING: [JobStatus.RUNNING, JobStatus.FAILED],
        JobStatus.RUNNING: [JobStatus.COMPLETED, JobStatus.FAILED],
        JobStatus.COMPLETED: [],  # Terminal state
        JobStatus.FAILED: [],  # Terminal state
    }

    def __init__(self, retention_seconds: float = 3600, clock: Callable[[], datetime] | None = None):
        self.retention = timedelta(seconds=retention_seconds)
        self._clock = clock or _utcnow
        self._jobs: dict[str, Job] = {}
        self._finished: dict[str, asyncio.Event] = {}

    def add_job(self, request: GenerateRequest) -> str:
        """Insert a pending job for request and return its id without waiting."""
        now = self._clock()
        job_id = self._generate_job_id(now)
        self._jobs[job_id] = Job(
            id=job_id,
            prompt=request.prompt,
            target=request.target,
            status=JobStatus.PENDING,
            progress=0,
            created_at=now,
        )
        self._finished[job_id] = asyncio.Event()
        logger.info("job_enqueued", job_id=job_id, target=request.target)
        return job_id

    def get_job(self, job_id: str) -> Job | None:
        job = self._jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    def next_pending(self) -> Job | None:
        """Return the oldest pending job, or None if nothing is waiting."""
        for job in self._jobs.values():
            if job.status == JobStatus.PENDING:
                return job.model_copy(deep=True)
        return None

    # ------------------------------------------------------------------
    # Transitions (worker only)
    # ------------------------------------------------------------------

    def mark_running(self, job_id: str, progress: int = 10) -> None:
        job = self._transition(job_id, JobStatus.RUNNING)
        job.progress = max(job.progress, progress)

    def set_progress(self, job_id: str, progress: int) -> None:
        job = self._require(job_id)
        if job.status != JobStatus.RUNNING or not job.progress <= progress <= 100:
            raise InvalidTransitionError(job_id, f"{job.status.value}@{job.progress}", f"progress {progress}")
        job.progress = progress

    def complete(self, job_id: str, result: GenerateResponse) -> None:
        job = self._transition(job_id, JobStatus.COMPLETED)
        job.progress = 100
        job.result = result
        job.completed_at = self._clock()
        self._finished[job_id].set()

    def fail(self, job_id: str, error: str) -> None:
        job = self._transition(job_id, JobStatus.FAILED)
        job.error = error
        job.completed_at = self._clock()
        self._finished[job_id].set()

    # ------------------------------------------------------------------
    # Waiting and maintenance
    # ------------------------------------------------------------------

    async def wait_for_terminal(self, job_id: str, timeout: float, poll_interval: float = 0.5) -> Job | None:
        """Wait until the job completes or fails.

        Re-reads the job every poll_interval seconds and wakes early when the
        worker finishes it. Returns the terminal job, or None once timeout
        seconds have passed.

        Raises:
            JobNotFoundError: If the job disappears while waiting.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while True:
            job = self.get_job(job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            if job.status in TERMINAL_STATES:
                return job

            remaining = deadline - loop.time()
            if remaining <= 0:
                return None

            finished = self._finished.get(job_id)
            if finished is None:
                await asyncio.sleep(min(poll_interval, remaining))
                continue
            try:
                await asyncio.wait_for(finished.wait(), timeout=min(poll_interval, remaining))
            except TimeoutError:
                continue

    def cleanup(self) -> int:
        """Delete jobs that finished more than the retention window ago.

        Returns:
            Number of jobs removed.
        """
        cutoff = self._clock() - self.retention
        expired = [
            job_id
            for job_id, job in self._jobs.items()
            if job.completed_at is not None and job.completed_at < cutoff
        ]
        for job_id in expired:
            del self._jobs[job_id]
            self._finished.pop(job_id, None)

        if expired:
            logger.info("expired_jobs_cleaned", cleaned=len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._jobs)

    def _require(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def _transition(self, job_id: str, new_status: JobStatus) -> Job:
        job = self._require(job_id)
        if new_status not in self.TRANSITIONS[job.status]:
            logger.error(
                "job_transition_rejected",
                job_id=job_id,
                current=job.status.value,
                requested=new_status.value,
            )
            raise InvalidTransitionError(job_id, job.status.value, new_status.value)
        job.status = new_status
        return job

    def _generate_job_id(self, now: datetime) -> str:
        while True:
            suffix = "".join(random.choices(_ID_ALPHABET, k=9))
            job_id = f"job_{int(now.timestamp() * 1000)}_{suffix}"
            if job_id not in self._jobs:
                return job_id
