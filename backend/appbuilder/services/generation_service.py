"""GenerationService: admission, enqueue and bounded wait for code-generation jobs.

Owns the whole job-queue core for one process:
- JobStore (job records) and RateLimiter (admission windows)
- JobWorker (the single background executor)
- PeriodicSweepers for expired jobs and stale rate-limit windows

Constructed explicitly and started/stopped by the FastAPI lifespan. Nothing
runs at import time.
"""

from collections.abc import Callable
from datetime import datetime

import structlog

from appbuilder.core.config import Settings, get_settings
from appbuilder.core.exceptions import (
    DeadlineExceededError,
    InternalError,
    InvalidArgumentError,
    JobNotFoundError,
    ResourceExhaustedError,
)
from appbuilder.llm.adapter import LLMAdapter
from appbuilder.llm.factory import create_llm_adapter, describe_providers
from appbuilder.llm.renderer import CodeTemplateRenderer
from appbuilder.queue.rate_limiter import RateLimiter
from appbuilder.queue.scheduler import PeriodicSweeper
from appbuilder.queue.schemas import VALID_TARGETS, GenerateRequest, GenerateResponse, Job, JobStatus
from appbuilder.queue.store import JobStore
from appbuilder.schemas.codegen import CodeTemplate
from appbuilder.queue.worker import JobWorker

logger = structlog.get_logger(__name__)


class GenerationService:
    """Synchronous-looking façade over the single-worker job queue."""

    def __init__(
        self,
        adapter: LLMAdapter,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.adapter = adapter
        self.store = JobStore(retention_seconds=self.settings.job_retention_seconds, clock=clock)
        self.rate_limiter = RateLimiter(
            window_seconds=self.settings.rate_limit_window_seconds,
            max_requests=self.settings.rate_limit_max_requests,
            clock=clock,
        )
        self.worker = JobWorker(self.store, adapter, idle_interval=self.settings.worker_idle_interval)
        self.templates = CodeTemplateRenderer()
        self.sweepers = [
            PeriodicSweeper("job_cleanup", self.settings.job_cleanup_interval, self.store.cleanup),
            PeriodicSweeper("rate_limit_cleanup", self.settings.rate_limit_cleanup_interval, self.rate_limiter.cleanup),
        ]

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "GenerationService":
        settings = settings or get_settings()
        return cls(adapter=create_llm_adapter(settings), settings=settings)

    async def start(self) -> None:
        self.worker.start()
        for sweeper in self.sweepers:
            sweeper.start()
        logger.info("generation_service_started", provider=self.adapter.provider_id)

    async def stop(self) -> None:
        for sweeper in self.sweepers:
            await sweeper.stop()
        await self.worker.stop()
        logger.info("generation_service_stopped")

    async def generate(self, request: GenerateRequest, client_id: str) -> GenerateResponse:
        """Validate, admit, enqueue and wait for one generation job.

        Args:
            request: Prompt and target
            client_id: Caller identity used for rate limiting

        Returns:
            The completed job's result, unchanged

        Raises:
            InvalidArgumentError: Empty prompt or unknown target
            ResourceExhaustedError: Client over its rate limit (carries retry_after)
            DeadlineExceededError: Job not terminal within job_wait_timeout
            InternalError: Job failed in the worker
        """
        self._validate(request)

        admission = self.rate_limiter.check_limit(client_id)
        if not admission.allowed:
            retry_after = self.rate_limiter.retry_after_seconds(admission)
            raise ResourceExhaustedError("Rate limit exceeded", retry_after=retry_after)

        job_id = self.store.add_job(request)
        self.worker.notify()

        job = await self.store.wait_for_terminal(
            job_id,
            timeout=self.settings.job_wait_timeout,
            poll_interval=self.settings.job_poll_interval,
        )

        if job is None:
            # The job keeps running; only this caller stops waiting
            logger.warning("job_wait_timed_out", job_id=job_id, timeout=self.settings.job_wait_timeout)
            raise DeadlineExceededError("Code generation timed out")

        if job.status == JobStatus.FAILED:
            raise InternalError(f"Code generation failed: {job.error}")

        return job.result

    def get_job(self, job_id: str) -> Job:
        """Return the current snapshot of a job.

        Raises:
            JobNotFoundError: If the id is unknown or already cleaned up
        """
        job = self.store.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def list_providers(self) -> list[dict]:
        return await describe_providers(self.settings, self.adapter)

    def list_templates(self) -> list[CodeTemplate]:
        return self.templates.list_templates()

    @staticmethod
    def _validate(request: GenerateRequest) -> None:
        if not request.prompt or not request.prompt.strip():
            raise InvalidArgumentError("Prompt is required")

        if request.target not in VALID_TARGETS:
            raise InvalidArgumentError(f"Invalid target. Must be one of: {', '.join(VALID_TARGETS)}")
