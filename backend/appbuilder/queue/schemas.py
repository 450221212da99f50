"""Queue schemas: job lifecycle states, generation targets and wire models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class JobStatus(str, Enum):
    """Job lifecycle states."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class Target(str, Enum):
    """What kind of code a job generates."""

    FRONTEND = "frontend"
    BACKEND = "backend"
    INFRA = "infra"
    SQL = "sql"


TERMINAL_STATES = {JobStatus.COMPLETED, JobStatus.FAILED}

VALID_TARGETS = [target.value for target in Target]


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateRequest(CamelModel):
    """Request body for POST /api/generate.

    Both fields default to empty so that missing input reaches the service
    validation (and its error messages) instead of a 422.
    """

    prompt: str = ""
    target: str = ""


class GeneratedFile(CamelModel):
    """One file produced by an LLM adapter."""

    path: str
    content: str
    language: str


class GenerateResponse(CamelModel):
    """Result payload of a completed job."""

    job_id: str
    files: list[GeneratedFile]
    git_diff: str


class Job(CamelModel):
    """Complete job record held by the JobStore."""

    id: str
    prompt: str
    target: str
    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    result: GenerateResponse | None = None
    error: str | None = None
    created_at: datetime
    completed_at: datetime | None = None


class JobStatusResponse(CamelModel):
    """Response for GET /api/jobs/{id}."""

    id: str
    status: JobStatus
    progress: int
    result: GenerateResponse | None = None
    error: str | None = None
    created_at: datetime
    completed_at: datetime | None = None

    @classmethod
    def from_job(cls, job: Job) -> "JobStatusResponse":
        return cls(
            id=job.id,
            status=job.status,
            progress=job.progress,
            result=job.result,
            error=job.error,
            created_at=job.created_at,
            completed_at=job.completed_at,
        )
