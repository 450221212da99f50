"""Job status API routes."""

from fastapi import APIRouter, Depends

from appbuilder.api.deps import get_generation_service
from appbuilder.queue.schemas import JobStatusResponse
from appbuilder.services.generation_service import GenerationService

router = APIRouter()


@router.get("/{job_id}", response_model=JobStatusResponse, response_model_exclude_none=True)
async def get_job_status(
    job_id: str,
    service: GenerationService = Depends(get_generation_service),
):
    """Get the current status of a code generation job.

    Raises:
        JobNotFoundError (404): Unknown job id, or the job was cleaned up
    """
    return JobStatusResponse.from_job(service.get_job(job_id))
