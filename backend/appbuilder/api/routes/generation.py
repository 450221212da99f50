"""Generation API routes: generate code, list providers and templates, validate code."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from appbuilder.api.deps import get_client_id, get_generation_service
from appbuilder.queue.schemas import GenerateRequest, GenerateResponse
from appbuilder.schemas.codegen import TemplatesResponse, ValidateCodeRequest, ValidateCodeResponse
from appbuilder.services.generation_service import GenerationService
from appbuilder.services.validation_service import validate_code

router = APIRouter()


class ProviderInfo(BaseModel):
    """One LLM backend as reported by GET /api/providers."""

    id: str
    name: str
    type: str
    available: bool
    active: bool
    models: list[str]


class ProvidersResponse(BaseModel):
    providers: list[ProviderInfo]


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    request: GenerateRequest,
    client_id: str = Depends(get_client_id),
    service: GenerationService = Depends(get_generation_service),
):
    """Generate code for a prompt and wait for the result.

    Args:
        request: GenerateRequest with prompt and target
        client_id: Caller identity for rate limiting
        service: GenerationService (injected)

    Returns:
        GenerateResponse with jobId, files and gitDiff

    Raises:
        InvalidArgumentError (400): Empty prompt or unknown target
        ResourceExhaustedError (429): Rate limit exceeded, with retryAfter
        DeadlineExceededError (504): Generation did not finish in time
        InternalError (500): Generation failed
    """
    return await service.generate(request, client_id)


@router.get("/providers", response_model=ProvidersResponse)
async def list_providers(service: GenerationService = Depends(get_generation_service)):
    """List the LLM backends and whether each one is reachable."""
    return ProvidersResponse(providers=await service.list_providers())


@router.get("/templates", response_model=TemplatesResponse)
async def list_templates(service: GenerationService = Depends(get_generation_service)):
    """List the starter templates used for offline generation, one per target."""
    return TemplatesResponse(templates=service.list_templates())


@router.post("/validate", response_model=ValidateCodeResponse)
async def validate(request: ValidateCodeRequest):
    """Check source code for common syntax slips and suggest improvements.

    Raises:
        InvalidArgumentError (400): Empty code
    """
    return validate_code(request)
