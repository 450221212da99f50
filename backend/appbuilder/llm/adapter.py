"""LLMAdapter protocol: the pluggable backend that turns a prompt into files.

Variants (selected once, see ``appbuilder.llm.factory``):
- AnthropicAdapter: credential-gated, template generation by default
- LocalLLMAdapter: Ollama-compatible HTTP endpoint
"""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from appbuilder.queue.schemas import GeneratedFile


class LLMResponse(BaseModel):
    """Files produced for one generation request."""

    files: list[GeneratedFile]
    explanation: str | None = None


@runtime_checkable
class LLMAdapter(Protocol):
    """Protocol every LLM backend implements.

    ``is_available`` never raises: any probe failure means False.
    ``generate_code`` lets backend failures propagate to the caller.
    """

    provider_id: str

    async def generate_code(self, prompt: str, target: str) -> LLMResponse:
        """Generate files for prompt in the given target (frontend, backend, infra, sql)."""
        ...

    async def is_available(self) -> bool:
        """Report whether the backend can serve a generation right now."""
        ...
