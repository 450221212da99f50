"""Local-endpoint LLM adapter for an Ollama-compatible server."""

import httpx
import structlog

from appbuilder.core.exceptions import LLMServiceError
from appbuilder.llm.adapter import LLMResponse
from appbuilder.queue.schemas import GeneratedFile

logger = structlog.get_logger(__name__)

PROBE_PATH = "/api/tags"
GENERATE_PATH = "/api/generate"


class LocalLLMAdapter:
    """LLMAdapter that talks to a local model server over HTTP.

    Pass ``client`` to reuse a shared httpx.AsyncClient (tests inject one with
    a MockTransport); otherwise a short-lived client is opened per call.
    Every call carries a finite timeout, so a hung server fails the job
    instead of holding the worker.
    """

    provider_id = "local"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "codellama",
        probe_timeout: float = 2.0,
        generate_timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.probe_timeout = probe_timeout
        self.generate_timeout = generate_timeout
        self._client = client

    async def is_available(self) -> bool:
        try:
            response = await self._request("GET", PROBE_PATH, timeout=self.probe_timeout)
        except Exception as exc:
            logger.info("local_llm_unavailable", base_url=self.base_url, error_type=type(exc).__name__)
            return False
        return response.is_success

    async def generate_code(self, prompt: str, target: str) -> LLMResponse:
        response = await self._request(
            "POST",
            GENERATE_PATH,
            timeout=self.generate_timeout,
            json={
                "model": self.model,
                "prompt": f"Generate {target} code for: {prompt}",
                "stream": False,
            },
        )

        if not response.is_success:
            raise LLMServiceError(f"Local LLM error: {response.status_code}")

        content = response.json().get("response", "")
        return LLMResponse(
            files=[GeneratedFile(path=f"generated.{target}", content=content, language=target)]
        )

    async def _request(self, method: str, path: str, timeout: float, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        if self._client is not None:
            return await self._client.request(method, url, timeout=timeout, **kwargs)
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.request(method, url, **kwargs)
