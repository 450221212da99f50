"""Key-based LLM adapter.

Available whenever an Anthropic API key is configured. By default it renders
per-target templates in-process; with remote generation enabled it makes one
Messages API call and parses the fenced code blocks of the reply.
"""

import anthropic
import structlog

from appbuilder.core.exceptions import LLMServiceError
from appbuilder.llm.adapter import LLMResponse
from appbuilder.llm.helpers import parse_generated_content
from appbuilder.llm.renderer import CodeTemplateRenderer

logger = structlog.get_logger(__name__)

REMOTE_MAX_TOKENS = 4000
REMOTE_TEMPERATURE = 0.1


class AnthropicAdapter:
    """LLMAdapter backed by an Anthropic credential."""

    provider_id = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        remote: bool = False,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.remote = remote
        self._client = client
        self._renderer = CodeTemplateRenderer()

    async def is_available(self) -> bool:
        return bool(self.api_key)

    async def generate_code(self, prompt: str, target: str) -> LLMResponse:
        if self.remote:
            return await self._generate_remote(prompt, target)
        return LLMResponse(files=self._renderer.render(prompt, target))

    async def _generate_remote(self, prompt: str, target: str) -> LLMResponse:
        client = self._client or anthropic.AsyncAnthropic(api_key=self.api_key)
        system_prompt = (
            f"You are a code generator. Generate {target} code based on the user's prompt. "
            "Return each file as a fenced code block tagged with its language."
        )

        response = await client.messages.create(
            model=self.model,
            max_tokens=REMOTE_MAX_TOKENS,
            temperature=REMOTE_TEMPERATURE,
            system=system_prompt,
            messages=[{"role": "user", "content": prompt}],
        )
        text = "".join(block.text for block in response.content if block.type == "text")

        files = parse_generated_content(text, target)
        if not files:
            raise LLMServiceError("LLM response contained no code blocks")

        logger.info("remote_generation_complete", model=self.model, target=target, file_count=len(files))
        return LLMResponse(files=files)
