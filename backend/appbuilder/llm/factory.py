"""Adapter selection and provider status reporting."""

from appbuilder.core.config import Settings
from appbuilder.llm.adapter import LLMAdapter
from appbuilder.llm.anthropic_adapter import AnthropicAdapter
from appbuilder.llm.local_adapter import LocalLLMAdapter


def create_llm_adapter(settings: Settings) -> LLMAdapter:
    """Return the key-based adapter when a credential is configured, else the local one."""
    if settings.anthropic_api_key:
        return AnthropicAdapter(
            api_key=settings.anthropic_api_key,
            model=settings.llm_model,
            remote=settings.llm_remote_generation,
        )
    return LocalLLMAdapter(
        base_url=settings.local_llm_url,
        model=settings.local_llm_model,
        probe_timeout=settings.local_llm_probe_timeout,
        generate_timeout=settings.local_llm_generate_timeout,
    )


async def describe_providers(settings: Settings, active: LLMAdapter) -> list[dict]:
    """Availability of every known backend, flagging the one jobs run on.

    Probes a backend through ``active`` when it is the configured one so
    injected clients are honoured.
    """
    candidates: list[tuple[LLMAdapter, str, list[str]]] = [
        (
            active if active.provider_id == AnthropicAdapter.provider_id
            else AnthropicAdapter(api_key=settings.anthropic_api_key, model=settings.llm_model),
            "Anthropic",
            [settings.llm_model],
        ),
        (
            active if active.provider_id == LocalLLMAdapter.provider_id
            else LocalLLMAdapter(
                base_url=settings.local_llm_url,
                model=settings.local_llm_model,
                probe_timeout=settings.local_llm_probe_timeout,
                generate_timeout=settings.local_llm_generate_timeout,
            ),
            "Local LLM",
            [settings.local_llm_model],
        ),
    ]

    providers = []
    for adapter, name, models in candidates:
        providers.append({
            "id": adapter.provider_id,
            "name": name,
            "type": adapter.provider_id,
            "available": await adapter.is_available(),
            "active": adapter is active,
            "models": models,
        })
    return providers
