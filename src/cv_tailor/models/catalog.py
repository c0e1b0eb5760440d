"""Models offered through the LLM gateway."""

from __future__ import annotations

from pydantic import BaseModel


class ModelOption(BaseModel):
    id: str
    name: str
    provider: str
    is_free: bool = False


AVAILABLE_MODELS: list[ModelOption] = [
    ModelOption(id="openai/gpt-4.1-mini", name="GPT-4.1 Mini", provider="OpenAI"),
    ModelOption(id="openai/gpt-oss-120b", name="GPT OSS 120B", provider="OpenAI"),
    ModelOption(
        id="openai/gpt-oss-20b:free", name="GPT OSS 20B (Free)", provider="OpenAI", is_free=True
    ),
    ModelOption(
        id="google/gemini-2.0-flash-exp:free",
        name="Gemini 2.0 Flash (Free)",
        provider="Google",
        is_free=True,
    ),
    ModelOption(id="qwen/qwq-32b", name="QwQ 32B", provider="Qwen"),
    ModelOption(
        id="deepseek/deepseek-chat-v3-0324:free",
        name="DeepSeek Chat V3 (Free)",
        provider="DeepSeek",
        is_free=True,
    ),
]

DEFAULT_MODEL = "openai/gpt-4.1-mini"


def get_model_by_id(model_id: str) -> ModelOption | None:
    for option in AVAILABLE_MODELS:
        if option.id == model_id:
            return option
    return None


def get_free_models() -> list[ModelOption]:
    return [m for m in AVAILABLE_MODELS if m.is_free]


def get_models_by_provider(provider: str) -> list[ModelOption]:
    return [m for m in AVAILABLE_MODELS if m.provider == provider]
