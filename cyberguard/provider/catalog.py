"""
Static catalog of models the web client may pick from.

The catalog is read-only process state: it is used to validate a
caller-supplied model id and to list choices; DEFAULT_MODEL covers
everything else.
"""

from __future__ import annotations

from cyberguard.schemas import CatalogModel
from cyberguard.settings import settings

AVAILABLE_MODELS: tuple[CatalogModel, ...] = (
    CatalogModel(id="openai/gpt-4o", name="GPT-4o", provider="OpenAI", description="Most capable OpenAI model"),
    CatalogModel(id="openai/gpt-4o-mini", name="GPT-4o Mini", provider="OpenAI", description="Fast & affordable"),
    CatalogModel(
        id="anthropic/claude-3.5-sonnet",
        name="Claude 3.5 Sonnet",
        provider="Anthropic",
        description="Excellent reasoning",
    ),
    CatalogModel(
        id="anthropic/claude-3-haiku",
        name="Claude 3 Haiku",
        provider="Anthropic",
        description="Fast & lightweight",
    ),
    CatalogModel(id="google/gemini-pro-1.5", name="Gemini Pro 1.5", provider="Google", description="Large context window"),
    CatalogModel(
        id="google/gemini-flash-1.5",
        name="Gemini Flash 1.5",
        provider="Google",
        description="Ultra-fast responses",
    ),
    CatalogModel(
        id="meta-llama/llama-3.1-70b-instruct",
        name="Llama 3.1 70B",
        provider="Meta",
        description="Open-source powerhouse",
    ),
    CatalogModel(id="mistralai/mistral-large", name="Mistral Large", provider="Mistral", description="Strong multilingual"),
)

_CATALOG_INDEX: dict[str, CatalogModel] = {model.id: model for model in AVAILABLE_MODELS}


def list_catalog() -> list[CatalogModel]:
    return list(AVAILABLE_MODELS)


def find_model(model_id: str | None) -> CatalogModel | None:
    if not model_id:
        return None
    return _CATALOG_INDEX.get(model_id)


def resolve_model(requested: str | None) -> str:
    """
    Return `requested` when it names a catalog entry, otherwise DEFAULT_MODEL.
    """
    model = find_model(requested)
    if model is not None:
        return model.id
    return settings.default_model


__all__ = ["AVAILABLE_MODELS", "find_model", "list_catalog", "resolve_model"]
