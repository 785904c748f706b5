from pydantic import BaseModel, ConfigDict, Field


class CatalogModel(BaseModel):
    """
    A selectable model in the static provider catalog.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Provider-qualified model id, e.g. openai/gpt-4o")
    name: str = Field(..., description="Human readable display name")
    provider: str = Field(..., description="Provider family, e.g. OpenAI")
    description: str = Field("", description="Short blurb shown in the model picker")


__all__ = ["CatalogModel"]
