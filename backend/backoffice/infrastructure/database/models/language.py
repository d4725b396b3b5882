from pydantic import BaseModel, Field


class LanguageModel(BaseModel):
    id: int = Field(..., description="Primary key of the language")
    name: str = Field(..., description="Display name (e.g. 'Français')")
    code: str = Field(..., description="Unique language code (e.g. 'fr', 'en', 'pt-br')")
    is_default: bool = Field(
        ..., description="Flag marking the source language for content entry"
    )

    class Config:
        from_attributes = True
        frozen = True
        extra = "forbid"
