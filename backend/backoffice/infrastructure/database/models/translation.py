from pydantic import BaseModel, Field


class TranslationModel(BaseModel):
    id: int = Field(..., description="Primary key of translation record")
    entity_type: str = Field(..., description="Owning entity kind (e.g. 'Faq')")
    entity_id: int = Field(..., description="Primary key of the owning entity row")
    field: str = Field(..., description="Translated attribute of the entity")
    language_id: int = Field(..., description="Foreign key referencing language")
    value: str = Field(..., description="Translated text value")

    class Config:
        from_attributes = True
        frozen = True
        extra = "forbid"
