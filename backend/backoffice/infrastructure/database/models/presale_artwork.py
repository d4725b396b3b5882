from datetime import datetime

from pydantic import BaseModel, Field


class PresaleArtworkModel(BaseModel):
    id: int = Field(..., description="Primary key of the presale artwork")
    artist_id: int = Field(..., description="Foreign key referencing artists table")
    name: str = Field(..., description="Artwork title in the default language")
    description: str | None = Field(None, description="Description in the default language")
    image_url: str | None = Field(None, description="Public image URL")
    order: int | None = Field(None, description="Legacy manual ordering")
    display_order: int | None = Field(
        None, description="Position in the artist's list, independent of id"
    )
    created_at: datetime | None = Field(None, description="Creation timestamp")

    class Config:
        from_attributes = True
        frozen = True
        extra = "forbid"
