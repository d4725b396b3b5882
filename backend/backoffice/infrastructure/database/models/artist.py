from datetime import datetime

from pydantic import BaseModel, Field


class ArtistModel(BaseModel):
    id: int = Field(..., description="Primary key of the artist")
    name: str = Field(..., description="Public artist name")
    created_at: datetime | None = Field(None, description="Creation timestamp")

    class Config:
        from_attributes = True
        frozen = True
        extra = "forbid"
