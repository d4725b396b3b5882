from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from backoffice.entities import EntityType
from backoffice.errors import ErrorKind
from backoffice.infrastructure.database.models import (
    ArtistModel,
    LanguageModel,
    TranslationModel,
)


class LanguageIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=2, max_length=5)
    is_default: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("code", mode="before")
    @classmethod
    def _normalize_code(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value


class TranslationIn(BaseModel):
    entity_type: str = Field(..., min_length=1)
    entity_id: int = Field(..., ge=1)
    field: str = Field(..., min_length=1)
    language_id: int = Field(..., ge=1)
    value: str


class EntityTranslationsIn(BaseModel):
    fields: Dict[str, Optional[str]]
    overwrite: bool = True


class DisplayOrderUpdate(BaseModel):
    id: int
    display_order: Optional[int] = Field(None, ge=0)


class RepairRequest(BaseModel):
    entity_type: Optional[str] = Field(
        None, description="Limit the repair to one entity type; all managed types otherwise"
    )


# Content payloads. Fields that are translatable for the kind are fanned out
# after the row is written.


class FaqIn(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class ArtworkStyleIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class ArtistCategoryIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class PresaleArtworkIn(BaseModel):
    artist_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    order: Optional[int] = None
    display_order: Optional[int] = Field(None, ge=0)


class ArtistIn(BaseModel):
    name: str = Field(..., min_length=1)


class FaqUpdate(BaseModel):
    question: str = Field(None, min_length=1)
    answer: str = Field(None, min_length=1)


class ArtworkStyleUpdate(BaseModel):
    name: str = Field(None, min_length=1, max_length=255)


class ArtistCategoryUpdate(BaseModel):
    name: str = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None


class PresaleArtworkUpdate(BaseModel):
    # Omitted fields keep their stored value; NOT NULL columns reject an explicit null.
    artist_id: int = Field(None, ge=1)
    name: str = Field(None, min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    order: Optional[int] = None
    display_order: Optional[int] = Field(None, ge=0)


CONTENT_PAYLOADS: Dict[EntityType, type[BaseModel]] = {
    EntityType.FAQ: FaqIn,
    EntityType.ARTWORK_STYLE: ArtworkStyleIn,
    EntityType.ARTIST_CATEGORY: ArtistCategoryIn,
    EntityType.PRESALE_ARTWORK: PresaleArtworkIn,
}

CONTENT_UPDATE_PAYLOADS: Dict[EntityType, type[BaseModel]] = {
    EntityType.FAQ: FaqUpdate,
    EntityType.ARTWORK_STYLE: ArtworkStyleUpdate,
    EntityType.ARTIST_CATEGORY: ArtistCategoryUpdate,
    EntityType.PRESALE_ARTWORK: PresaleArtworkUpdate,
}


class OutcomeStatus(str, Enum):
    PERSISTED = "persisted"
    FAILED = "failed"
    SKIPPED = "skipped"


class FieldTranslationOutcome(BaseModel):
    language_code: str
    field: str
    status: OutcomeStatus
    error: Optional[str] = None


class TranslationReport(BaseModel):
    """Per-(language, field) result of one fan-out run."""

    entity_type: str
    entity_id: int
    default_language: Optional[str] = None
    success: bool
    message: Optional[str] = None
    outcomes: List[FieldTranslationOutcome] = Field(default_factory=list)

    def count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)


class LanguageCompleteness(BaseModel):
    language_id: int
    language_code: str
    missing_fields: List[str]


# Action results: {success, message?, error?, ...payload}


class ActionResult(BaseModel):
    success: bool = True
    message: Optional[str] = None
    error: Optional[ErrorKind] = None


class LanguageResult(ActionResult):
    language: Optional[LanguageModel] = None


class LanguageListResult(ActionResult):
    languages: List[LanguageModel] = Field(default_factory=list)


class TranslationResult(ActionResult):
    translation: Optional[TranslationModel] = None


class TranslationListResult(ActionResult):
    translations: List[TranslationModel] = Field(default_factory=list)


class DeleteResult(ActionResult):
    deleted: int = 0


class ReportResult(ActionResult):
    report: Optional[TranslationReport] = None


class CompletenessResult(ActionResult):
    entity_type: Optional[str] = None
    entity_id: Optional[int] = None
    complete: bool = False
    languages: List[LanguageCompleteness] = Field(default_factory=list)


class RepairResult(ActionResult):
    entity_type: Optional[str] = None
    examined: int = 0
    persisted: int = 0
    failed: int = 0


class EntityResult(ActionResult):
    entity: Optional[Dict[str, Any]] = None
    translations: Optional[TranslationReport] = None


class EntityListResult(ActionResult):
    entities: List[Dict[str, Any]] = Field(default_factory=list)


class ArtistResult(ActionResult):
    artist: Optional[ArtistModel] = None


class ArtistListResult(ActionResult):
    artists: List[ArtistModel] = Field(default_factory=list)


class DisplayOrderResult(ActionResult):
    updated: int = 0


class MaxDisplayOrderResult(ActionResult):
    artist_id: Optional[int] = None
    max_display_order: int = 0
