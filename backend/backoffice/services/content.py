from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ValidationError

from backoffice.entities import EntityType, translatable_fields
from backoffice.errors import NotFound, UnsupportedEntity, ValidationFailure
from backoffice.infrastructure.database.db import DB
from backoffice.infrastructure.database.models import ArtistModel
from backoffice.schemas import (
    CONTENT_PAYLOADS,
    CONTENT_UPDATE_PAYLOADS,
    ArtistIn,
    PresaleArtworkIn,
    PresaleArtworkUpdate,
)
from backoffice.services.display_order import next_display_order

logger = logging.getLogger(__name__)


def validation_message(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid data."


def parse_payload(
    entity_type: "str | EntityType",
    data: Mapping[str, Any] | BaseModel,
    *,
    partial: bool = False,
) -> BaseModel:
    """Validate a create payload, or an update payload where every field is optional."""
    kind = EntityType.parse(entity_type)
    model = (CONTENT_UPDATE_PAYLOADS if partial else CONTENT_PAYLOADS).get(kind)
    if model is None:
        raise UnsupportedEntity(f"{kind.value} is not stored by this service")
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailure(validation_message(exc)) from exc


def translatable_values(entity_type: "str | EntityType", entity: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    return {
        name: entity.get(name)
        for name in translatable_fields(entity_type)
        if name in entity and entity.get(name) is not None
    }


def list_entities(db: DB, entity_type: "str | EntityType") -> List[Dict[str, Any]]:
    return db.content(EntityType.parse(entity_type)).list_all()


def get_entity(db: DB, entity_type: "str | EntityType", entity_id: int) -> Dict[str, Any]:
    kind = EntityType.parse(entity_type)
    entity = db.content(kind).get(entity_id)
    if entity is None:
        raise NotFound(f"{kind.value} #{entity_id} not found.")
    return entity


def _check_artist(db: DB, artist_id: int) -> None:
    if db.artists.get(artist_id) is None:
        raise NotFound("Artist not found.")


def create_entity(db: DB, entity_type: "str | EntityType", payload: BaseModel) -> Dict[str, Any]:
    kind = EntityType.parse(entity_type)
    values = payload.model_dump()
    if isinstance(payload, PresaleArtworkIn):
        _check_artist(db, payload.artist_id)
        if payload.display_order is None:
            values["display_order"] = next_display_order(db, payload.artist_id)
    entity = db.content(kind).create(values)
    logger.info("%s #%s created", kind.value, entity["id"])
    return entity


def update_entity(
    db: DB, entity_type: "str | EntityType", entity_id: int, payload: BaseModel
) -> Dict[str, Any]:
    kind = EntityType.parse(entity_type)
    values = payload.model_dump(exclude_unset=True)
    if isinstance(payload, PresaleArtworkUpdate) and "artist_id" in values:
        _check_artist(db, payload.artist_id)
    if values:
        entity = db.content(kind).update(entity_id, values)
    else:
        entity = db.content(kind).get(entity_id)
    if entity is None:
        raise NotFound(f"{kind.value} #{entity_id} not found.")
    logger.info("%s #%s updated", kind.value, entity_id)
    return entity


def delete_entity(db: DB, entity_type: "str | EntityType", entity_id: int) -> int:
    """Delete the row and every translation that points at it."""
    kind = EntityType.parse(entity_type)
    if not db.content(kind).delete(entity_id):
        raise NotFound(f"{kind.value} #{entity_id} not found.")
    removed = db.translations.delete_for_entity(kind.value, entity_id)
    logger.info("%s #%s deleted with %s translation(s)", kind.value, entity_id, removed)
    return removed


def list_artists(db: DB) -> List[ArtistModel]:
    return db.artists.list_all()


def get_artist(db: DB, artist_id: int) -> ArtistModel:
    artist = db.artists.get(artist_id)
    if artist is None:
        raise NotFound("Artist not found.")
    return artist


def create_artist(db: DB, data: ArtistIn) -> ArtistModel:
    artist = db.artists.create(name=data.name.strip())
    logger.info("Artist #%s created", artist.id)
    return artist
