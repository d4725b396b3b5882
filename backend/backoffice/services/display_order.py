"""Display order sequencing for presale artworks.

Every operation runs inside the caller's transaction; a raised error makes
the session scope roll back all rows touched so far.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, List

from backoffice.entities import EntityType
from backoffice.errors import NotFound, UnsupportedEntity, ValidationFailure
from backoffice.infrastructure.database.db import DB
from backoffice.schemas import DisplayOrderUpdate

logger = logging.getLogger(__name__)

SEQUENCED_ENTITIES = frozenset({EntityType.PRESALE_ARTWORK})


def _validate_updates(updates: List[DisplayOrderUpdate]) -> None:
    duplicate_ids = sorted(
        item_id for item_id, seen in Counter(item.id for item in updates).items() if seen > 1
    )
    if duplicate_ids:
        raise ValidationFailure(
            f"Items appear more than once: {', '.join(map(str, duplicate_ids))}"
        )
    orders = Counter(item.display_order for item in updates if item.display_order is not None)
    duplicate_orders = sorted(order for order, seen in orders.items() if seen > 1)
    if duplicate_orders:
        raise ValidationFailure(
            f"Display order values are used more than once: {', '.join(map(str, duplicate_orders))}"
        )


def update_display_order(
    db: DB, entity_type: "str | EntityType", updates: Iterable[DisplayOrderUpdate]
) -> int:
    kind = EntityType.parse(entity_type)
    if kind not in SEQUENCED_ENTITIES:
        raise UnsupportedEntity(f"Display order is not supported for {kind.value}")
    updates = list(updates)
    _validate_updates(updates)
    for item in updates:
        if not db.presale_artworks.set_display_order(item.id, item.display_order):
            raise NotFound(f"{kind.value} #{item.id} not found.")
    logger.info("Display order updated for %s %s item(s)", len(updates), kind.value)
    return len(updates)


def get_max_display_order_by_artist(db: DB, artist_id: int) -> int:
    return db.presale_artworks.max_display_order(artist_id)


def next_display_order(db: DB, artist_id: int) -> int:
    return get_max_display_order_by_artist(db, artist_id) + 1


def reset_display_order_for_artist(db: DB, artist_id: int) -> int:
    artworks = db.presale_artworks.list_by_artist(artist_id)
    for position, artwork in enumerate(artworks, start=1):
        db.presale_artworks.set_display_order(artwork.id, position)
    logger.info("Display order reset for artist %s: %s artwork(s)", artist_id, len(artworks))
    return len(artworks)
