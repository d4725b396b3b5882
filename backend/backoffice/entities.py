"""Registry of entity kinds that carry translatable fields.

Translation rows reference their owner by ``entity_type`` string; keeping the
set of kinds and fields closed here stops typos from orphaning rows.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Tuple

from backoffice.errors import UnsupportedEntity, ValidationFailure


class EntityType(str, Enum):
    TEAM = "Team"
    FAQ = "Faq"
    DETAILED_FAQ_HEADER = "DetailedFaqHeader"
    DETAILED_FAQ_ITEM = "DetailedFaqItem"
    DETAILED_FAQ_PAGE_ITEM = "DetailedFaqPageItem"
    DETAILED_GLOSSARY_HEADER = "DetailedGlossaryHeader"
    DETAILED_GLOSSARY_ITEM = "DetailedGlossaryItem"
    PRESALE_ARTWORK = "PresaleArtwork"
    LANDING_ARTIST = "LandingArtist"
    SEO_CATEGORY = "SeoCategory"
    ARTWORK_MEDIUM = "ArtworkMedium"
    ARTWORK_STYLE = "ArtworkStyle"
    ARTWORK_TECHNIQUE = "ArtworkTechnique"
    ARTIST_CATEGORY = "ArtistCategory"
    STICKY_FOOTER = "StickyFooter"

    @classmethod
    def parse(cls, value: "str | EntityType") -> "EntityType":
        if isinstance(value, EntityType):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise UnsupportedEntity(f"Unsupported entity type: {value!r}")


TRANSLATABLE_FIELDS: Dict[EntityType, Tuple[str, ...]] = {
    EntityType.TEAM: ("role", "intro", "description"),
    EntityType.FAQ: ("question", "answer"),
    EntityType.DETAILED_FAQ_HEADER: ("name",),
    EntityType.DETAILED_FAQ_ITEM: ("question", "answer"),
    EntityType.DETAILED_FAQ_PAGE_ITEM: ("question", "answer"),
    EntityType.DETAILED_GLOSSARY_HEADER: ("name",),
    EntityType.DETAILED_GLOSSARY_ITEM: ("question", "answer"),
    EntityType.PRESALE_ARTWORK: ("name", "description"),
    EntityType.LANDING_ARTIST: (
        "intro",
        "description",
        "artworkStyle",
        "quoteFromInRealArt",
        "biographyHeader1",
        "biographyText1",
        "biographyHeader2",
        "biographyText2",
        "biographyHeader3",
        "biographyText3",
        "biographyHeader4",
        "biographyText4",
        "mediumTags",
    ),
    EntityType.SEO_CATEGORY: ("name", "shortDescription", "longDescription", "textCTA"),
    EntityType.ARTWORK_MEDIUM: ("name",),
    EntityType.ARTWORK_STYLE: ("name",),
    EntityType.ARTWORK_TECHNIQUE: ("image",),
    EntityType.ARTIST_CATEGORY: ("name", "description"),
    EntityType.STICKY_FOOTER: ("title", "text", "textButton"),
}


def translatable_fields(entity_type: "str | EntityType") -> Tuple[str, ...]:
    return TRANSLATABLE_FIELDS[EntityType.parse(entity_type)]


def validate_fields(entity_type: "str | EntityType", fields: Iterable[str]) -> EntityType:
    kind = EntityType.parse(entity_type)
    allowed = TRANSLATABLE_FIELDS[kind]
    unknown = sorted({name for name in fields if name not in allowed})
    if unknown:
        raise ValidationFailure(
            f"{kind.value} has no translatable field(s): {', '.join(unknown)}"
        )
    return kind


def translatable_schema() -> List[dict]:
    return [
        {"name": kind.value, "fields": list(fields)}
        for kind, fields in TRANSLATABLE_FIELDS.items()
    ]
