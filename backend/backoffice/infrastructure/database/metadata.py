from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    false,
    func,
    text,
)

metadata = MetaData()

languages_table = Table(
    "languages",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(100), nullable=False, unique=True),
    Column("code", String(5), nullable=False, unique=True),
    Column("is_default", Boolean, nullable=False, default=False, server_default=false()),
    # at most one default language
    Index(
        "uq_languages_default_true",
        "is_default",
        unique=True,
        postgresql_where=text("is_default = true"),
        sqlite_where=text("is_default = 1"),
    ),
)
translations_table = Table(
    "translations",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("entity_type", String(64), nullable=False),
    # No FK: the owner table is selected by entity_type.
    Column("entity_id", Integer, nullable=False),
    Column("field", String(64), nullable=False),
    Column("language_id", Integer, ForeignKey("languages.id"), nullable=False),
    Column("value", Text, nullable=False),
    UniqueConstraint(
        "entity_type",
        "entity_id",
        "field",
        "language_id",
        name="uq_translations_entity_field_language",
    ),
    Index("ix_translations_entity", "entity_type", "entity_id"),
)
artists_table = Table(
    "artists",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)
presale_artworks_table = Table(
    "presale_artworks",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("artist_id", Integer, ForeignKey("artists.id", ondelete="CASCADE"), nullable=False),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("image_url", Text),
    # Legacy manual ordering, used to seed display_order on reset.
    Column("order", Integer),
    Column("display_order", Integer),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Index("ix_presale_artworks_artist", "artist_id"),
)
faqs_table = Table(
    "faqs",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("question", Text, nullable=False),
    Column("answer", Text, nullable=False),
)
artwork_styles_table = Table(
    "artwork_styles",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False, unique=True),
)
artist_categories_table = Table(
    "artist_categories",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("description", Text),
)
