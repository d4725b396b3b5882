from sqlalchemy import event

from backoffice.errors import ErrorKind
from backoffice.infrastructure.database.db import DB


def _row(entity_type="Faq", entity_id=1, field="question", language_id=1, value="Bonjour"):
    return {
        "entity_type": entity_type,
        "entity_id": entity_id,
        "field": field,
        "language_id": language_id,
        "value": value,
    }


def test_upsert_twice_keeps_one_row(actions, languages) -> None:
    french = languages["fr"]
    for _ in range(2):
        assert actions.upsert_translation(_row(language_id=french.id)).success

    rows = actions.get_translations_for_entity("Faq", 1).translations
    assert [(row.field, row.language_id, row.value) for row in rows] == [
        ("question", french.id, "Bonjour")
    ]


def test_upsert_overwrites_value(actions, languages) -> None:
    french = languages["fr"]
    first = actions.upsert_translation(_row(language_id=french.id, value="v1")).translation
    second = actions.upsert_translation(_row(language_id=french.id, value="v2")).translation

    assert first.id == second.id
    rows = actions.get_translations_for_entity("Faq", 1).translations
    assert len(rows) == 1
    assert rows[0].value == "v2"


def test_entity_type_is_stored_canonically(actions, languages) -> None:
    result = actions.upsert_translation(
        _row(entity_type="artworkstyle", field="name", language_id=languages["fr"].id)
    )
    assert result.translation.entity_type == "ArtworkStyle"
    assert actions.get_translations_for_entity("ARTWORKSTYLE", 1).translations


def test_upsert_rejects_unknown_language_entity_and_field(actions, languages) -> None:
    assert actions.upsert_translation(_row(language_id=999)).error == ErrorKind.NOT_FOUND
    assert (
        actions.upsert_translation(_row(entity_type="Painting", language_id=languages["fr"].id)).error
        == ErrorKind.UNSUPPORTED_ENTITY
    )
    bad_field = actions.upsert_translation(_row(field="title", language_id=languages["fr"].id))
    assert bad_field.error == ErrorKind.VALIDATION
    assert "title" in bad_field.message


def test_rows_for_entity_are_ordered_by_field_then_language(actions, languages) -> None:
    for code in ("en", "fr"):
        for field in ("question", "answer"):
            actions.upsert_translation(_row(field=field, language_id=languages[code].id))

    rows = actions.get_translations_for_entity("Faq", 1).translations
    assert [(row.field, row.language_id) for row in rows] == sorted(
        (row.field, row.language_id) for row in rows
    )
    assert rows[0].field == "answer"


def test_delete_translations_for_entity_only_touches_that_entity(actions, languages) -> None:
    french = languages["fr"]
    actions.upsert_translation(_row(entity_id=1, language_id=french.id))
    actions.upsert_translation(_row(entity_id=1, field="answer", language_id=french.id))
    actions.upsert_translation(_row(entity_id=2, language_id=french.id))

    result = actions.delete_translations_for_entity("Faq", 1)

    assert result.deleted == 2
    assert actions.get_translations_for_entity("Faq", 1).translations == []
    assert len(actions.get_translations_for_entity("Faq", 2).translations) == 1


def test_create_translation_conflicts_on_existing_tuple(actions, languages) -> None:
    row = _row(language_id=languages["fr"].id)
    assert actions.create_translation(row).success

    duplicate = actions.create_translation(row)

    assert duplicate.success is False
    assert duplicate.error == ErrorKind.UNIQUENESS_CONFLICT


def test_update_translation_checks_other_rows(actions, languages) -> None:
    french = languages["fr"].id
    question = actions.create_translation(_row(field="question", language_id=french)).translation
    answer = actions.create_translation(_row(field="answer", language_id=french)).translation

    clash = actions.update_translation(answer.id, _row(field="question", language_id=french))
    assert clash.error == ErrorKind.UNIQUENESS_CONFLICT

    same = actions.update_translation(question.id, _row(language_id=french, value="Salut"))
    assert same.success
    assert same.translation.value == "Salut"

    missing = actions.update_translation(999, _row(language_id=french))
    assert missing.error == ErrorKind.NOT_FOUND


def test_delete_translation_by_id(actions, languages) -> None:
    row = actions.create_translation(_row(language_id=languages["fr"].id)).translation
    assert actions.delete_translation(row.id).success
    assert actions.delete_translation(row.id).error == ErrorKind.NOT_FOUND


def test_list_translations_filters(actions, languages) -> None:
    actions.upsert_translation(_row(language_id=languages["fr"].id))
    actions.upsert_translation(_row(language_id=languages["en"].id, value="Hello"))
    actions.upsert_translation(
        _row(entity_type="ArtworkStyle", field="name", language_id=languages["en"].id)
    )

    english = actions.list_translations(language_id=languages["en"].id).translations
    assert {row.entity_type for row in english} == {"Faq", "ArtworkStyle"}

    faq_english = actions.list_translations(
        entity_type="faq", language_id=languages["en"].id
    ).translations
    assert [row.value for row in faq_english] == ["Hello"]

    assert len(actions.list_translations().translations) == 3
    assert actions.list_translations(entity_type="Nope").error == ErrorKind.UNSUPPORTED_ENTITY


def test_upsert_is_a_single_conflict_aware_statement(engine, session_scope, languages) -> None:
    french = languages["fr"]
    with session_scope() as session:
        DB(session).translations.insert(**_row(language_id=french.id, value="v1"))

    statements = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", _record)
    try:
        with session_scope() as session:
            row = DB(session).translations.upsert(**_row(language_id=french.id, value="v2"))
    finally:
        event.remove(engine, "before_cursor_execute", _record)

    assert row.value == "v2"
    data_statements = [
        sql for sql in statements if sql.lstrip().upper().startswith(("INSERT", "SELECT", "UPDATE"))
    ]
    assert len(data_statements) == 1
    assert "ON CONFLICT" in data_statements[0].upper()
