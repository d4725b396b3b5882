from contextlib import contextmanager

import pytest
from sqlalchemy.exc import OperationalError

from backoffice.actions import ServerActions
from backoffice.errors import ErrorKind, PersistenceFailure
from backoffice.schemas import OutcomeStatus
from backoffice.services.i18n.orchestrator import (
    NO_DEFAULT_LANGUAGE_MESSAGE,
    handle_entity_translations,
)


def _values(actions, entity_type, entity_id):
    rows = actions.get_translations_for_entity(entity_type, entity_id).translations
    return {(row.field, row.language_id): row.value for row in rows}


def test_one_failing_language_does_not_block_the_others(actions, languages, translator) -> None:
    spanish = actions.create_language({"name": "Español", "code": "es"}).language
    translator.fail_for = {"de"}

    result = actions.handle_entity_translations("Faq", 7, {"question": "Q?", "answer": "A."})

    assert result.success
    values = _values(actions, "Faq", 7)
    fr, en, de = languages["fr"].id, languages["en"].id, languages["de"].id
    assert values[("question", fr)] == "Q?"
    assert values[("answer", fr)] == "A."
    assert values[("question", en)] == "Q? [en]"
    assert values[("answer", spanish.id)] == "A. [es]"
    assert ("question", de) not in values
    assert ("answer", de) not in values

    failed = [o for o in result.report.outcomes if o.status == OutcomeStatus.FAILED]
    assert {(o.language_code, o.field) for o in failed} == {("de", "question"), ("de", "answer")}
    assert all("unavailable" in o.error for o in failed)
    assert result.report.default_language == "fr"


def test_without_default_language_nothing_is_written(actions, translator) -> None:
    actions.create_language({"name": "English", "code": "en"})

    result = actions.handle_entity_translations("Faq", 1, {"question": "Q?"})

    assert result.success is False
    assert result.error is None
    assert result.message == NO_DEFAULT_LANGUAGE_MESSAGE
    assert result.report.outcomes == []
    assert translator.calls == []
    assert actions.get_translations_for_entity("Faq", 1).translations == []


def test_overwrite_false_keeps_existing_rows(actions, languages, translator) -> None:
    english = languages["en"].id
    actions.upsert_translation(
        {
            "entity_type": "Faq",
            "entity_id": 3,
            "field": "question",
            "language_id": english,
            "value": "Reviewed by hand",
        }
    )

    result = actions.handle_entity_translations(
        "Faq", 3, {"question": "Q?", "answer": "A."}, overwrite=False
    )

    assert result.success
    assert _values(actions, "Faq", 3)[("question", english)] == "Reviewed by hand"
    assert ("Q?", "fr", "en") not in translator.calls
    assert ("A.", "fr", "en") in translator.calls
    skipped = [o for o in result.report.outcomes if o.status == OutcomeStatus.SKIPPED]
    assert [(o.language_code, o.field) for o in skipped] == [("en", "question")]


def test_blank_values_are_copied_without_a_call(actions, languages, translator) -> None:
    actions.handle_entity_translations("Faq", 4, {"question": "Q?", "answer": ""})

    assert _values(actions, "Faq", 4)[("answer", languages["de"].id)] == ""
    assert all(call[0] == "Q?" for call in translator.calls)


def test_without_translator_other_languages_are_skipped(session_factory, languages) -> None:
    actions = ServerActions(session_factory, None)

    result = actions.handle_entity_translations("ArtworkStyle", 1, {"name": "Cubisme"})

    assert result.success
    statuses = {(o.language_code, o.status) for o in result.report.outcomes}
    assert statuses == {
        ("fr", OutcomeStatus.PERSISTED),
        ("en", OutcomeStatus.SKIPPED),
        ("de", OutcomeStatus.SKIPPED),
    }
    assert len(actions.get_translations_for_entity("ArtworkStyle", 1).translations) == 1


def test_unknown_field_is_rejected_before_any_work(actions, languages, translator) -> None:
    result = actions.handle_entity_translations("Faq", 1, {"title": "x"})
    assert result.error == ErrorKind.VALIDATION
    assert translator.calls == []


def test_store_failure_propagates_as_persistence_failure(session_scope, languages, translator) -> None:
    calls = {"count": 0}

    @contextmanager
    def flaky_scope():
        calls["count"] += 1
        if calls["count"] > 1:
            raise OperationalError("INSERT", {}, Exception("database is gone"))
        with session_scope() as session:
            yield session

    with pytest.raises(PersistenceFailure):
        handle_entity_translations(flaky_scope, translator, "Faq", 1, {"question": "Q?"})


def test_completeness_lists_missing_fields_per_language(actions, languages, translator) -> None:
    translator.fail_for = {"de"}
    actions.handle_entity_translations("Faq", 5, {"question": "Q?", "answer": "A."})

    result = actions.translation_completeness("faq", 5)

    assert result.success
    assert result.entity_type == "Faq"
    assert result.complete is False
    missing = {item.language_code: item.missing_fields for item in result.languages}
    assert missing == {"de": ["question", "answer"], "en": [], "fr": []}


def test_repair_fills_only_missing_pairs(actions, languages, translator) -> None:
    translator.fail_for = {"de"}
    created = actions.create_entity("Faq", {"question": "Q?", "answer": "A."})
    faq_id = created.entity["id"]
    english = languages["en"].id
    actions.upsert_translation(
        {
            "entity_type": "Faq",
            "entity_id": faq_id,
            "field": "answer",
            "language_id": english,
            "value": "Edited answer",
        }
    )
    translator.fail_for = set()
    translator.calls.clear()

    result = actions.repair_translations("Faq")

    assert result.success
    assert result.examined == 1
    assert result.persisted == 2
    assert result.failed == 0
    assert {call[2] for call in translator.calls} == {"de"}
    assert _values(actions, "Faq", faq_id)[("answer", english)] == "Edited answer"
    assert actions.translation_completeness("Faq", faq_id).complete is True
