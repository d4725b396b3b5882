import pytest
from sqlalchemy.exc import IntegrityError

from backoffice.errors import ErrorKind
from backoffice.infrastructure.database.db import DB


def _default_codes(actions) -> list[str]:
    return [language.code for language in actions.list_languages().languages if language.is_default]


def test_switching_default_language_moves_the_flag(actions) -> None:
    english = actions.create_language({"name": "English", "code": "en", "is_default": False})
    french = actions.create_language({"name": "Français", "code": "fr", "is_default": True})
    assert english.success and french.success

    result = actions.update_language(
        english.language.id, {"name": "English", "code": "en", "is_default": True}
    )

    assert result.success
    by_code = {language.code: language for language in actions.list_languages().languages}
    assert by_code["en"].is_default is True
    assert by_code["fr"].is_default is False


def test_at_most_one_default_after_every_write(actions) -> None:
    steps = [
        ("English", "en", True),
        ("Français", "fr", True),
        ("Deutsch", "de", False),
        ("Español", "es", True),
    ]
    for name, code, is_default in steps:
        assert actions.create_language({"name": name, "code": code, "is_default": is_default}).success
        assert len(_default_codes(actions)) <= 1
    assert _default_codes(actions) == ["es"]

    german = actions.list_languages().languages[0]
    assert german.code == "de"
    actions.update_language(german.id, {"name": "Deutsch", "code": "de", "is_default": True})
    assert _default_codes(actions) == ["de"]


def test_languages_are_listed_by_name(actions, languages) -> None:
    names = [language.name for language in actions.list_languages().languages]
    assert names == ["Deutsch", "English", "Français"]


def test_code_is_trimmed_and_lowercased(actions) -> None:
    result = actions.create_language({"name": " Italiano ", "code": " IT ", "is_default": False})
    assert result.success
    assert result.language.code == "it"
    assert result.language.name == "Italiano"


def test_invalid_code_length_is_a_validation_failure(actions) -> None:
    result = actions.create_language({"name": "English", "code": "english"})
    assert result.success is False
    assert result.error == ErrorKind.VALIDATION
    assert "code" in result.message


def test_duplicate_code_and_name_are_reported_per_field(actions, languages) -> None:
    same_code = actions.create_language({"name": "Anglais", "code": "EN"})
    assert same_code.success is False
    assert same_code.error == ErrorKind.UNIQUENESS_CONFLICT
    assert same_code.message.startswith("Code is already in use")

    same_name = actions.create_language({"name": "English", "code": "eng"})
    assert same_name.error == ErrorKind.UNIQUENESS_CONFLICT
    assert same_name.message.startswith("Name is already in use")


def test_update_may_keep_its_own_code(actions, languages) -> None:
    english = languages["en"]
    result = actions.update_language(english.id, {"name": "English (UK)", "code": "en"})
    assert result.success
    assert result.language.name == "English (UK)"

    clash = actions.update_language(english.id, {"name": "English", "code": "fr"})
    assert clash.error == ErrorKind.UNIQUENESS_CONFLICT


def test_update_unknown_language_is_not_found(actions) -> None:
    result = actions.update_language(404, {"name": "English", "code": "en"})
    assert result.success is False
    assert result.error == ErrorKind.NOT_FOUND


def test_delete_blocked_while_translations_reference_language(actions, languages) -> None:
    english = languages["en"]
    for field in ("question", "answer"):
        assert actions.upsert_translation(
            {
                "entity_type": "Faq",
                "entity_id": 1,
                "field": field,
                "language_id": english.id,
                "value": "text",
            }
        ).success

    result = actions.delete_language(english.id)

    assert result.success is False
    assert result.error == ErrorKind.REFERENTIAL_CONFLICT
    assert "2 translation(s)" in result.message
    assert actions.get_language(english.id).success


def test_default_language_cannot_be_deleted(actions, languages) -> None:
    french = languages["fr"]
    result = actions.delete_language(french.id)
    assert result.success is False
    assert result.error == ErrorKind.INVARIANT_VIOLATION
    assert actions.get_language(french.id).language.is_default is True


def test_delete_unreferenced_language(actions, languages) -> None:
    assert actions.delete_language(languages["de"].id).success
    assert actions.get_language(languages["de"].id).error == ErrorKind.NOT_FOUND
    assert actions.delete_language(languages["de"].id).error == ErrorKind.NOT_FOUND


def test_set_default_language(actions, languages) -> None:
    result = actions.set_default_language(languages["de"].id)
    assert result.success
    assert _default_codes(actions) == ["de"]
    assert actions.get_default_language().language.code == "de"


def test_get_default_language_when_none(actions) -> None:
    actions.create_language({"name": "English", "code": "en"})
    result = actions.get_default_language()
    assert result.success is False
    assert result.error == ErrorKind.NOT_FOUND


def test_database_rejects_a_second_default(session_scope) -> None:
    with pytest.raises(IntegrityError):
        with session_scope() as session:
            db = DB(session)
            db.languages.create(name="English", code="en", is_default=True)
            db.languages.create(name="Français", code="fr", is_default=True)
