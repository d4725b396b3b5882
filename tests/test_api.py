import pytest
from fastapi.testclient import TestClient
from jose import jwt

from backoffice.config import settings
from backoffice import main
from backoffice.main import app, get_actions


def _token(*roles: str, sub: str = "alice") -> str:
    return jwt.encode(
        {"sub": sub, "roles": list(roles)},
        key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


@pytest.fixture()
def client(actions):
    app.dependency_overrides[get_actions] = lambda: actions
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {_token('admin')}"}


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_admin_routes_require_a_valid_admin_token(client) -> None:
    assert client.get("/admin/languages").status_code == 401
    assert (
        client.get("/admin/languages", headers={"Authorization": "Bearer nope"}).status_code
        == 401
    )
    forbidden = client.get(
        "/admin/languages", headers={"Authorization": f"Bearer {_token('viewer')}"}
    )
    assert forbidden.status_code == 403


def test_is_admin(client) -> None:
    response = client.get(
        "/auth/is-admin", headers={"Authorization": f"Bearer {_token('viewer', sub='bob')}"}
    )
    assert response.json() == {"username": "bob", "is_admin": False}


def test_language_routes_map_errors_to_status_codes(client, admin_headers) -> None:
    created = client.post(
        "/admin/languages",
        json={"name": "Français", "code": "FR", "is_default": True},
        headers=admin_headers,
    )
    assert created.status_code == 201
    french = created.json()["language"]
    assert french["code"] == "fr"

    duplicate = client.post(
        "/admin/languages", json={"name": "French", "code": "fr"}, headers=admin_headers
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"].startswith("Code is already in use")

    delete_default = client.delete(f"/admin/languages/{french['id']}", headers=admin_headers)
    assert delete_default.status_code == 409

    assert client.get("/admin/languages/999", headers=admin_headers).status_code == 404
    assert client.get("/admin/languages/default", headers=admin_headers).json()["language"][
        "code"
    ] == "fr"
    invalid = client.post(
        "/admin/languages", json={"name": "X", "code": "x"}, headers=admin_headers
    )
    assert invalid.status_code == 422


def test_content_lifecycle_keeps_translations_in_step(client, admin_headers, languages) -> None:
    created = client.post(
        "/admin/content/faq",
        json={"question": "Qui ?", "answer": "Nous."},
        headers=admin_headers,
    )
    assert created.status_code == 201
    body = created.json()
    faq_id = body["entity"]["id"]
    assert body["translations"]["default_language"] == "fr"

    rows = client.get(f"/admin/translations/entities/Faq/{faq_id}", headers=admin_headers)
    assert len(rows.json()["translations"]) == 6

    completeness = client.get(
        f"/admin/translations/entities/Faq/{faq_id}/completeness", headers=admin_headers
    )
    assert completeness.json()["complete"] is True

    deleted = client.delete(f"/admin/content/Faq/{faq_id}", headers=admin_headers)
    assert deleted.json()["deleted"] == 6
    rows = client.get(f"/admin/translations/entities/Faq/{faq_id}", headers=admin_headers)
    assert rows.json()["translations"] == []


def test_translation_routes(client, admin_headers, languages) -> None:
    row = {
        "entity_type": "ArtworkStyle",
        "entity_id": 1,
        "field": "name",
        "language_id": languages["en"].id,
        "value": "Cubism",
    }
    created = client.post("/admin/translations", json=row, headers=admin_headers)
    assert created.status_code == 201
    translation_id = created.json()["translation"]["id"]
    assert client.post("/admin/translations", json=row, headers=admin_headers).status_code == 409

    upserted = client.put(
        "/admin/translations/upsert", json={**row, "value": "Cubism!"}, headers=admin_headers
    )
    assert upserted.json()["translation"]["id"] == translation_id

    listed = client.get(
        "/admin/translations", params={"language_id": languages["en"].id}, headers=admin_headers
    )
    assert [item["value"] for item in listed.json()["translations"]] == ["Cubism!"]

    bad_entity = client.put(
        f"/admin/translations/{translation_id}",
        json={**row, "entity_type": "Nope"},
        headers=admin_headers,
    )
    assert bad_entity.status_code == 400

    assert client.delete(f"/admin/translations/{translation_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/admin/translations/{translation_id}", headers=admin_headers).status_code == 404


def test_fan_out_route_returns_report(client, admin_headers, languages, translator) -> None:
    translator.fail_for = {"de"}
    response = client.post(
        "/admin/translations/entities/ArtworkStyle/5",
        json={"fields": {"name": "Cubisme"}},
        headers=admin_headers,
    )
    assert response.status_code == 200
    outcomes = {o["language_code"]: o["status"] for o in response.json()["report"]["outcomes"]}
    assert outcomes == {"fr": "persisted", "en": "persisted", "de": "failed"}


def test_repair_route(client, admin_headers, languages) -> None:
    client.post("/admin/content/ArtworkStyle", json={"name": "Cubisme"}, headers=admin_headers)
    response = client.post(
        "/admin/translations/repair", json={"entity_type": "ArtworkStyle"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["examined"] == 1
    assert response.json()["persisted"] == 0


def test_display_order_routes(client, admin_headers) -> None:
    artist = client.post("/admin/artists", json={"name": "Ada"}, headers=admin_headers).json()["artist"]
    ids = [
        client.post(
            "/admin/content/PresaleArtwork",
            json={"artist_id": artist["id"], "name": name},
            headers=admin_headers,
        ).json()["entity"]["id"]
        for name in ("Dawn", "Dusk")
    ]

    max_order = client.get(
        f"/admin/artists/{artist['id']}/display-order/max", headers=admin_headers
    )
    assert max_order.json()["max_display_order"] == 2

    missing = client.put(
        "/admin/display-order/PresaleArtwork",
        json=[{"id": ids[0], "display_order": 2}, {"id": 999, "display_order": 1}],
        headers=admin_headers,
    )
    assert missing.status_code == 404

    unsupported = client.put("/admin/display-order/Faq", json=[], headers=admin_headers)
    assert unsupported.status_code == 400

    reset = client.post(
        f"/admin/artists/{artist['id']}/display-order/reset", headers=admin_headers
    )
    assert reset.json()["updated"] == 2


def test_entities_schema(client, admin_headers) -> None:
    schema = client.get("/admin/entities/schema", headers=admin_headers).json()
    assert {"name": "Faq", "fields": ["question", "answer"]} in schema


def test_shutdown_closes_the_translator(monkeypatch, translator) -> None:
    monkeypatch.setattr(main, "_translator", translator)

    main.on_shutdown()

    assert translator.closed
    assert main._translator is None
