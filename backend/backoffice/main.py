import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from backoffice.actions import ServerActions
from backoffice.config import settings
from backoffice.database import SessionLocal, engine, session_scope_for
from backoffice.entities import translatable_schema
from backoffice.errors import ErrorKind
from backoffice.schemas import (
    ActionResult,
    ArtistIn,
    ArtistListResult,
    ArtistResult,
    CompletenessResult,
    DeleteResult,
    DisplayOrderResult,
    DisplayOrderUpdate,
    EntityListResult,
    EntityResult,
    EntityTranslationsIn,
    LanguageIn,
    LanguageListResult,
    LanguageResult,
    MaxDisplayOrderResult,
    RepairRequest,
    RepairResult,
    ReportResult,
    TranslationIn,
    TranslationListResult,
    TranslationResult,
)
from backoffice.services.i18n.bootstrap import bootstrap_database
from backoffice.services.i18n.translators import Translator, build_translator

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format=settings.log_format,
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Art backoffice content API")

_translator: Translator | None = None

ERROR_STATUS = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.REFERENTIAL_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INVARIANT_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorKind.UNIQUENESS_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNSUPPORTED_ENTITY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.EXTERNAL_SERVICE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.PERSISTENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@app.on_event("startup")
def on_startup() -> None:
    if settings.jwt_secret_key == "change-me":
        logger.warning("BACKEND_JWT_SECRET_KEY is not set; using the insecure default.")
    if settings.bootstrap_on_startup:
        bootstrap_database(
            engine,
            session_scope_for(SessionLocal),
            settings.default_languages,
            settings.default_language,
        )

    global _translator
    _translator = build_translator(settings)
    logger.info(
        "Machine translation: %s",
        type(_translator).__name__ if _translator is not None else "disabled",
    )


@app.on_event("shutdown")
def on_shutdown() -> None:
    global _translator
    if _translator is not None:
        _translator.close()
        _translator = None


cors_origins = list(settings.cors_origins or [])
allow_all_origins = "*" in cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all_origins else cors_origins,
    allow_credentials=not allow_all_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
security_scheme = HTTPBearer(auto_error=False)


def get_actions() -> ServerActions:
    return ServerActions(SessionLocal, _translator)


def decode_admin_token(token: str) -> dict:
    try:
        payload = jwt.decode(
            token,
            key=settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        ) from None
    if "sub" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )
    return payload


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(security_scheme),
) -> dict:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials were not provided",
        )
    payload = decode_admin_token(credentials.credentials)
    roles = payload.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return {"username": payload["sub"], "roles": list(roles)}


async def require_admin(admin: dict = Depends(get_current_admin)) -> dict:
    if not set(admin["roles"]).intersection(settings.admin_roles):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions.",
        )
    return admin


def _unwrap(result: ActionResult) -> Any:
    if result.success or result.error is None:
        return result
    raise HTTPException(
        status_code=ERROR_STATUS.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=result.message,
    )


admin_only = [Depends(require_admin)]


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/auth/is-admin")
async def is_admin(admin: dict = Depends(get_current_admin)) -> Dict[str, Any]:
    return {
        "username": admin["username"],
        "is_admin": bool(set(admin["roles"]).intersection(settings.admin_roles)),
    }


# Languages


@app.get("/admin/languages", response_model=LanguageListResult, dependencies=admin_only)
def list_languages(actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.list_languages())


@app.get("/admin/languages/default", response_model=LanguageResult, dependencies=admin_only)
def get_default_language(actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.get_default_language())


@app.get("/admin/languages/{language_id}", response_model=LanguageResult, dependencies=admin_only)
def get_language(language_id: int, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.get_language(language_id))


@app.post(
    "/admin/languages",
    response_model=LanguageResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
def create_language(payload: LanguageIn, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.create_language(payload))


@app.put("/admin/languages/{language_id}", response_model=LanguageResult, dependencies=admin_only)
def update_language(
    language_id: int, payload: LanguageIn, actions: ServerActions = Depends(get_actions)
):
    return _unwrap(actions.update_language(language_id, payload))


@app.post(
    "/admin/languages/{language_id}/default",
    response_model=LanguageResult,
    dependencies=admin_only,
)
def set_default_language(language_id: int, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.set_default_language(language_id))


@app.delete("/admin/languages/{language_id}", response_model=ActionResult, dependencies=admin_only)
def delete_language(language_id: int, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.delete_language(language_id))


# Translations


@app.get("/admin/translations", response_model=TranslationListResult, dependencies=admin_only)
def list_translations(
    entity_type: Optional[str] = Query(None),
    entity_id: Optional[int] = Query(None),
    language_id: Optional[int] = Query(None),
    actions: ServerActions = Depends(get_actions),
):
    return _unwrap(
        actions.list_translations(
            entity_type=entity_type, entity_id=entity_id, language_id=language_id
        )
    )


@app.post(
    "/admin/translations",
    response_model=TranslationResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
def create_translation(payload: TranslationIn, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.create_translation(payload))


@app.put("/admin/translations/upsert", response_model=TranslationResult, dependencies=admin_only)
def upsert_translation(payload: TranslationIn, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.upsert_translation(payload))


@app.post("/admin/translations/repair", response_model=RepairResult, dependencies=admin_only)
def repair_translations(
    payload: Optional[RepairRequest] = None, actions: ServerActions = Depends(get_actions)
):
    entity_type = payload.entity_type if payload is not None else None
    return _unwrap(actions.repair_translations(entity_type))


@app.get(
    "/admin/translations/entities/{entity_type}/{entity_id}",
    response_model=TranslationListResult,
    dependencies=admin_only,
)
def get_translations_for_entity(
    entity_type: str, entity_id: int, actions: ServerActions = Depends(get_actions)
):
    return _unwrap(actions.get_translations_for_entity(entity_type, entity_id))


@app.post(
    "/admin/translations/entities/{entity_type}/{entity_id}",
    response_model=ReportResult,
    dependencies=admin_only,
)
def handle_entity_translations(
    entity_type: str,
    entity_id: int,
    payload: EntityTranslationsIn,
    actions: ServerActions = Depends(get_actions),
):
    return _unwrap(
        actions.handle_entity_translations(
            entity_type, entity_id, payload.fields, overwrite=payload.overwrite
        )
    )


@app.delete(
    "/admin/translations/entities/{entity_type}/{entity_id}",
    response_model=DeleteResult,
    dependencies=admin_only,
)
def delete_translations_for_entity(
    entity_type: str, entity_id: int, actions: ServerActions = Depends(get_actions)
):
    return _unwrap(actions.delete_translations_for_entity(entity_type, entity_id))


@app.get(
    "/admin/translations/entities/{entity_type}/{entity_id}/completeness",
    response_model=CompletenessResult,
    dependencies=admin_only,
)
def translation_completeness(
    entity_type: str, entity_id: int, actions: ServerActions = Depends(get_actions)
):
    return _unwrap(actions.translation_completeness(entity_type, entity_id))


@app.get(
    "/admin/translations/{translation_id}",
    response_model=TranslationResult,
    dependencies=admin_only,
)
def get_translation(translation_id: int, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.get_translation(translation_id))


@app.put(
    "/admin/translations/{translation_id}",
    response_model=TranslationResult,
    dependencies=admin_only,
)
def update_translation(
    translation_id: int, payload: TranslationIn, actions: ServerActions = Depends(get_actions)
):
    return _unwrap(actions.update_translation(translation_id, payload))


@app.delete(
    "/admin/translations/{translation_id}",
    response_model=ActionResult,
    dependencies=admin_only,
)
def delete_translation(translation_id: int, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.delete_translation(translation_id))


@app.get("/admin/entities/schema", dependencies=admin_only)
def entities_schema() -> List[dict]:
    return translatable_schema()


# Content entities


@app.get("/admin/content/{entity_type}", response_model=EntityListResult, dependencies=admin_only)
def list_entities(entity_type: str, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.list_entities(entity_type))


@app.get(
    "/admin/content/{entity_type}/{entity_id}",
    response_model=EntityResult,
    dependencies=admin_only,
)
def get_entity(entity_type: str, entity_id: int, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.get_entity(entity_type, entity_id))


@app.post(
    "/admin/content/{entity_type}",
    response_model=EntityResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
def create_entity(
    entity_type: str,
    payload: Dict[str, Any],
    actions: ServerActions = Depends(get_actions),
):
    return _unwrap(actions.create_entity(entity_type, payload))


@app.put(
    "/admin/content/{entity_type}/{entity_id}",
    response_model=EntityResult,
    dependencies=admin_only,
)
def update_entity(
    entity_type: str,
    entity_id: int,
    payload: Dict[str, Any],
    actions: ServerActions = Depends(get_actions),
):
    return _unwrap(actions.update_entity(entity_type, entity_id, payload))


@app.delete(
    "/admin/content/{entity_type}/{entity_id}",
    response_model=DeleteResult,
    dependencies=admin_only,
)
def delete_entity(entity_type: str, entity_id: int, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.delete_entity(entity_type, entity_id))


# Artists and display order


@app.get("/admin/artists", response_model=ArtistListResult, dependencies=admin_only)
def list_artists(actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.list_artists())


@app.post(
    "/admin/artists",
    response_model=ArtistResult,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
def create_artist(payload: ArtistIn, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.create_artist(payload))


@app.get("/admin/artists/{artist_id}", response_model=ArtistResult, dependencies=admin_only)
def get_artist(artist_id: int, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.get_artist(artist_id))


@app.get(
    "/admin/artists/{artist_id}/display-order/max",
    response_model=MaxDisplayOrderResult,
    dependencies=admin_only,
)
def get_max_display_order(artist_id: int, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.get_max_display_order_by_artist(artist_id))


@app.post(
    "/admin/artists/{artist_id}/display-order/reset",
    response_model=DisplayOrderResult,
    dependencies=admin_only,
)
def reset_display_order(artist_id: int, actions: ServerActions = Depends(get_actions)):
    return _unwrap(actions.reset_display_order_for_artist(artist_id))


@app.put(
    "/admin/display-order/{entity_type}",
    response_model=DisplayOrderResult,
    dependencies=admin_only,
)
def update_display_order(
    entity_type: str,
    updates: List[DisplayOrderUpdate],
    actions: ServerActions = Depends(get_actions),
):
    return _unwrap(actions.update_display_order(entity_type, updates))
