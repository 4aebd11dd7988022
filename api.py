# api.py
"""
HTTP surface for the Tennis Club App.

Thin FastAPI layer over the services. Every route authenticates the caller
with their Supabase access token (Authorization: Bearer <token>) and maps the
application's exceptions to status codes:

    401 AuthenticationError          404 MatchNotFoundError
    403 NotAParticipantError         409 AlreadyFinalizedConflictError
    400 ValidationError / bad body   500 DatabaseError

Run with:
    uvicorn api:app
"""

import logging
from dataclasses import asdict
from uuid import UUID

from fastapi import Depends, FastAPI, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

import database
from achievement_service import AchievementService
from app_types import MatchStore, PlayerId
from exceptions import (
    AlreadyFinalizedConflictError,
    AuthenticationError,
    DatabaseError,
    MatchNotFoundError,
    NotAParticipantError,
    TennisClubError,
    ValidationError,
)
from logger import level_from_env, setup_logging
from match_service import WinnerConfirmationService, create_confirmation_service
from streak_service import update_streak
from xp_service import XpService

setup_logging(level_from_env())
logger = logging.getLogger("app.api")

app = FastAPI(title="Tennis Club API")

# Checked in order; the first matching class decides the status code
ERROR_STATUS_CODES: list[tuple[type[TennisClubError], int]] = [
    (AuthenticationError, 401),
    (NotAParticipantError, 403),
    (ValidationError, 400),
    (MatchNotFoundError, 404),
    (AlreadyFinalizedConflictError, 409),
    (DatabaseError, 500),
]


class SelectWinnerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    match_id: UUID = Field(alias="matchId")
    selected_winner_id: UUID = Field(alias="selectedWinnerId")


# --- Dependencies ---


def get_store() -> MatchStore:
    return database.get_store()


def get_current_user(
    authorization: str | None = Header(default=None),
    store: MatchStore = Depends(get_store),
) -> PlayerId:
    """Resolves the bearer token to the signed-in player's id."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Unauthorized")

    user_id = store.authenticate(token)
    if user_id is None:
        raise AuthenticationError("Unauthorized")
    return user_id


def get_confirmation_service(
    store: MatchStore = Depends(get_store),
) -> WinnerConfirmationService:
    return create_confirmation_service(store)


def get_xp_service(store: MatchStore = Depends(get_store)) -> XpService:
    return XpService(store, store)


def get_achievement_service(
    store: MatchStore = Depends(get_store),
    xp_service: XpService = Depends(get_xp_service),
) -> AchievementService:
    return AchievementService(store, store, xp_service)


# --- Error handling ---


@app.exception_handler(TennisClubError)
async def handle_app_error(request: Request, exc: TennisClubError) -> JSONResponse:
    status_code = next(
        (code for cls, code in ERROR_STATUS_CODES if isinstance(exc, cls)), 500
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status_code}): {exc}")
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def handle_invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid input", "details": jsonable_encoder(exc.errors())},
    )


# --- Routes ---


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/matches/{match_id}/select-winner")
def select_winner(
    match_id: UUID,
    body: SelectWinnerRequest,
    user_id: PlayerId = Depends(get_current_user),
    service: WinnerConfirmationService = Depends(get_confirmation_service),
) -> dict:
    if body.match_id != match_id:
        raise ValidationError("matchId in the body does not match the URL")

    result = service.submit_selection(
        str(match_id), user_id, str(body.selected_winner_id)
    )
    return result.to_dict()


@app.get("/players/me/progress")
def my_progress(
    user_id: PlayerId = Depends(get_current_user),
    xp_service: XpService = Depends(get_xp_service),
) -> dict:
    return asdict(xp_service.get_level_progress(user_id))


@app.post("/achievements/retroactive")
def retroactive_achievements(
    user_id: PlayerId = Depends(get_current_user),
    achievements: AchievementService = Depends(get_achievement_service),
) -> dict:
    awarded = achievements.retroactive_check(user_id)
    return {
        "status": "success",
        "message": "Achievements retroactively checked and awarded",
        "awarded": [a.type for a in awarded],
    }


@app.post("/streak")
def daily_streak(
    user_id: PlayerId = Depends(get_current_user),
    store: MatchStore = Depends(get_store),
) -> dict:
    update = update_streak(store, store, user_id)
    return {"success": True, "data": asdict(update)}
