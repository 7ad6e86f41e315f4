from __future__ import annotations

import contextlib
import json
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from draft.logic.actions import parse_action
from draft.logic.catalog import load_catalog
from draft.logic.enums import DraftErrorCode
from draft.logic.exceptions import DraftError, InvalidArgumentError
from draft.logic.identity import generate_session_id
from draft.logic.state import RoomState
from lobby.auth import PLAYER_ID_COOKIE, PLAYER_ID_HEADER, DraftPlayer, PlayerSessionBackend
from lobby.registry.manager import LobbyRegistry
from lobby.registry.types import CreateRoomRequest, RoomStateView
from lobby.server.settings import LobbyServerSettings
from shared.db import Database, SqliteStore
from shared.logging import setup_logging
from shared.storage import InMemoryStore

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request

    from shared.storage import VersionedStore

_ERROR_STATUS: dict[DraftErrorCode, HTTPStatus] = {
    DraftErrorCode.INVALID_ARGUMENT: HTTPStatus.UNPROCESSABLE_ENTITY,
    DraftErrorCode.NOT_FOUND: HTTPStatus.NOT_FOUND,
    DraftErrorCode.NOT_CREATOR: HTTPStatus.FORBIDDEN,
    DraftErrorCode.NOT_YOUR_TURN: HTTPStatus.FORBIDDEN,
    DraftErrorCode.CONFLICT: HTTPStatus.CONFLICT,
}


async def _draft_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Render a DraftError as a JSON error envelope.

    Rule violations not listed in _ERROR_STATUS map to 409: the request is
    well-formed but invalid under the room's current state.
    """
    if not isinstance(exc, DraftError):  # pragma: no cover
        raise exc
    status = _ERROR_STATUS.get(exc.code, HTTPStatus.CONFLICT)
    return JSONResponse(
        {"error": {"code": exc.code.value, "message": exc.message, "retryable": exc.retryable}},
        status_code=status,
    )


def _current_player(request: Request) -> tuple[DraftPlayer, bool]:
    """Return the calling player, issuing a new session id when none was presented."""
    user = request.user
    if isinstance(user, DraftPlayer):
        return user, False
    return DraftPlayer(generate_session_id()), True


def _player_response(
    request: Request,
    content: Any,  # noqa: ANN401
    player: DraftPlayer,
    *,
    issued: bool,
    status_code: int = HTTPStatus.OK,
) -> JSONResponse:
    response = JSONResponse(content, status_code=status_code)
    if issued:
        settings: LobbyServerSettings = request.app.state.settings
        response.set_cookie(
            PLAYER_ID_COOKIE,
            player.session_id,
            max_age=settings.player_cookie_max_age,
            path="/",
            httponly=True,
            samesite="lax",
            secure=settings.player_cookie_secure,
        )
    return response


async def _read_json(request: Request) -> Any:  # noqa: ANN401
    raw_body = await request.body()
    if not raw_body.strip():
        return {}
    try:
        return json.loads(raw_body)
    except ValueError as e:
        raise InvalidArgumentError("Invalid JSON body") from e


def _room_view(state: RoomState) -> dict[str, Any]:
    return RoomStateView.from_state(state).model_dump(mode="json")


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


async def whoami(request: Request) -> JSONResponse:
    player, issued = _current_player(request)
    return _player_response(
        request,
        {"session_id": player.session_id, "participant_id": player.participant_id},
        player,
        issued=issued,
    )


async def list_rooms(request: Request) -> JSONResponse:
    registry: LobbyRegistry = request.app.state.registry
    rooms = registry.list_rooms()
    return JSONResponse({"rooms": [room.model_dump(mode="json") for room in rooms]})


async def create_room(request: Request) -> JSONResponse:
    registry: LobbyRegistry = request.app.state.registry
    player, issued = _current_player(request)

    try:
        req = CreateRoomRequest.model_validate(await _read_json(request))
    except ValidationError as e:
        raise InvalidArgumentError(str(e)) from e

    room_id = registry.create_room(
        req.name,
        req.max_players,
        creator_id=player.participant_id,
        pool_size=req.pool_size,
    )
    state = registry.get_room_state(room_id)
    return _player_response(
        request,
        {"room_id": room_id, "room": _room_view(state)},
        player,
        issued=issued,
        status_code=HTTPStatus.CREATED,
    )


async def get_room(request: Request) -> JSONResponse:
    registry: LobbyRegistry = request.app.state.registry
    state = registry.get_room_state(request.path_params["room_id"])
    return JSONResponse({"room": _room_view(state)})


async def my_picks(request: Request) -> JSONResponse:
    registry: LobbyRegistry = request.app.state.registry
    player, issued = _current_player(request)
    picks = registry.get_picks(request.path_params["room_id"], player.participant_id)
    return _player_response(
        request,
        {"items": [item.model_dump(mode="json") for item in picks]},
        player,
        issued=issued,
    )


async def room_action(request: Request) -> JSONResponse:
    registry: LobbyRegistry = request.app.state.registry
    player, issued = _current_player(request)
    action = parse_action(await _read_json(request))
    state = registry.apply(request.path_params["room_id"], player.participant_id, action)
    return _player_response(request, {"room": _room_view(state)}, player, issued=issued)


def _open_store(settings: LobbyServerSettings) -> tuple[VersionedStore[RoomState], Database | None]:
    if settings.database_path is None:
        return InMemoryStore(), None
    db = Database(settings.database_path)
    db.connect()
    return SqliteStore(db, RoomState), db


def create_app(
    settings: LobbyServerSettings | None = None,
    store: VersionedStore[RoomState] | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = LobbyServerSettings()

    db: Database | None = None
    if store is None:
        store, db = _open_store(settings)

    registry = LobbyRegistry(
        store,
        settings=settings.draft_settings(),
        catalog=load_catalog(settings.catalog_path),
    )

    routes = [
        Route("/health", health, methods=["GET"], name="health"),
        Route("/me", whoami, methods=["GET"], name="whoami"),
        Route("/rooms", list_rooms, methods=["GET"], name="list_rooms"),
        Route("/rooms", create_room, methods=["POST"], name="create_room"),
        Route("/rooms/{room_id}", get_room, methods=["GET"], name="get_room"),
        Route("/rooms/{room_id}/picks", my_picks, methods=["GET"], name="my_picks"),
        Route("/rooms/{room_id}/actions", room_action, methods=["POST"], name="room_action"),
    ]

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:
        yield
        if db is not None:
            db.close()

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers={DraftError: _draft_error_handler},
    )
    app.add_middleware(AuthenticationMiddleware, backend=PlayerSessionBackend())  # type: ignore[arg-type]
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", PLAYER_ID_HEADER],
        allow_credentials=True,
    )

    app.state.settings = settings
    app.state.registry = registry

    logger.info("lobby server ready", persistent=db is not None)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory lobby.server.app:get_app."""
    s = LobbyServerSettings()
    setup_logging(log_dir=s.log_dir)
    return create_app(settings=s)
