from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route, WebSocketRoute

from tabletop.build_info import APP_VERSION
from tabletop.logging import setup_logging
from tabletop.logic.registry import GAME_CATALOG
from tabletop.messaging.router import MessageRouter
from tabletop.messaging.types import GameCatalogResponse
from tabletop.server.settings import TabletopServerSettings
from tabletop.server.websocket import websocket_endpoint
from tabletop.session.manager import SessionManager
from tabletop.session.room_manager import RoomManager

logger = structlog.get_logger()

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.websockets import WebSocket


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "version": APP_VERSION})


async def list_games(_request: Request) -> JSONResponse:
    return JSONResponse(GameCatalogResponse(games=GAME_CATALOG).model_dump(mode="json"))


async def list_rooms(request: Request) -> JSONResponse:
    session_manager: SessionManager = request.app.state.session_manager
    rooms = session_manager.room_manager.get_rooms_info()
    return JSONResponse({"rooms": [room.model_dump(mode="json") for room in rooms]})


def create_app(
    settings: TabletopServerSettings | None = None,
    session_manager: SessionManager | None = None,
    message_router: MessageRouter | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = TabletopServerSettings()

    if session_manager is None:
        session_manager = SessionManager(RoomManager(max_rooms=settings.max_rooms))

    if message_router is None:
        message_router = MessageRouter(session_manager)

    async def ws_endpoint(websocket: WebSocket) -> None:
        await websocket_endpoint(websocket, message_router, settings)

    routes = [
        Route("/health", health, methods=["GET"]),
        Route("/games", list_games, methods=["GET"]),
        Route("/rooms", list_rooms, methods=["GET"]),
        WebSocketRoute("/ws", ws_endpoint),
    ]

    app = Starlette(routes=routes)
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
    )
    app.state.settings = settings
    app.state.session_manager = session_manager

    logger.info("tabletop server ready", max_rooms=settings.max_rooms)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """ASGI application factory for production use (``uvicorn --factory``)."""
    settings = TabletopServerSettings()
    setup_logging(level=settings.log_level, log_format=settings.log_format, log_dir=settings.log_dir)
    return create_app(settings=settings)
