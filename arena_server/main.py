# arena_server/main.py
"""FastAPI application wiring and server entry point."""

import sys

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from arena_server.api.routes import GameAPI
from arena_server.config.settings import HOST, LOG_LEVEL, PORT
from arena_server.services.game_service import GameService
from arena_server.services.websocket_service import ConnectionManager, WebSocketService
from arena_server.utils.scheduler import AsyncioScheduler


def configure_logging(level: str = LOG_LEVEL):
    logger.remove()
    logger.add(sys.stderr, level=level)


def create_app(scheduler=None, rng=None) -> FastAPI:
    """Build the app with its own game state."""
    app = FastAPI()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    connections = ConnectionManager()
    game_service = GameService(connections, scheduler or AsyncioScheduler(), rng=rng)
    websocket_service = WebSocketService(game_service, connections)

    app.state.game_service = game_service
    app.state.websocket_service = websocket_service
    app.include_router(GameAPI(game_service).router)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await websocket_service.handle_connection(websocket)

    return app


app = create_app()


def run():
    import uvicorn

    configure_logging()
    logger.info(f"Server running on {HOST}:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    run()
