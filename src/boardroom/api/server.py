from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from boardroom import __version__
from boardroom.api.routes import actions, agents, permissions
from boardroom.application.factory import Boardroom, BoardroomFactory
from boardroom.application.logging_config import configure_logging
from boardroom.application.settings import BoardroomSettings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI startup/shutdown events."""
    logger.info("fastapi.startup", message="Boardroom API starting...")
    yield
    logger.info("fastapi.shutdown", message="Boardroom API shutting down...")


def create_app(boardroom: Boardroom | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        boardroom: Pre-wired engine (built from BoardroomSettings if None)
    """
    if boardroom is None:
        settings = BoardroomSettings()
        configure_logging(settings.log_level, settings.log_json)
        boardroom = BoardroomFactory(settings).create()

    app = FastAPI(
        title="Boardroom Agent API",
        description="Agent task planning and permission-gated action execution",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.boardroom = boardroom

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(agents.router, prefix="/api/v1", tags=["agents"])
    app.include_router(permissions.router, prefix="/api/v1", tags=["permissions"])
    app.include_router(actions.router, prefix="/api/v1", tags=["actions"])

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok", "version": __version__}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8070)
