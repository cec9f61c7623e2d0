"""
CodePilot Backend - FastAPI Application Entry Point
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codepilot.deps import SESSION_HEADER
from codepilot.routers import analysis, chat, config, editor, session
from codepilot.services.config_manager import ConfigManager
from codepilot.services.llm_service import GenerativeGateway, GenerativeService
from codepilot.services.workspace import SessionRegistry

logger = logging.getLogger("codepilot")


def configure_logging() -> None:
    level = os.environ.get("CODEPILOT_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def create_app(
    gateway: GenerativeService | None = None,
    config_manager: ConfigManager | None = None,
) -> FastAPI:
    """Build the application; tests pass their own gateway and config"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager - startup and shutdown logic"""
        configure_logging()
        logger.info("[Backend] Starting CodePilot Backend...")
        manager = config_manager or ConfigManager.get_instance()
        app.state.config_manager = manager
        idle_timeout, max_sessions = manager.session_limits
        app.state.sessions = SessionRegistry(
            gateway=gateway or GenerativeGateway(manager),
            quiet_period=manager.quiet_period_seconds,
            idle_timeout=idle_timeout,
            max_sessions=max_sessions,
        )
        logger.info("[Backend] Config loaded from %s", manager.config_file)

        yield

        logger.info("[Backend] Shutting down CodePilot Backend...")
        await app.state.sessions.close_all()

    app = FastAPI(
        title="CodePilot Backend",
        description="AI code suggestions, chat, test prediction and debugging",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )

    app.include_router(editor.router, prefix="/api/editor", tags=["editor"])
    app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
    app.include_router(analysis.tests_router, prefix="/api/tests", tags=["tests"])
    app.include_router(analysis.debug_router, prefix="/api/debug", tags=["debug"])
    app.include_router(analysis.errors_router, prefix="/api/errors", tags=["errors"])
    app.include_router(session.router, prefix="/api/session", tags=["session"])
    app.include_router(config.router, prefix="/api/config", tags=["config"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "codepilot-backend"}

    return app


app = create_app()


def run() -> None:
    import uvicorn

    server = ConfigManager.get_instance().get("server", {})
    uvicorn.run(app, host=server.get("host", "0.0.0.0"), port=int(server.get("port", 8000)))


if __name__ == "__main__":
    run()
