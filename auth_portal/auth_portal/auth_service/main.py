from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .db import Database, get_db
from .dependencies import get_orchestrator, get_session_cookie
from .middleware import EdgeGateMiddleware
from .orchestrator import AuthOrchestrator
from .routes import actions, auth, health, register
from .schemas import SessionStatus, SessionStatusOut
from .utils.event_logger import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the process-wide database handle on startup, release it on shutdown"""
        configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)
        database = Database(settings.DATABASE_URL, echo=settings.DB_ECHO)
        database.init_db()
        app.state.database = database
        logger.info("Auth service started with %s session strategy", settings.SESSION_STRATEGY)
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(
        title="Auth Portal",
        description="Credentials and OAuth sign-in with a protected dashboard",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.orchestrator = AuthOrchestrator(settings)

    app.add_middleware(EdgeGateMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(register.router)
    app.include_router(auth.router)
    app.include_router(actions.router)
    app.include_router(health.router)

    @app.get("/dashboard", response_model=SessionStatusOut)
    def dashboard(
        session_token: Optional[str] = Depends(get_session_cookie),
        orchestrator: AuthOrchestrator = Depends(get_orchestrator),
        db: Session = Depends(get_db),
    ):
        """Protected page: the signed-in user's session"""
        resolved = orchestrator.get_session(session_token, db)
        if resolved is None:
            return SessionStatusOut(status=SessionStatus.UNAUTHENTICATED)
        return SessionStatusOut(status=SessionStatus.AUTHENTICATED, session=resolved[0])

    return app


app = create_app()
