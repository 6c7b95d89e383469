import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fileshare.core.config import Settings, get_settings
from fileshare.core.bootstrap import create_tables, seed_admin
from fileshare.core.database import build_engine, build_session_factory
from fileshare.core.errors import register_exception_handlers
from fileshare.core.scheduler import start_scheduler, stop_scheduler
from fileshare.storage.local_storage import LocalStorage, UPLOADS_URL_PREFIX
from fileshare.api.routes import admin, auth, comments, files

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: connect, create tables, seed the admin, prepare storage and
    start the orphaned upload sweep.
    Shutdown: stop the sweep and release the connection pool.
    """
    settings: Settings = app.state.settings

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    create_tables(engine)
    seed_admin(session_factory, settings)

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.storage = LocalStorage(settings.UPLOAD_DIR, settings.UPLOAD_CHUNK_SIZE)
    scheduler = start_scheduler(settings, session_factory, app.state.storage)
    logger.info("File share API started")

    yield

    stop_scheduler(scheduler)
    engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around one explicit Settings object"""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="File Share API",
        description="Upload, share and discuss files",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # All API routes are prefixed with /api
    app.include_router(auth.router, prefix="/api")
    app.include_router(files.router, prefix="/api")
    app.include_router(comments.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")

    # The directory is created in the lifespan, so skip the existence check here
    app.mount(
        UPLOADS_URL_PREFIX,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )

    @app.get("/health")
    async def health():
        """Health check endpoint - used by monitoring/deployment tools"""
        return {"status": "healthy"}

    return app


app = create_app()
