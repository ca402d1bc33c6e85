import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from resume_builder.app.api.routes.auth import router as auth_router
from resume_builder.app.api.routes.resume import router as resume_router
from resume_builder.app.api.routes.templates import router as templates_router
from resume_builder.app.core.config import get_settings
from resume_builder.app.middleware import refresh_session_middleware
from resume_builder.app.web.pages import router as web_pages_router

log = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        None

    Returns:
        FastAPI: The configured FastAPI application instance.

    Notes:
        1. Configure logging at the level from the settings.
        2. Initialize the FastAPI application with the title "Resume Builder".
        3. Add the sliding session middleware and CORS middleware.
        4. Mount the static assets.
        5. Include the auth, resume and template API routers and the page router.

    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    _msg = "Creating FastAPI application"
    log.debug(_msg)

    app = FastAPI(title="Resume Builder")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # TODO: Restrict in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(BaseHTTPMiddleware, dispatch=refresh_session_middleware)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    app.include_router(auth_router)
    app.include_router(resume_router)
    app.include_router(templates_router)
    app.include_router(web_pages_router)

    _msg = "FastAPI application created successfully"
    log.debug(_msg)
    return app


app = create_app()
