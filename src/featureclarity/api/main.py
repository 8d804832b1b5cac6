from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import ClarityConfig, get_settings
from ..errors import ClarityError
from .middleware.error_handler import clarity_error_handler, http_exception_handler
from .middleware.request_id import RequestIDMiddleware
from .routes import analyze, extract, health


def create_app(settings: Optional[ClarityConfig] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Feature Clarity API",
        version=__version__,
        docs_url="/docs",
    )

    # Exception handlers
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(ClarityError, clarity_error_handler)

    # Middleware (order matters - first added = outermost)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes
    app.include_router(health.router, tags=["Health"])
    app.include_router(extract.router, prefix="/api", tags=["Extract"])
    app.include_router(analyze.router, prefix="/api", tags=["Analyze"])

    return app


app = create_app()
