"""
APIBank API Application Factory
"""

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import get_config
from ..errors import BankingError
from ..logging_config import get_logger, log_action, setup_logging
from .accounts import router as accounts_router
from .admin import router as admin_router
from .auth import router as auth_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    config = get_config()
    setup_logging(config.log_level, "apibank", config.log_format, config.log_file)
    logger = get_logger("apibank.api")

    app = FastAPI(
        title="APIBank Administration API",
        description="Account provisioning and balance administration",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BankingError)
    async def banking_error_handler(request: Request, exc: BankingError):
        log_action(logger, "warning", exc.message, action=f"{request.method} {request.url.path}",
                   extra={"status_code": exc.status_code})
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    app.include_router(auth_router, prefix="/auth", tags=["Auth"])
    app.include_router(admin_router, prefix="/admin", tags=["Admin"])
    app.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "apibank_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "APIBank Administration API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "auth": "/auth",
                "admin": "/admin",
                "accounts": "/accounts",
            }
        }

    return app


def run_server(host: str = "0.0.0.0", port: int = 8090, debug: bool = False):
    """Run the API server"""
    uvicorn.run(
        "apibank.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=debug,
        log_level="debug" if debug else "info"
    )
