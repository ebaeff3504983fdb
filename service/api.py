"""
Coffee Trace API Service

FastAPI service behind the farmer, union, processor and consumer views.
Secrets for the external Cardano services stay on the server; the views
only ever see tx hashes, asset units and {"error": ...} messages.

Endpoints:
- POST /api/transfer - Relay a token status update
- POST /api/mint - Mint a batch token
- POST /api/batches - Register a harvest
- GET /api/batches - List batches
- GET /api/batches/{batch_id} - Batch provenance
- POST /api/batches/{batch_id}/status - Record a completed transfer
- GET /health - Health check with configuration status
- GET / - Root health check
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cardano.config import Settings, missing_mint_keys, missing_transfer_keys
from database.connection import init_database
from service.batch_api import router as batch_router
from service.dependencies import get_settings
from service.transfer_api import router as transfer_router

logger = logging.getLogger(__name__)

SERVICE_NAME = "Coffee Trace API"
VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_database()
    missing = missing_transfer_keys(app.state.settings)
    if missing:
        logger.warning(f"Transfer relay disabled until configured: missing {', '.join(missing)}")
    yield


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render routing and HTTP errors in the same {"error": ...} envelope."""
    message = "Method not allowed" if exc.status_code == 405 else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Explicit settings (tests); read from the environment when omitted
    """
    app = FastAPI(
        title=SERVICE_NAME,
        description="Coffee supply chain traceability with Cardano batch tokens",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings or Settings.from_env()

    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    # Allow the browser views
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Tighten in production
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(transfer_router)
    app.include_router(batch_router)

    @app.get("/")
    async def root():
        """Root health check endpoint."""
        return {
            "service": SERVICE_NAME,
            "status": "operational",
            "version": VERSION,
            "endpoints": [
                "POST /api/transfer",
                "POST /api/mint",
                "POST /api/batches",
                "GET /api/batches",
                "GET /api/batches/{batch_id}",
                "POST /api/batches/{batch_id}/status",
                "GET /health",
            ],
        }

    @app.get("/health")
    async def health_check(settings: Settings = Depends(get_settings)):
        """
        Health check with credential status.

        Reports which keys are missing, never their values.
        """
        missing_transfer = missing_transfer_keys(settings)
        missing_mint = missing_mint_keys(settings)
        return {
            "service": SERVICE_NAME,
            "status": "operational" if not missing_transfer else "degraded",
            "version": VERSION,
            "network": settings.cardano_network,
            "transferConfigured": not missing_transfer,
            "mintConfigured": not missing_mint,
            "missingTransferKeys": missing_transfer,
            "missingMintKeys": missing_mint,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
