"""FastAPI application for the AMM quote service.

Note: the service is read-only. Swaps and liquidity changes go through
Router directly; the HTTP layer only exposes pair lookups and quotes.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from amm import __version__
from amm.api.endpoints import router
from amm.errors import AMMError, PairNotFound
from amm.log import configure_logging
from amm.models.api import ErrorResponse

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("AMM_PORT", "8000"))
DEBUG = os.environ.get("AMM_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="Constant-Product AMM",
    description="Pair registry lookups and swap quotes for a constant-product AMM",
    version=__version__,
)


@app.exception_handler(AMMError)
async def amm_error_handler(_request: Request, exc: AMMError) -> JSONResponse:
    """Map AMM check failures to 4xx responses carrying the error code."""
    status_code = 404 if isinstance(exc, PairNotFound) else 400
    logger.info("request_rejected", error=exc.code, detail=str(exc))
    body = ErrorResponse(error=exc.code, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the quote API server.

    Configuration via environment variables:
    - AMM_HOST: Host to bind to (default: 0.0.0.0)
    - AMM_PORT: Port to bind to (default: 8000)
    - AMM_DEBUG: Enable debug logging and reload mode (default: false)
    """
    configure_logging(verbose=DEBUG)
    uvicorn.run(
        "amm.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
