"""FastAPI application for the exchange.

Note: Authentication is intentionally not implemented; callers name the
sender of each operation, the same way a local dev chain trusts its
unlocked accounts.
"""

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dex import __version__
from dex.api.endpoints import router
from dex.config import DexConfig
from dex.errors import DexError, ErrorKind
from dex.exchange import PairNotFound
from dex.log_config import configure_logging
from dex.tokens import TokenError

logger = structlog.get_logger()

CONFIG = DexConfig.from_env()

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

# Kinds that are not plain bad input
ERROR_STATUS = {
    ErrorKind.PAIR_ALREADY_EXISTS: 409,
    ErrorKind.UNKNOWN_TOKEN: 404,
    ErrorKind.LOCKED: 409,
    ErrorKind.CONSTANT_PRODUCT_VIOLATED: 500,
}

app = FastAPI(
    title="Minimal DEX",
    description="Constant product AMM with a pair factory",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(DexError)
async def dex_error_handler(request: Request, exc: DexError) -> JSONResponse:
    status = ERROR_STATUS.get(exc.kind, 400)
    logger.warning(
        "dex_error",
        path=request.url.path,
        kind=exc.kind.value,
        detail=str(exc),
        status=status,
    )
    return JSONResponse(status_code=status, content={"error": exc.kind.value, "detail": str(exc)})


@app.exception_handler(TokenError)
async def token_error_handler(request: Request, exc: TokenError) -> JSONResponse:
    logger.warning("token_error", path=request.url.path, kind=exc.kind, detail=str(exc))
    return JSONResponse(status_code=400, content={"error": exc.kind, "detail": str(exc)})


@app.exception_handler(PairNotFound)
async def pair_not_found_handler(request: Request, exc: PairNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "pair_not_found", "detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the exchange API server.

    Configuration via environment variables:
    - DEX_HOST: Host to bind to (default: 0.0.0.0)
    - DEX_PORT: Port to bind to (default: 8000)
    - DEX_DEBUG: Enable debug/reload mode (default: false)
    - DEX_LOG_LEVEL: Log level (default: info)
    - DEX_FEE_BPS: Trading fee in basis points (default: 30)
    - DEX_OWNER: Factory owner address
    """
    configure_logging(CONFIG.log_level)
    uvicorn.run(
        "dex.api.main:app",
        host=CONFIG.host,
        port=CONFIG.port,
        reload=CONFIG.debug,
    )


if __name__ == "__main__":
    run()
