"""
Main HTTP server for hookrelay.

Builds the FastAPI application, maps relay errors to JSON responses and
starts uvicorn on the first free port.
"""

import logging
import random
import socket
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from hookrelay import __version__
from hookrelay.core.config import AppConfig, get_config
from hookrelay.core.errors import RateLimited, RelayError
from hookrelay.directory.resolver import DirectoryResolver
from hookrelay.relay.service import RelayService

from .api import router as api_router
from .pages import STATIC_DIR
from .pages import router as pages_router

logger = logging.getLogger(__name__)

LOG_LINE_LIMIT = 80
FALLBACK_PORT_RANGE = (49152, 65534)


def create_app(
    config: Optional[AppConfig] = None,
    service: Optional[RelayService] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    The relay service is built here (or injected) and stored on
    ``app.state``; handlers reach it through the request.

    Args:
        config: Application configuration (defaults to the global config)
        service: Prebuilt relay service (defaults to one built from config)

    Returns:
        FastAPI application
    """
    config = config or get_config()
    service = service or RelayService.from_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await service.client.close()

    app = FastAPI(
        title=config.app_title,
        description="Relays form submissions to Discord webhooks",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.relay = service
    app.state.resolver = DirectoryResolver(
        service.registry,
        app_title=config.app_title,
        reserved=service.reserved,
    )

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        headers = None
        if isinstance(exc, RateLimited):
            headers = {"Retry-After": str(exc.retry_after)}
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response(),
            headers=headers,
        )

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        path = request.url.path
        if path.startswith("/api"):
            duration_ms = int((time.perf_counter() - start) * 1000)
            line = f"{request.method} {path} {response.status_code} in {duration_ms}ms"
            if len(line) > LOG_LINE_LIMIT:
                line = line[: LOG_LINE_LIMIT - 1] + "…"
            logger.info(line)
        return response

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "directories": len(service.registry),
            "throttled_clients": len(service.throttle),
            "operator_configured": bool(service.operator_endpoint),
        }

    if STATIC_DIR.exists():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # Pages go last: GET /{directory} would otherwise shadow other routes
    app.include_router(api_router)
    app.include_router(pages_router)

    return app


def find_available_port(
    start_port: int,
    max_attempts: int = 10,
    host: str = "0.0.0.0",
) -> int:
    """
    Find a port that can be bound.

    Tries ``start_port`` and the following ports in order. If none of them
    is free, returns a random port from the dynamic range.

    Args:
        start_port: First port to try
        max_attempts: Number of consecutive ports to try
        host: Address to test the bind on

    Returns:
        Port number
    """
    port = start_port
    for _ in range(max_attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((host, port))
                return port
            except OSError:
                logger.info(f"Port {port} is in use, trying port {port + 1}...")
        port += 1

    fallback = random.randint(*FALLBACK_PORT_RANGE)
    logger.warning(f"No free port in {start_port}-{port - 1}, using {fallback}")
    return fallback


def setup_logging(log_level: str) -> None:
    """
    Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main():
    """Main entry point for HTTP server."""
    config = get_config()
    setup_logging(config.log_level)

    host = config.server.host
    port = find_available_port(
        config.server.port,
        max_attempts=config.server.port_search_attempts,
        host=host,
    )

    logger.info("=" * 60)
    logger.info(f"{config.app_title} - Relay Server")
    logger.info("=" * 60)
    logger.info(f"Host: {host}")
    logger.info(f"Port: {port}")
    logger.info(f"Operator webhook configured: {bool(config.relay.operator_webhook_url)}")
    logger.info("=" * 60)

    uvicorn.run(
        "hookrelay.ui.http_server:create_app",
        factory=True,
        host=host,
        port=port,
        reload=config.server.reload,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
