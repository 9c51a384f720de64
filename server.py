"""
Main FastAPI server module for NexusLearn.
This module initializes the FastAPI application, configures routes, CORS
middleware and error bodies, and handles graceful server startup and shutdown.
"""

import asyncio
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from nexuslearn.configs import db
from nexuslearn.configs.config import config
from nexuslearn.configs.logging_config import setup_logging
from nexuslearn.core.rate_limit import add_rate_limiting
from nexuslearn.routes.chat_routes import router as chat_router
from nexuslearn.routes.flow_routes import router as flow_router
from nexuslearn.routes.health_routes import router as health_router
from nexuslearn.routes.podcast_job_routes import router as podcast_job_router

app = FastAPI(title="NexusLearn API")


@app.on_event("startup")
async def startup_event() -> None:
    """Initialize logging configuration on application startup"""
    setup_logging(
        config.log_level,
        config.log_file,
        enable_file_logging=config.log_file is not None,
        component="api",
    )
    logger.info(
        f"NexusLearn API starting (storage={config.storage_provider}, "
        f"db_mirror={'on' if db.db_enabled else 'off'})"
    )


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await db.dispose_engine()


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render HTTP errors as ``{"error": message}`` bodies."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


add_rate_limiting(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(chat_router)
app.include_router(podcast_job_router)
app.include_router(flow_router)

# Serve locally stored PDFs and podcast audio under /files/
if config.storage_provider == "local":
    config.ensure_directories_exist()
    app.mount("/files", StaticFiles(directory=config.output_dir), name="files")


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint that returns a welcome message"""
    return {"message": "NexusLearn Backend API"}


if __name__ == "__main__":
    import signal

    import uvicorn

    stop_event = asyncio.Event()

    def signal_handler(sig: int, frame: Any) -> None:
        logger.info("Received shutdown signal, stopping server...")
        stop_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    uvicorn_config = uvicorn.Config(app, host="0.0.0.0", port=config.port)
    server = uvicorn.Server(uvicorn_config)

    async def run_server() -> None:
        await server.serve()
        stop_event.set()

    async def main() -> None:
        server_task = asyncio.create_task(run_server())
        await stop_event.wait()

        server.should_exit = True
        await server_task

    asyncio.run(main())
