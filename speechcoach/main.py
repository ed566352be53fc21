"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config.settings import Settings, settings
from .controllers import analysis, health
from .controllers.errors import register_exception_handlers
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware, UploadLimitMiddleware
from .pipelines.analysis import AnalysisPipeline
from .services import (
    FeedbackService,
    ResultStore,
    build_llm_client,
    build_speech_service,
    build_transcribe_service,
)

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _rotating_handler(path: str, max_bytes: int, fmt: str) -> RotatingFileHandler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _configure_logging(config: Settings) -> None:
    """Stream app logs to stdout and file; pipeline and transcripts get their own files."""

    logging.getLogger().handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(_rotating_handler(config.log_file, 1_000_000, _LOG_FORMAT))
    root_logger.setLevel(logging.DEBUG if config.debug else logging.INFO)

    middleware_logger = logging.getLogger("speechcoach.middleware.structured")
    middleware_logger.handlers.clear()
    middleware_stdout = logging.StreamHandler(sys.stdout)
    middleware_stdout.setFormatter(logging.Formatter("%(message)s"))
    middleware_logger.addHandler(middleware_stdout)
    middleware_logger.setLevel(logging.INFO)
    middleware_logger.propagate = False

    pipeline_logger = logging.getLogger("speechcoach.services.analysis_pipeline")
    pipeline_logger.handlers.clear()
    pipeline_logger.addHandler(
        _rotating_handler(config.pipeline_log_file, 500_000, "%(asctime)s | %(levelname)s | %(message)s")
    )
    pipeline_logger.setLevel(logging.INFO)

    transcript_logger = logging.getLogger("speechcoach.logs.transcript")
    transcript_logger.handlers.clear()
    transcript_logger.addHandler(
        _rotating_handler(config.transcript_log_file, 500_000, "%(asctime)s | %(levelname)s | %(message)s")
    )
    transcript_logger.setLevel(logging.INFO)
    transcript_logger.propagate = False

    noisy_loggers = [
        "botocore",
        "boto3",
        "urllib3",
        "httpx",
        "httpcore",
    ]
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def _require_credentials(config: Settings) -> None:
    """Exit the process when a provider secret is missing."""

    missing = config.missing_credentials()
    if missing:
        logger.error(
            "Missing API keys: %s. Set them in the environment or the .env file.",
            ", ".join(missing),
        )
        sys.exit(1)


def build_pipeline(config: Settings, store: ResultStore) -> AnalysisPipeline:
    """Wire the provider clients into an analysis pipeline."""

    return AnalysisPipeline(
        transcriber=build_transcribe_service(),
        feedback=FeedbackService(build_llm_client()),
        synthesizer=build_speech_service(),
        store=store,
        language_code=config.polly.language_code,
        retention_seconds=config.results.retention_seconds,
    )


def create_app(config: Settings = settings) -> FastAPI:
    """Create and configure the FastAPI application."""

    _configure_logging(config)
    _require_credentials(config)

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        debug=config.debug,
        description="Spoken English feedback: transcription, tutor critique and corrected speech",
    )

    app.add_middleware(UploadLimitMiddleware, config=config)
    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
    )

    store = ResultStore(sweep_interval=config.results.sweep_interval_seconds)
    app.state.result_store = store
    app.state.analysis_pipeline = build_pipeline(config, store)

    app.include_router(analysis.router)
    app.include_router(health.router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint."""

        return {
            "message": f"Welcome to {config.app_name}",
            "version": config.app_version,
            "status": "operational",
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    register_exception_handlers(app, include_details=not config.is_production)

    @app.on_event("startup")
    async def startup_event() -> None:
        await store.start()
        logger.info("%s ready (environment=%s)", config.app_name, config.environment)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        logger.info("Shutting down, dropping %d stored analyses", len(store))
        await store.close()

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "speechcoach.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
