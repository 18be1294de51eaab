"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration. The lifespan reconciles the remote assistant before
any request is served and keeps the result on ``app.state``.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from empleabot.api.files import router as files_router
from empleabot.api.threads import router as threads_router
from empleabot.api.upload import router as upload_router
from empleabot.assistant.backend import FileStore, OpenAIThreadBackend, ThreadBackend
from empleabot.assistant.client import create_client
from empleabot.assistant.config import get_settings
from empleabot.assistant.reconciler import ReconciliationResult, reconcile_assistant

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Reconciles the assistant on startup unless a backend was injected, and
    closes the OpenAI client on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting EmpleaBot API...")
    client = None
    if app.state.backend is None and app.state.reconciliation is None:
        settings = get_settings()
        client = create_client(settings)
        result = await reconcile_assistant(client, settings)
        app.state.reconciliation = result
        if result.usable:
            backend = OpenAIThreadBackend(client, result.assistant_id)
            app.state.backend = backend
            app.state.files = backend
        else:
            logger.warning("Serving without an assistant; thread endpoints will return 503")
    yield
    # Shutdown
    logger.info("Shutting down EmpleaBot API...")
    if client is not None:
        await client.close()


def create_app(
    *,
    backend: ThreadBackend | None = None,
    files: FileStore | None = None,
    reconciliation: ReconciliationResult | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        backend: Thread backend to use instead of reconciling at startup.
        files: Source of generated files for ``/api/files``.
        reconciliation: Result of an earlier reconciliation.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="EmpleaBot API",
        description=(
            "Career assistant chat API over the OpenAI Assistants API. "
            "Creates conversation threads, streams run events as Server-Sent "
            "Events, accepts tool outputs, serves generated files and extracts "
            "text from uploaded PDFs."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.backend = backend
    application.state.files = files
    application.state.reconciliation = reconciliation

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(threads_router)
    application.include_router(files_router)
    application.include_router(upload_router)

    @application.get("/health")
    async def health_check(request: Request) -> dict[str, str | None]:
        """Check service health status and assistant availability."""
        result: ReconciliationResult | None = request.app.state.reconciliation
        usable = request.app.state.backend is not None
        return {
            "status": "healthy" if usable else "degraded",
            "service": "empleabot",
            "assistant": result.action.value if result else None,
        }

    return application
