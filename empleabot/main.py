"""Main application entry point.

Serves the API and the chat page together, the chat page alone against a
remote API, or reconciles the remote assistant and exits.
Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def run_integrated() -> None:
    """Serve the API and the chat page from one uvicorn process.

    The API lifespan reconciles the assistant before the first request;
    NiceGUI is mounted on the same application at ``/``.
    """
    import uvicorn
    from nicegui import ui

    from empleabot.api.app import create_app
    from empleabot.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()
    ui.run_with(
        app,
        title="EmpleaBot",
        favicon="💼",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "empleabot-secret"),
    )

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Chat UI on http://{host}:{port}/, API docs on http://{host}:{port}/docs")
    uvicorn.run(app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


def run_ui() -> None:
    """Serve only the chat page, talking to the API at ``API_BASE_URL``."""
    from empleabot.ui.api_client import API_BASE_URL
    from empleabot.ui.chat_page import main as run_chat_page

    logger.info(f"Chat UI using API at {API_BASE_URL}")
    run_chat_page()


def run_reconcile() -> int:
    """Converge the remote assistant to the declared configuration and exit.

    Returns:
        Process exit code: 0 when an assistant is usable.
    """
    import asyncio

    from empleabot.assistant.client import create_client
    from empleabot.assistant.config import get_settings
    from empleabot.assistant.reconciler import ReconciliationResult, reconcile_assistant
    from empleabot.errors import ConfigurationError, RemoteResourceError

    async def reconcile() -> ReconciliationResult:
        settings = get_settings()
        client = create_client(settings)
        try:
            return await reconcile_assistant(client, settings)
        finally:
            await client.close()

    try:
        result = asyncio.run(reconcile())
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2
    except RemoteResourceError as e:
        logger.error(f"Reconciliation failed: {e}")
        return 1

    logger.info(f"Assistant {result.action.value}: {result.assistant_id or result.detail}")
    return 0 if result.usable else 1


def main() -> None:
    """Dispatch on ``RUN_MODE``: ``reconcile``, ``ui``, or the default ``integrated``."""
    mode = os.getenv("RUN_MODE", "integrated").lower()
    logger.info(f"Starting EmpleaBot in {mode} mode")

    match mode:
        case "reconcile":
            sys.exit(run_reconcile())
        case "ui":
            run_ui()
        case _:
            run_integrated()


if __name__ == "__main__":
    main()
