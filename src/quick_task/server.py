"""
quick-task MCP server entry point.

Startup sequence:
1. Read configuration from the environment (see quick_task.settings)
2. Build the TaskService (document store + settings + serializer dialect)
3. Start REST API server in background thread (if API_ENABLED)
4. Register MCP tools
5. Run MCP server (stdio transport)
"""

import logging
import sys
import threading

from mcp.server.fastmcp import FastMCP

from quick_task.service import TaskService
from quick_task.settings import Config, SettingsStore
from quick_task.store.document_store import DocumentStore
from quick_task.tools import register_task_tools

log = logging.getLogger(__name__)


def _start_api_server(service, port: int) -> None:
    """Run the FastAPI/uvicorn server in a daemon thread."""
    import uvicorn

    from quick_task.api.app import create_app

    app = create_app(service)
    log.info("Starting REST API on port %d", port)
    uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")


def build_service(config: Config) -> TaskService:
    return TaskService(
        DocumentStore(config.root),
        SettingsStore(config.settings_file),
        dialect=config.dialect,
    )


def main() -> None:
    try:
        config = Config.from_env()
    except ValueError as e:
        logging.basicConfig(stream=sys.stderr)
        log.error("%s", e)
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    log.info("Document root: %s", config.root or "(unrestricted)")
    log.info("Metadata dialect: %s", config.dialect)

    service = build_service(config)

    if config.api_enabled:
        api_thread = threading.Thread(
            target=_start_api_server, args=(service, config.api_port), daemon=True
        )
        api_thread.start()

    mcp = FastMCP("quick-task")
    register_task_tools(mcp, service)

    log.info("Starting quick-task server")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
