"""
habit-matrix MCP server entry point.

Startup sequence:
1. Read settings from environment (VAULT_ROOT is required)
2. Build the store, task index and action layer
3. Start the matrix and habit views (one polling thread each)
4. Start REST API server in background thread (if API_ENABLED)
5. Register all MCP tools
6. Run MCP server (stdio transport)
"""

import logging
import sys
import threading

from mcp.server.fastmcp import FastMCP

from habit_matrix.api.tools import register_tools
from habit_matrix.config import Settings
from habit_matrix.errors import ConfigError
from habit_matrix.service import Services, build_services

log = logging.getLogger(__name__)


def _start_api_server(services: Services, port: int) -> None:
    """Run the FastAPI/uvicorn server in a daemon thread."""
    import uvicorn

    from habit_matrix.api.app import create_app

    app = create_app(services)
    log.info("Starting REST API on port %d", port)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="warning")


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        log.error("%s", e)
        sys.exit(1)

    log.info("Vault root: %s", settings.vault_root)
    log.info("Excluded dirs: %s", settings.exclude_dirs)

    services = build_services(settings)
    log.info("Indexed %d tasks", len(services.index.scan()))

    for view in services.views:
        view.start()

    if settings.api_enabled:
        api_thread = threading.Thread(
            target=_start_api_server, args=(services, settings.api_port), daemon=True
        )
        api_thread.start()

    mcp = FastMCP("habit-matrix")
    register_tools(mcp, services)

    log.info("Starting habit-matrix server")
    try:
        mcp.run(transport="stdio")
    finally:
        for view in services.views:
            view.stop()


if __name__ == "__main__":
    main()
