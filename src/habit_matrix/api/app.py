"""FastAPI application factory for the habit-matrix REST API."""

from fastapi import APIRouter, FastAPI

from habit_matrix.api.routes import register_routes
from habit_matrix.service import Services


def create_app(services: Services) -> FastAPI:
    """Build and return a FastAPI app wired to the given services."""
    app = FastAPI(title="habit-matrix", docs_url="/api/docs", openapi_url="/api/openapi.json")

    api = APIRouter(prefix="/api")
    register_routes(api, services)
    app.include_router(api)

    return app
