"""Module containing the routers for the FastAPI application."""

from api.routers.configuration import router as configuration
from api.routers.dependencies import router as dependencies
from api.routers.download import router as download
from api.routers.health import router as health

__all__ = ["configuration", "dependencies", "download", "health"]
