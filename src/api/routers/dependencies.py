"""Dependency status and installation endpoints for the DL Console API."""

import logging

from fastapi import APIRouter, Request

from api.config import get_settings
from api.middleware import limiter
from api.models import OperationResult
from core import dependencies
from core.dependencies import DependencyStatus
from core.errors import DependencyError

logger = logging.getLogger(__name__)

settings = get_settings()
router = APIRouter()


@router.get("/api/dependencies/check", response_model_exclude_none=True)
async def check_dependencies() -> dict[str, DependencyStatus]:
    """Report presence and version of every external tool and the wrapper service.

    Returns
    -------
    dict[str, DependencyStatus]
        Mapping of dependency name to its freshly probed status.

    """
    return await dependencies.check_all(
        wrapper_host=settings.wrapper_host,
        wrapper_port=settings.wrapper_port,
        wrapper_timeout=settings.wrapper_connect_timeout,
        version_timeout=settings.version_timeout_seconds,
    )


@router.post("/api/dependencies/install/{name}", response_model_exclude_none=True)
@limiter.limit(settings.download_rate_limit)
async def install_dependency(request: Request, name: str) -> OperationResult:
    """Install a missing dependency with the host's package manager.

    Parameters
    ----------
    request : Request
        The incoming HTTP request (used by rate limiter).
    name : str
        Dependency name (``mp4box``, ``mp4decrypt`` or ``ffmpeg``).

    Returns
    -------
    OperationResult
        ``success`` or the install error, including the failing command's output.

    """
    try:
        await dependencies.install_dependency(name)
    except DependencyError as exc:
        logger.warning("Install of %s failed: %s", name, exc)
        return OperationResult(success=False, error=str(exc))
    return OperationResult(success=True)


@router.post("/api/wrapper/start", response_model_exclude_none=True)
async def start_wrapper() -> OperationResult:
    """Report whether the wrapper service is running, with start-up guidance if not."""
    try:
        await dependencies.wrapper_start_status(
            settings.wrapper_host,
            settings.wrapper_port,
            settings.wrapper_connect_timeout,
        )
    except DependencyError as exc:
        return OperationResult(success=False, error=str(exc))
    return OperationResult(success=True, message="Wrapper service is already running")
