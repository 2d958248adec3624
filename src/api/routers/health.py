"""Health check and host information endpoints for the DL Console API."""

from __future__ import annotations

import platform

from fastapi import APIRouter

from api.models import SystemInfo

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify that the server is running.

    Returns
    -------
    dict[str, str]
        A JSON object with a "status" key indicating the server's health status.

    """
    return {"status": "ok"}


@router.get("/api/system/info")
async def system_info() -> SystemInfo:
    """Describe the host operating system and interpreter."""
    os_info = f"{platform.system().lower()}/{platform.machine().lower()}"
    python_version = platform.python_version()
    return SystemInfo(
        os=os_info,
        python=python_version,
        runtime=f"Python {python_version} on {os_info}",
    )
