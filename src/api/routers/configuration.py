"""Configuration and credential status endpoints for the DL Console API."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from api.models import AuthStatusResponse, ConfigResponse, ConfigUpdate, OperationResult
from api.shared import get_storage
from core.errors import ConfigError
from storage.base import ConfigStorage  # noqa: TC001

logger = logging.getLogger(__name__)

router = APIRouter()

StorageDep = Annotated[ConfigStorage, Depends(get_storage)]


@router.get("/api/config")
async def read_config(storage: StorageDep) -> ConfigResponse:
    """Return the configuration fields the UI can edit.

    Raises
    ------
    HTTPException
        500 if the configuration file cannot be parsed.

    """
    try:
        config = await asyncio.to_thread(storage.load)
    except ConfigError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return ConfigResponse(
        media_user_token=config.media_user_token,
        storefront=config.storefront,
        alac_save_folder=config.alac_save_folder,
        atmos_save_folder=config.atmos_save_folder,
        aac_save_folder=config.aac_save_folder,
    )


@router.post("/api/config", response_model_exclude_none=True)
async def update_config(update: ConfigUpdate, storage: StorageDep) -> OperationResult:
    """Merge the submitted fields into the configuration file."""
    changes = update.model_dump(exclude_none=True)
    try:
        await asyncio.to_thread(storage.update, changes)
    except ConfigError as exc:
        logger.warning("Config update failed: %s", exc)
        return OperationResult(success=False, error=str(exc))
    return OperationResult(success=True)


@router.get("/api/auth/status")
async def auth_status(storage: StorageDep) -> AuthStatusResponse:
    """Report whether a media user token is configured."""
    try:
        config = await asyncio.to_thread(storage.load)
    except ConfigError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return AuthStatusResponse(hasMediaUserToken=config.has_media_user_token, storefront=config.storefront)
