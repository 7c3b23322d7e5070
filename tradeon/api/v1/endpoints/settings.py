"""Site settings: public read, admin write."""
import logging
from typing import Dict

from fastapi import APIRouter, HTTPException, status

from tradeon.api.deps import DB, AdminUser
from tradeon.schemas.settings import SettingsUpdate
from tradeon.services.settings_service import SettingsService, get_settings_store


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Settings"])


@router.get("", response_model=Dict[str, str])
async def get_site_settings():
    """Merged settings map (stored overrides over defaults)."""
    return await get_settings_store().get()


@router.put("", response_model=Dict[str, str])
async def update_site_settings(
    data: SettingsUpdate,
    db: DB,
    admin: AdminUser,
):
    """
    Upsert settings and reload the cached map.
    Requires: admin role
    """
    await SettingsService(db).upsert(data.values, updated_by=admin.id)
    return await get_settings_store().refresh()


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_site_setting(
    key: str,
    db: DB,
    admin: AdminUser,
):
    """Drop a stored override; the default value applies again."""
    deleted = await SettingsService(db).delete(key)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Setting '{key}' not found"
        )
    logger.info(f"Setting '{key}' reset to default by {admin.id}")
    await get_settings_store().refresh()
