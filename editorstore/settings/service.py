"""Editor settings: read (defaults when never saved) and full overwrite."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from editorstore.settings.models import SETTINGS_KEY, EditorSettings, SettingsRecord

log = logging.getLogger(__name__)


async def get_settings(session: AsyncSession) -> EditorSettings:
    """Stored settings, or the defaults if none were saved yet."""
    row = await session.get(SettingsRecord, SETTINGS_KEY)
    if row is None:
        return EditorSettings()
    return EditorSettings.model_validate(row)


async def set_settings(session: AsyncSession, settings: EditorSettings) -> None:
    """Overwrite every field of the settings row. Caller must commit."""
    await session.merge(SettingsRecord(id=SETTINGS_KEY, **settings.model_dump()))
    await session.flush()
    log.debug("set_settings %s", settings.model_dump())
