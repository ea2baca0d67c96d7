"""Editor settings: a single row keyed by SETTINGS_KEY."""

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from editorstore.db.session import Base

SETTINGS_KEY = 0


class SettingsRecord(Base):
    """Settings table. Exactly one row, id == SETTINGS_KEY."""

    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    editor_mode: Mapped[int] = mapped_column(Integer, nullable=False)
    font_size: Mapped[int] = mapped_column(Integer, nullable=False)
    font: Mapped[str] = mapped_column(String(255), nullable=False)
    theme: Mapped[int] = mapped_column(Integer, nullable=False)
    space_tab: Mapped[bool] = mapped_column(Boolean, nullable=False)
    tab_width: Mapped[int] = mapped_column(Integer, nullable=False)


class EditorSettings(BaseModel):
    """Editor settings. Defaults are what a fresh install shows."""

    model_config = ConfigDict(from_attributes=True)

    editor_mode: int = 0
    font_size: int = 13
    font: str = "Consolas"
    theme: int = 1
    space_tab: bool = True
    tab_width: int = 1
