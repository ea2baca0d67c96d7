"""Project SQLAlchemy model and Pydantic schemas."""

from datetime import datetime
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from editorstore.db.session import Base, as_utc


class ProjectRecord(Base):
    """Projects table: id is md5(name)."""

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(1024), index=True, nullable=False)
    # question -> file name to run for that question
    runs: Mapped[Dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    last_modified: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Legacy tab bookkeeping, kept for schema compatibility. Tabs live on files.open.
    open_tabs: Mapped[Dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)


class ProjectBrief(BaseModel):
    """Project as listed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    last_modified: datetime

    @field_validator("last_modified")
    @classmethod
    def last_modified_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class ProjectRead(ProjectBrief):
    """Full project record."""

    runs: Dict[str, str] = Field(default_factory=dict)
    open_tabs: Dict[str, str] = Field(default_factory=dict)


class ProjectCreate(BaseModel):
    """Create project request body."""

    name: str


class RunFile(BaseModel):
    """Body for setting the file to run for a question."""

    file: str
