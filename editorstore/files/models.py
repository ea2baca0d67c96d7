"""File SQLAlchemy model and Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from editorstore.db.session import Base, as_utc


class FileRecord(Base):
    """Files table: id is md5(project_id + name), see editorstore.identity."""

    __tablename__ = "files"
    __table_args__ = (
        Index("ix_files_name_project", "name", "project_id", unique=True),
        Index("ix_files_project_open", "project_id", "open"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    project_id: Mapped[str] = mapped_column(String(32), ForeignKey("projects.id"), index=True, nullable=False)
    # Path inside the project, e.g. "q1/main.c" or "common/util.h"
    name: Mapped[str] = mapped_column(String(1024), index=True, nullable=False)
    # None = cleared file (checksum is then "")
    contents: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    checksum: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    last_modified: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Editor tab state only; never written to the change log
    open: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class FileBrief(BaseModel):
    """File without contents, for listings."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    name: str
    checksum: str
    last_modified: datetime
    open: bool

    @field_validator("last_modified")
    @classmethod
    def last_modified_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class FileRead(FileBrief):
    """Full file as returned by read_file."""

    contents: Optional[str] = None


# Request bodies for the local API
class FileCreate(BaseModel):
    """Create a file in a project. With base64=True a data URI in contents is decoded."""

    project_id: str
    name: str
    contents: str = ""
    base64: bool = False


class FileWrite(BaseModel):
    """New contents for a file. None clears it."""

    contents: Optional[str] = None


class FileRename(BaseModel):
    """Rename request body."""

    name: str
