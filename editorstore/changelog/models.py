"""Change log SQLAlchemy model and Pydantic schemas.

Entries name their target by project name and file name, not by id, so a
remote peer can replay them against its own copy.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from editorstore.db.session import Base


class ChangeType(str, Enum):
    NEW_FILE = "newFile"
    DELETE_FILE = "deleteFile"
    EDIT_FILE = "editFile"


class ChangeLogRecord(Base):
    """Change log table. id is assigned by SQLite and only grows."""

    __tablename__ = "change_logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    file: Mapped[str] = mapped_column(String(1024), nullable=False)
    project: Mapped[str] = mapped_column(String(1024), nullable=False)
    # Present for newFile and editFile
    contents: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class ChangeTarget(BaseModel):
    """File a change applies to: file name and project name."""

    file: str
    project: str


class ChangeEntry(BaseModel):
    """One change, local or remote. type is a plain string so unknown types can be reported."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    type: str
    target: ChangeTarget = Field(alias="file")
    contents: Optional[str] = None

    @classmethod
    def from_record(cls, row: ChangeLogRecord) -> "ChangeEntry":
        return cls(
            id=row.id,
            type=row.type,
            target=ChangeTarget(file=row.file, project=row.project),
            contents=row.contents,
        )


class ApplyChangesRequest(BaseModel):
    """Body of the sync apply endpoint."""

    changes: List[ChangeEntry] = Field(default_factory=list)
    new_projects: List[str] = Field(default_factory=list)
    deleted_projects: List[str] = Field(default_factory=list)
