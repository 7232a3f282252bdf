"""SQLAlchemy ORM models for the upload catalog."""

from datetime import datetime

from sqlalchemy import ForeignKey, Index, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import DateTime, Integer


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------


class UploadStatusLookup(Base):
    __tablename__ = "upload_status_lu"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")


class UploadTypeLookup(Base):
    __tablename__ = "upload_type_lu"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")


class SubmissionStatusLookup(Base):
    __tablename__ = "submission_status_lu"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")


# ---------------------------------------------------------------------------
# Uploads and submissions
# ---------------------------------------------------------------------------


class UploadRecord(Base):
    __tablename__ = "upload"
    __table_args__ = (
        Index("idx_upload_project", "project_id"),
        Index("idx_upload_owner", "owner"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(Integer, nullable=False)
    owner: Mapped[int] = mapped_column(Integer, nullable=False)
    upload_type_id: Mapped[int] = mapped_column(
        ForeignKey("upload_type_lu.id"), nullable=False
    )
    upload_status_id: Mapped[int] = mapped_column(
        ForeignKey("upload_status_lu.id"), nullable=False
    )
    parameter: Mapped[str] = mapped_column(Text, nullable=False)
    create_user: Mapped[str] = mapped_column(Text, nullable=False)
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    modify_user: Mapped[str] = mapped_column(Text, nullable=False)
    modify_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SubmissionRecord(Base):
    __tablename__ = "submission"
    __table_args__ = (Index("idx_submission_resource", "resource_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    upload_id: Mapped[int | None] = mapped_column(ForeignKey("upload.id"))
    resource_id: Mapped[int | None] = mapped_column(Integer)
    submission_status_id: Mapped[int] = mapped_column(
        ForeignKey("submission_status_lu.id"), nullable=False
    )
    create_user: Mapped[str] = mapped_column(Text, nullable=False)
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    modify_user: Mapped[str] = mapped_column(Text, nullable=False)
    modify_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
