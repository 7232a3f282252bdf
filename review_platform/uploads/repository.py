"""SQL-backed upload catalog over an async SQLAlchemy session."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from review_platform.shared.utils.datetime_utils import ensure_utc, utcnow
from review_platform.shared.utils.logging import get_logger
from review_platform.uploads.base import LookupValue, Submission, Upload
from review_platform.uploads.config import (
    DEFAULT_SUBMISSION_STATUSES,
    DEFAULT_UPLOAD_STATUSES,
    DEFAULT_UPLOAD_TYPES,
)
from review_platform.uploads.exceptions import StorePersistenceError
from review_platform.uploads.filters import Filter
from review_platform.uploads.models import (
    SubmissionRecord,
    SubmissionStatusLookup,
    UploadRecord,
    UploadStatusLookup,
    UploadTypeLookup,
)
from review_platform.uploads.providers import UploadCatalog

logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

LookupModel = type[UploadStatusLookup] | type[UploadTypeLookup] | type[SubmissionStatusLookup]


def _store_operation(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
    """Re-raise SQLAlchemy errors as StorePersistenceError."""

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(
                "catalog_query_failed",
                operation=func.__name__,
                error_type=type(e).__name__,
            )
            raise StorePersistenceError(
                f"Upload catalog {func.__name__} failed",
                {"error_type": type(e).__name__},
            ) from e

    return wrapper


def _to_lookup(row: UploadStatusLookup | UploadTypeLookup | SubmissionStatusLookup) -> LookupValue:
    return LookupValue(id=row.id, name=row.name, description=row.description)


class SqlUploadCatalog(UploadCatalog):
    """Upload catalog stored in the ``upload`` and ``submission`` tables.

    The session is flushed after each write so ids are assigned straight
    away; committing is left to whoever owns the session.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _lookups(self, model: LookupModel) -> list[LookupValue]:
        result = await self.session.execute(select(model).order_by(model.id))
        return [_to_lookup(row) for row in result.scalars().all()]

    @_store_operation
    async def get_all_upload_statuses(self) -> list[LookupValue]:
        return await self._lookups(UploadStatusLookup)

    @_store_operation
    async def get_all_upload_types(self) -> list[LookupValue]:
        return await self._lookups(UploadTypeLookup)

    @_store_operation
    async def get_all_submission_statuses(self) -> list[LookupValue]:
        return await self._lookups(SubmissionStatusLookup)

    @_store_operation
    async def create_upload(self, upload: Upload, operator: str) -> Upload:
        if upload.upload_type is None or upload.status is None:
            raise StorePersistenceError(
                "Upload needs a type and a status",
                {"project_id": upload.project_id},
            )
        now = utcnow()
        record = UploadRecord(
            project_id=upload.project_id,
            owner=upload.owner,
            upload_type_id=upload.upload_type.id,
            upload_status_id=upload.status.id,
            parameter=upload.parameter,
            create_user=operator,
            create_date=now,
            modify_user=operator,
            modify_date=now,
        )
        self.session.add(record)
        await self.session.flush()

        upload.upload_id = record.id
        upload.created_by = upload.modified_by = operator
        upload.created_at = upload.modified_at = now
        return upload

    @_store_operation
    async def create_submission(self, submission: Submission, operator: str) -> Submission:
        if submission.status is None:
            raise StorePersistenceError("Submission needs a status")
        now = utcnow()
        record = SubmissionRecord(
            upload_id=submission.upload_id,
            resource_id=submission.resource_id,
            submission_status_id=submission.status.id,
            create_user=operator,
            create_date=now,
            modify_user=operator,
            modify_date=now,
        )
        self.session.add(record)
        await self.session.flush()

        submission.submission_id = record.id
        submission.created_by = submission.modified_by = operator
        submission.created_at = submission.modified_at = now
        return submission

    @_store_operation
    async def update_submission(self, submission: Submission, operator: str) -> None:
        record = await self.session.get(SubmissionRecord, submission.submission_id)
        if record is None:
            raise StorePersistenceError(
                f"Submission {submission.submission_id} does not exist",
                {"submission_id": submission.submission_id},
            )
        if submission.status is None:
            raise StorePersistenceError(
                "Submission needs a status",
                {"submission_id": submission.submission_id},
            )
        now = utcnow()
        record.submission_status_id = submission.status.id
        record.upload_id = submission.upload_id
        record.resource_id = submission.resource_id
        record.modify_user = operator
        record.modify_date = now
        await self.session.flush()

        submission.modified_by = operator
        submission.modified_at = now

    @_store_operation
    async def get_submission(self, submission_id: int) -> Submission | None:
        record = await self.session.get(SubmissionRecord, submission_id)
        if record is None:
            return None
        statuses = {s.id: s for s in await self._lookups(SubmissionStatusLookup)}
        return self._to_submission(record, statuses)

    @_store_operation
    async def search_submissions(self, search_filter: Filter) -> list[Submission]:
        query = (
            select(SubmissionRecord)
            .where(search_filter.to_clause(SubmissionRecord))
            .order_by(SubmissionRecord.id)
        )
        result = await self.session.execute(query)
        records = result.scalars().all()
        statuses = {s.id: s for s in await self._lookups(SubmissionStatusLookup)}
        return [self._to_submission(record, statuses) for record in records]

    @staticmethod
    def _to_submission(
        record: SubmissionRecord,
        statuses: dict[int, LookupValue],
    ) -> Submission:
        return Submission(
            submission_id=record.id,
            status=statuses.get(record.submission_status_id),
            upload_id=record.upload_id,
            resource_id=record.resource_id,
            created_by=record.create_user,
            created_at=ensure_utc(record.create_date),
            modified_by=record.modify_user,
            modified_at=ensure_utc(record.modify_date),
        )


async def seed_lookup_values(
    session: AsyncSession,
    upload_statuses: list[str] | None = None,
    upload_types: list[str] | None = None,
    submission_statuses: list[str] | None = None,
) -> None:
    """Insert the lookup catalogs into empty lookup tables."""
    catalogs: list[tuple[LookupModel, list[str]]] = [
        (UploadStatusLookup, upload_statuses or DEFAULT_UPLOAD_STATUSES),
        (UploadTypeLookup, upload_types or DEFAULT_UPLOAD_TYPES),
        (SubmissionStatusLookup, submission_statuses or DEFAULT_SUBMISSION_STATUSES),
    ]
    for model, names in catalogs:
        existing = await session.execute(select(model.id).limit(1))
        if existing.scalar_one_or_none() is not None:
            continue
        for i, name in enumerate(names, start=1):
            session.add(model(id=i, name=name, description=""))
    await session.flush()
    logger.info("lookup_values_seeded")
