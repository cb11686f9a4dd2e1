"""
School API Backend — Generic CRUD Service
===========================================

What:  Create / list / get / update / delete for one ORM model.
How:   One CrudService instance per resource (students, teachers, courses),
       configured with the model, its response schema, its required fields
       and whether it carries a unique email.
Who:   Called by the protected resource routers.

Error mapping:
    required field absent/blank   → MissingFieldsError (400)
    UNIQUE(email) violation       → DuplicateRecordError (400)
    unknown id                    → NotFoundError (404)
    any other database failure    → StorageError (500)
"""

import logging
import uuid
from typing import Generic, List, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import Base
from school_api.exceptions import (
    DuplicateRecordError,
    MissingFieldsError,
    NotFoundError,
    StorageError,
)
from school_api.models.school import Course, Student, Teacher
from school_api.schemas.school import CourseResponse, StudentResponse, TeacherResponse

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
ResponseT = TypeVar("ResponseT", bound=BaseModel)


class CrudService(Generic[ModelT, ResponseT]):
    """Business logic for a single flat resource."""

    def __init__(
        self,
        model: Type[ModelT],
        response_schema: Type[ResponseT],
        resource: str,
        required: Sequence[str],
        has_email: bool = False,
    ):
        self.model = model
        self.response_schema = response_schema
        self.resource = resource
        self.required = tuple(required)
        self.has_email = has_email

    async def create(self, db: AsyncSession, payload: BaseModel) -> ResponseT:
        data = self._clean(payload.model_dump())
        missing = [field for field in self.required if not data.get(field)]
        if missing:
            raise MissingFieldsError(missing)

        record = self.model(id=uuid.uuid4(), **data)
        db.add(record)
        await self._flush(db, "create")
        logger.info("Created %s %s", self.resource, record.id)
        return self.response_schema.model_validate(record)

    async def list(self, db: AsyncSession) -> List[ResponseT]:
        try:
            result = await db.execute(select(self.model).order_by(self.model.created_at))
            records = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing %s: %s", self.resource, type(e).__name__, exc_info=True)
            raise StorageError(context={"resource": self.resource, "operation": "list"}) from e
        return [self.response_schema.model_validate(record) for record in records]

    async def get(self, db: AsyncSession, record_id: uuid.UUID) -> ResponseT:
        record = await self._load(db, record_id)
        return self.response_schema.model_validate(record)

    async def update(self, db: AsyncSession, record_id: uuid.UUID, payload: BaseModel) -> ResponseT:
        """Partial update: only fields present in the request body change."""
        changes = self._clean(payload.model_dump(exclude_unset=True))
        blank = [field for field in self.required if field in changes and not changes[field]]
        if blank:
            raise MissingFieldsError(blank)

        record = await self._load(db, record_id)
        for field, value in changes.items():
            setattr(record, field, value)
        await self._flush(db, "update")
        logger.info("Updated %s %s (%s)", self.resource, record_id, ", ".join(sorted(changes)) or "no changes")
        return self.response_schema.model_validate(record)

    async def delete(self, db: AsyncSession, record_id: uuid.UUID) -> None:
        record = await self._load(db, record_id)
        await db.delete(record)
        await self._flush(db, "delete")
        logger.info("Deleted %s %s", self.resource, record_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    def _clean(self, data: dict) -> dict:
        """Trim strings; store emails in the same normalised form as logins."""
        cleaned = {}
        for field, value in data.items():
            if isinstance(value, str):
                value = value.strip()
                if field == "email" and self.has_email:
                    value = value.lower()
            cleaned[field] = value
        return cleaned

    async def _load(self, db: AsyncSession, record_id: uuid.UUID) -> ModelT:
        try:
            record = await db.get(self.model, record_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching %s %s: %s", self.resource, record_id, type(e).__name__)
            raise StorageError(context={"resource": self.resource, "operation": "get"}) from e
        if record is None:
            raise NotFoundError(resource=self.resource, resource_id=str(record_id))
        return record

    async def _flush(self, db: AsyncSession, operation: str) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            if self.has_email:
                raise DuplicateRecordError(resource=self.resource) from e
            logger.error("Integrity error on %s %s", operation, self.resource, exc_info=True)
            raise StorageError(context={"resource": self.resource, "operation": operation}) from e
        except SQLAlchemyError as e:
            logger.error("Database error on %s %s: %s", operation, self.resource, type(e).__name__, exc_info=True)
            raise StorageError(context={"resource": self.resource, "operation": operation}) from e


# ── Singleton Instances ───────────────────────────────────────────────────
student_service = CrudService(Student, StudentResponse, "student", required=("name", "email"), has_email=True)
teacher_service = CrudService(Teacher, TeacherResponse, "teacher", required=("name", "email"), has_email=True)
course_service = CrudService(Course, CourseResponse, "course", required=("title",))
