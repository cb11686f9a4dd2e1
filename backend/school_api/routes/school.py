"""
School API Backend — Student / Teacher / Course Route Handlers
================================================================

What:  CRUD endpoints for the three school resources, all behind the auth gate.
How:   build_crud_router() produces one router per resource, wired to the
       matching CrudService instance.

Endpoints per resource (e.g. /students):
    POST   /students          → 201 created record
    GET    /students          → 200 list, oldest first
    GET    /students/{id}     → 200 record | 404
    PUT    /students/{id}     → 200 updated record | 404 (partial update)
    DELETE /students/{id}     → 204 | 404
"""

import uuid
from typing import List, Type

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import get_db_session
from school_api.middleware.auth import require_auth
from school_api.schemas.common import ErrorResponse
from school_api.schemas.school import (
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
    TeacherCreate,
    TeacherResponse,
    TeacherUpdate,
)
from school_api.services.crud_service import (
    CrudService,
    course_service,
    student_service,
    teacher_service,
)

_AUTH_RESPONSES = {
    401: {"description": "No token provided", "model": ErrorResponse},
    403: {"description": "Invalid or expired token", "model": ErrorResponse},
}
_NOT_FOUND = {404: {"description": "Record not found", "model": ErrorResponse}}
_BAD_INPUT = {400: {"description": "Missing fields or duplicate email", "model": ErrorResponse}}


def build_crud_router(
    prefix: str,
    tag: str,
    service: CrudService,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
) -> APIRouter:
    router = APIRouter(
        prefix=prefix,
        tags=[tag],
        dependencies=[Depends(require_auth)],
        responses=_AUTH_RESPONSES,
    )
    noun = service.resource

    @router.post(
        "",
        response_model=response_schema,
        status_code=status.HTTP_201_CREATED,
        responses=_BAD_INPUT,
        summary=f"Create a {noun}",
    )
    async def create_record(
        body: create_schema,
        db: AsyncSession = Depends(get_db_session),
    ):
        return await service.create(db, body)

    @router.get("", response_model=List[response_schema], summary=f"List {noun}s")
    async def list_records(db: AsyncSession = Depends(get_db_session)):
        return await service.list(db)

    @router.get(
        "/{record_id}",
        response_model=response_schema,
        responses=_NOT_FOUND,
        summary=f"Get a {noun} by ID",
    )
    async def get_record(record_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
        return await service.get(db, record_id)

    @router.put(
        "/{record_id}",
        response_model=response_schema,
        responses={**_BAD_INPUT, **_NOT_FOUND},
        summary=f"Update a {noun}",
    )
    async def update_record(
        record_id: uuid.UUID,
        body: update_schema,
        db: AsyncSession = Depends(get_db_session),
    ):
        return await service.update(db, record_id, body)

    @router.delete(
        "/{record_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        responses=_NOT_FOUND,
        summary=f"Delete a {noun}",
    )
    async def delete_record(record_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
        await service.delete(db, record_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


students_router = build_crud_router(
    "/students", "Students", student_service, StudentCreate, StudentUpdate, StudentResponse
)
teachers_router = build_crud_router(
    "/teachers", "Teachers", teacher_service, TeacherCreate, TeacherUpdate, TeacherResponse
)
courses_router = build_crud_router(
    "/courses", "Courses", course_service, CourseCreate, CourseUpdate, CourseResponse
)
