"""
School API Backend — Student / Teacher / Course Schemas
=========================================================

What:  Create, update and response models for the protected CRUD resources.

Create models leave required fields Optional so that CrudService can report
absent or blank values as MissingFields (400). Update models are partial:
only fields present in the request body are applied.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


# ── Students ──────────────────────────────────────────────────────────────

class StudentCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class StudentUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class StudentResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Teachers ──────────────────────────────────────────────────────────────

class TeacherCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None


class TeacherUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None


class TeacherResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    subject: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Courses ───────────────────────────────────────────────────────────────

class CourseCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class CourseResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
