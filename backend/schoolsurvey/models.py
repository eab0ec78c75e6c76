"""SQLModel data models.

This module defines the stored documents using SQLModel. Every table has a
string primary key and relationships are plain string ids; no foreign key
constraints are declared, so referencing a missing document is allowed.
"""

from typing import List, Optional
from uuid import uuid4
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from datetime import datetime, timezone


def _new_id() -> str:
    return uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class School(SQLModel, table=True):
    """A school tenant. `slug` is the unique short name used in URLs."""
    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str
    slug: str = Field(index=True, unique=True)
    abbreviation: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    settings: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    is_active: bool = True
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class User(SQLModel, table=True):
    """A member of a school.

    Fields:
    - `role`: one of admin, teacher, student or parent
    - `password_hash`: hashed password string (never store plaintext)
    """
    id: str = Field(default_factory=_new_id, primary_key=True)
    school_id: str = Field(index=True)
    unique_id: str
    email: str = Field(index=True, unique=True)
    full_name: str
    role: str = Field(index=True)
    class_number: Optional[str] = None
    admin_code: Optional[str] = None
    teacher_code: Optional[str] = None
    email_verified: bool = False
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None
    verification_token: Optional[str] = None
    password_hash: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Subject(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    school_id: str = Field(index=True)
    name: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Course(SQLModel, table=True):
    """A taught class of a subject for one term."""
    id: str = Field(default_factory=_new_id, primary_key=True)
    school_id: str = Field(index=True)
    subject_id: str
    teacher_id: str
    name: str
    class_number: str
    term: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class CourseEnrollment(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    school_id: str = Field(index=True)
    course_id: str = Field(index=True)
    student_id: str = Field(index=True)
    enrolled_at: datetime = Field(default_factory=_now)
    is_active: bool = True


class Term(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    school_id: str = Field(index=True)
    academic_year_id: str
    name: str
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Survey(SQLModel, table=True):
    """A feedback survey attached to a course.

    `survey_type` is weekly, term or semester; `status` moves between
    draft, active and closed.
    """
    id: str = Field(default_factory=_new_id, primary_key=True)
    school_id: str = Field(index=True)
    course_id: str = Field(index=True)
    title: str
    description: Optional[str] = None
    survey_type: str
    status: str = "draft"
    opens_at: datetime
    closes_at: datetime
    is_active: bool = True
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class SurveyQuestion(SQLModel, table=True):
    id: str = Field(default_factory=_new_id, primary_key=True)
    school_id: str
    survey_id: str = Field(index=True)
    question_text: str
    question_type: str
    options: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    is_required: bool = True
    order: int


class SurveyResponse(SQLModel, table=True):
    """One student's answer to one survey question."""
    id: str = Field(default_factory=_new_id, primary_key=True)
    school_id: str = Field(index=True)
    survey_id: str = Field(index=True)
    question_id: str
    student_id: str = Field(index=True)
    response_value: str
    submitted_at: datetime = Field(default_factory=_now)


class Notification(SQLModel, table=True):
    """A message for one user (`user_id`) or a whole role (`target_role`)."""
    id: str = Field(default_factory=_new_id, primary_key=True)
    school_id: Optional[str] = None
    user_id: Optional[str] = Field(default=None, index=True)
    target_role: Optional[str] = None
    title: str
    message: str
    type: str = "info"
    is_read: bool = False
    created_at: datetime = Field(default_factory=_now)
