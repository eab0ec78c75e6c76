"""Pydantic request schemas used by the database service.

Route handlers pass request bodies through untouched; the service
validates them against these schemas before building table rows, so a
malformed document fails inside the delegated call like any other
database error. `*Update` schemas have every field optional and are
applied with `exclude_unset`.
"""

from pydantic import BaseModel, field_validator
from datetime import datetime, timezone
from typing import List, Literal, Optional

Role = Literal["admin", "teacher", "student", "parent"]
SurveyType = Literal["weekly", "term", "semester"]
SurveyStatus = Literal["draft", "active", "closed"]
QuestionType = Literal["rating", "multiple_choice", "text"]


class DocumentIn(BaseModel):
    """Base for payload schemas; datetimes are stored as UTC.

    Values without an offset (`2025-07-14`, `2025-07-14T00:00:00`) are taken
    to be UTC already, others are converted.
    """

    @field_validator("*")
    @classmethod
    def datetimes_as_utc(cls, value):
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        return value


class SchoolIn(DocumentIn):
    name: str
    slug: str
    abbreviation: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    settings: Optional[dict] = None
    is_active: bool = True


class UserIn(DocumentIn):
    """Payload for creating a user. `password` is hashed, never stored."""
    school_id: str
    unique_id: str
    email: str
    full_name: str
    role: Role
    class_number: Optional[str] = None
    admin_code: Optional[str] = None
    teacher_code: Optional[str] = None
    email_verified: bool = False
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None
    password: Optional[str] = None
    is_active: bool = True


class UserUpdate(DocumentIn):
    school_id: Optional[str] = None
    unique_id: Optional[str] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[Role] = None
    class_number: Optional[str] = None
    admin_code: Optional[str] = None
    teacher_code: Optional[str] = None
    email_verified: Optional[bool] = None
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None
    password: Optional[str] = None
    is_active: Optional[bool] = None


class SubjectIn(DocumentIn):
    school_id: str
    name: str
    description: Optional[str] = None
    is_active: bool = True


class SubjectUpdate(DocumentIn):
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class CourseIn(DocumentIn):
    school_id: str
    subject_id: str
    teacher_id: str
    name: str
    class_number: str
    term: str
    description: Optional[str] = None
    is_active: bool = True


class CourseEnrollmentIn(DocumentIn):
    school_id: str
    course_id: str
    student_id: str
    enrolled_at: Optional[datetime] = None
    is_active: bool = True


class CourseEnrollmentUpdate(DocumentIn):
    course_id: Optional[str] = None
    student_id: Optional[str] = None
    is_active: Optional[bool] = None


class TermIn(DocumentIn):
    school_id: str
    academic_year_id: str
    name: str
    start_date: datetime
    end_date: datetime
    is_active: bool = True


class SurveyIn(DocumentIn):
    school_id: str
    course_id: str
    title: str
    description: Optional[str] = None
    survey_type: SurveyType
    status: SurveyStatus = "draft"
    opens_at: datetime
    closes_at: datetime
    is_active: bool = True


class SurveyUpdate(DocumentIn):
    course_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    survey_type: Optional[SurveyType] = None
    status: Optional[SurveyStatus] = None
    opens_at: Optional[datetime] = None
    closes_at: Optional[datetime] = None
    is_active: Optional[bool] = None


class SurveyQuestionIn(DocumentIn):
    school_id: str
    survey_id: str
    question_text: str
    question_type: QuestionType
    options: Optional[List[str]] = None
    is_required: bool = True
    order: int


class SurveyResponseIn(DocumentIn):
    school_id: str
    survey_id: str
    question_id: str
    student_id: str
    response_value: str
    submitted_at: Optional[datetime] = None


class NotificationIn(DocumentIn):
    title: str
    message: str
    type: str = "info"
    school_id: Optional[str] = None
    user_id: Optional[str] = None
    target_role: Optional[str] = None
    is_read: bool = False


class NotificationUpdate(DocumentIn):
    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[str] = None
    is_read: Optional[bool] = None
