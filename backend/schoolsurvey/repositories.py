"""Repository classes encapsulating database operations.

Each repository is small and focused on a single collection (schools,
users, courses, surveys, ...). The shared `DocumentRepository` provides
id-based CRUD; subclasses add the filtered queries their collection
needs. Repositories return SQLModel objects and perform commits and
refreshes where appropriate.
"""

from datetime import datetime, timezone
from typing import List, Optional
from sqlmodel import Session, select
from . import models


class DocumentRepository:
    """Id-based CRUD shared by every collection."""
    model = None

    def __init__(self, session: Session):
        self.session = session

    def create(self, obj):
        """Persist a new row and return the managed instance."""
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def create_many(self, objs: List) -> List:
        """Persist all rows in a single commit."""
        self.session.add_all(objs)
        self.session.commit()
        for obj in objs:
            self.session.refresh(obj)
        return objs

    def get(self, doc_id: Optional[str]):
        """Fetch a row by id, or `None` when missing."""
        if not doc_id:
            return None
        return self.session.get(self.model, doc_id)

    def update(self, doc_id: str, changes: dict):
        """Apply `changes` to the row and return it, or `None` when missing.

        `updated_at` is refreshed on models that carry it.
        """
        obj = self.get(doc_id)
        if obj is None:
            return None
        for key, value in changes.items():
            setattr(obj, key, value)
        if "updated_at" in self.model.model_fields:
            obj.updated_at = datetime.now(timezone.utc)
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def delete(self, doc_id: str):
        """Delete the row if present and return it; missing ids are a no-op."""
        obj = self.get(doc_id)
        if obj is None:
            return None
        self.session.delete(obj)
        self.session.commit()
        return obj


class SchoolRepository(DocumentRepository):
    model = models.School

    def list_active(self) -> List[models.School]:
        stmt = select(models.School).where(models.School.is_active == True)  # noqa: E712
        return self.session.exec(stmt).all()

    def get_by_slug(self, slug: str) -> Optional[models.School]:
        """Return the active school with `slug` or `None`."""
        stmt = select(models.School).where(models.School.slug == slug, models.School.is_active == True)  # noqa: E712
        return self.session.exec(stmt).first()


class UserRepository(DocumentRepository):
    model = models.User

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return the active `User` with `email` or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email, models.User.is_active == True)  # noqa: E712
        return self.session.exec(stmt).first()

    def list_by_school(self, school_id: str) -> List[models.User]:
        """Active users of a school, newest first."""
        stmt = (
            select(models.User)
            .where(models.User.school_id == school_id, models.User.is_active == True)  # noqa: E712
            .order_by(models.User.created_at.desc())
        )
        return self.session.exec(stmt).all()

    def list_by_role(self, school_id: str, role: str) -> List[models.User]:
        stmt = select(models.User).where(
            models.User.school_id == school_id,
            models.User.role == role,
            models.User.is_active == True,  # noqa: E712
        )
        return self.session.exec(stmt).all()


class SubjectRepository(DocumentRepository):
    model = models.Subject

    def list_by_school(self, school_id: str) -> List[models.Subject]:
        stmt = select(models.Subject).where(models.Subject.school_id == school_id, models.Subject.is_active == True)  # noqa: E712
        return self.session.exec(stmt).all()


class CourseRepository(DocumentRepository):
    model = models.Course

    def list_by_school(self, school_id: str) -> List[models.Course]:
        stmt = select(models.Course).where(models.Course.school_id == school_id, models.Course.is_active == True)  # noqa: E712
        return self.session.exec(stmt).all()

    def list_by_teacher(self, teacher_id: str) -> List[models.Course]:
        stmt = select(models.Course).where(models.Course.teacher_id == teacher_id, models.Course.is_active == True)  # noqa: E712
        return self.session.exec(stmt).all()


class CourseEnrollmentRepository(DocumentRepository):
    model = models.CourseEnrollment

    def list_by_school(self, school_id: str) -> List[models.CourseEnrollment]:
        """All enrollments of a school, most recently enrolled first."""
        stmt = (
            select(models.CourseEnrollment)
            .where(models.CourseEnrollment.school_id == school_id)
            .order_by(models.CourseEnrollment.enrolled_at.desc())
        )
        return self.session.exec(stmt).all()

    def list_for_student(self, student_id: str) -> List[models.CourseEnrollment]:
        """Active enrollments of one student."""
        stmt = select(models.CourseEnrollment).where(
            models.CourseEnrollment.student_id == student_id,
            models.CourseEnrollment.is_active == True,  # noqa: E712
        )
        return self.session.exec(stmt).all()


class TermRepository(DocumentRepository):
    model = models.Term

    def list_by_school(self, school_id: str) -> List[models.Term]:
        stmt = select(models.Term).where(models.Term.school_id == school_id, models.Term.is_active == True)  # noqa: E712
        return self.session.exec(stmt).all()


class SurveyRepository(DocumentRepository):
    model = models.Survey

    def list_by_course(self, course_id: str) -> List[models.Survey]:
        stmt = select(models.Survey).where(models.Survey.course_id == course_id)
        return self.session.exec(stmt).all()

    def list_by_school(self, school_id: str) -> List[models.Survey]:
        """Active surveys of a school, newest first."""
        stmt = (
            select(models.Survey)
            .where(models.Survey.school_id == school_id, models.Survey.is_active == True)  # noqa: E712
            .order_by(models.Survey.created_at.desc())
        )
        return self.session.exec(stmt).all()

    def list_open_for_courses(self, course_ids: List[str], now: datetime) -> List[models.Survey]:
        """Surveys of `course_ids` with status `active` that close at or after `now`."""
        stmt = select(models.Survey).where(
            models.Survey.course_id.in_(course_ids),
            models.Survey.status == "active",
            models.Survey.closes_at >= now,
        )
        return self.session.exec(stmt).all()


class SurveyQuestionRepository(DocumentRepository):
    model = models.SurveyQuestion

    def list_for_survey(self, survey_id: str) -> List[models.SurveyQuestion]:
        """Questions of a survey in display order."""
        stmt = (
            select(models.SurveyQuestion)
            .where(models.SurveyQuestion.survey_id == survey_id)
            .order_by(models.SurveyQuestion.order)
        )
        return self.session.exec(stmt).all()


class SurveyResponseRepository(DocumentRepository):
    model = models.SurveyResponse

    def list_by_school(self, school_id: str) -> List[models.SurveyResponse]:
        stmt = (
            select(models.SurveyResponse)
            .where(models.SurveyResponse.school_id == school_id)
            .order_by(models.SurveyResponse.submitted_at.desc())
        )
        return self.session.exec(stmt).all()

    def list_for_student(self, survey_id: str, student_id: str) -> List[models.SurveyResponse]:
        stmt = select(models.SurveyResponse).where(
            models.SurveyResponse.survey_id == survey_id,
            models.SurveyResponse.student_id == student_id,
        )
        return self.session.exec(stmt).all()

    def list_for_survey(self, survey_id: str) -> List[models.SurveyResponse]:
        stmt = select(models.SurveyResponse).where(models.SurveyResponse.survey_id == survey_id)
        return self.session.exec(stmt).all()


class NotificationRepository(DocumentRepository):
    model = models.Notification

    def list_recent(self, limit: int) -> List[models.Notification]:
        stmt = select(models.Notification).order_by(models.Notification.created_at.desc()).limit(limit)
        return self.session.exec(stmt).all()

    def list_for_user(self, user_id: str, limit: int) -> List[models.Notification]:
        """Newest notifications addressed to `user_id`, at most `limit`."""
        stmt = (
            select(models.Notification)
            .where(models.Notification.user_id == user_id)
            .order_by(models.Notification.created_at.desc())
            .limit(limit)
        )
        return self.session.exec(stmt).all()
