"""Database service used by HTTP controllers.

`DatabaseService` is the single persistence facade behind the route
handlers: one method per operation, each accepting plain data and
returning plain documents. It validates create/update payloads against
the schemas in `schemas`, persists through the repositories and
serialises rows into documents keyed by `_id`. Any failure propagates as
an exception; translating it into an HTTP response is the caller's job.
"""

from datetime import datetime, timezone
from typing import List, Optional
from passlib.context import CryptContext
from sqlmodel import Session
from . import models, repositories, schemas
from .config import settings

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SECRET_FIELDS = {"password_hash", "verification_token"}


def to_document(obj, **related) -> Optional[dict]:
    """Serialise a row as a document, embedding `related` rows by name.

    The primary key is exposed as `_id`; secret columns are omitted.
    """
    if obj is None:
        return None
    data = obj.model_dump(exclude=SECRET_FIELDS)
    doc = {"_id": data.pop("id"), **data}
    for name, row in related.items():
        doc[name] = to_document(row)
    return doc


def hash_password(password: str) -> str:
    return PWD_CTX.hash(password)


class DatabaseService:
    """Persistence operations for every school-survey collection."""
    def __init__(self, session: Session):
        self.session = session
        self.schools = repositories.SchoolRepository(session)
        self.users = repositories.UserRepository(session)
        self.subjects = repositories.SubjectRepository(session)
        self.courses = repositories.CourseRepository(session)
        self.enrollments = repositories.CourseEnrollmentRepository(session)
        self.terms = repositories.TermRepository(session)
        self.surveys = repositories.SurveyRepository(session)
        self.questions = repositories.SurveyQuestionRepository(session)
        self.responses = repositories.SurveyResponseRepository(session)
        self.notifications = repositories.NotificationRepository(session)

    # schools

    def get_all_schools(self) -> List[dict]:
        return [to_document(s) for s in self.schools.list_active()]

    def get_school_by_slug(self, slug: str) -> Optional[dict]:
        return to_document(self.schools.get_by_slug(slug))

    def create_school(self, data: dict) -> dict:
        payload = schemas.SchoolIn.model_validate(data)
        school = models.School(**payload.model_dump(exclude_none=True))
        return to_document(self.schools.create(school))

    # users

    def create_user(self, data: dict) -> dict:
        """Create a user, hashing `password` into `password_hash` when given."""
        payload = schemas.UserIn.model_validate(data)
        fields = payload.model_dump(exclude_none=True, exclude={"password"})
        if payload.password:
            fields["password_hash"] = hash_password(payload.password)
        return to_document(self.users.create(models.User(**fields)))

    def update_user(self, user_id: str, data: dict) -> Optional[dict]:
        payload = schemas.UserUpdate.model_validate(data)
        changes = payload.model_dump(exclude_unset=True, exclude={"password"})
        if payload.password:
            changes["password_hash"] = hash_password(payload.password)
        return to_document(self.users.update(user_id, changes))

    def get_user_by_email(self, email: str) -> Optional[dict]:
        user = self.users.get_by_email(email)
        if user is None:
            return None
        return to_document(user, school=self.schools.get(user.school_id))

    def get_user_by_id(self, user_id: str) -> Optional[dict]:
        user = self.users.get(user_id)
        if user is None:
            return None
        return to_document(user, school=self.schools.get(user.school_id))

    def get_users_by_school(self, school_id: str) -> List[dict]:
        return [to_document(u) for u in self.users.list_by_school(school_id)]

    def get_users_by_role(self, school_id: str, role: str) -> List[dict]:
        return [to_document(u) for u in self.users.list_by_role(school_id, role)]

    def delete_user(self, user_id: str) -> None:
        self.users.delete(user_id)

    # subjects

    def get_subjects_by_school(self, school_id: str) -> List[dict]:
        return [to_document(s) for s in self.subjects.list_by_school(school_id)]

    def create_subject(self, data: dict) -> dict:
        payload = schemas.SubjectIn.model_validate(data)
        return to_document(self.subjects.create(models.Subject(**payload.model_dump(exclude_none=True))))

    def update_subject(self, subject_id: str, data: dict) -> Optional[dict]:
        changes = schemas.SubjectUpdate.model_validate(data).model_dump(exclude_unset=True)
        return to_document(self.subjects.update(subject_id, changes))

    def delete_subject(self, subject_id: str) -> None:
        self.subjects.delete(subject_id)

    # courses

    def _course_document(self, course: models.Course) -> dict:
        return to_document(
            course,
            subject=self.subjects.get(course.subject_id),
            teacher=self.users.get(course.teacher_id),
        )

    def get_courses_by_school(self, school_id: str) -> List[dict]:
        """Active courses of a school with `subject` and `teacher` embedded."""
        return [self._course_document(c) for c in self.courses.list_by_school(school_id)]

    def get_courses_by_teacher(self, teacher_id: str) -> List[dict]:
        return [self._course_document(c) for c in self.courses.list_by_teacher(teacher_id)]

    def get_course_by_id(self, course_id: str) -> Optional[dict]:
        return to_document(self.courses.get(course_id))

    def create_course(self, data: dict) -> dict:
        payload = schemas.CourseIn.model_validate(data)
        return to_document(self.courses.create(models.Course(**payload.model_dump(exclude_none=True))))

    def delete_course(self, course_id: str) -> None:
        self.courses.delete(course_id)

    # course enrollments

    def get_all_course_enrollments(self, school_id: str) -> List[dict]:
        """Every enrollment of a school with `student` and `course` embedded."""
        return [
            to_document(e, student=self.users.get(e.student_id), course=self.courses.get(e.course_id))
            for e in self.enrollments.list_by_school(school_id)
        ]

    def get_student_courses(self, student_id: str) -> List[dict]:
        """Active enrollments of a student.

        Each enrollment embeds its `course`, which in turn embeds `subject`
        and `teacher`.
        """
        enrollments = []
        for e in self.enrollments.list_for_student(student_id):
            doc = to_document(e)
            course = self.courses.get(e.course_id)
            doc["course"] = self._course_document(course) if course is not None else None
            enrollments.append(doc)
        return enrollments

    def create_course_enrollment(self, data: dict) -> dict:
        payload = schemas.CourseEnrollmentIn.model_validate(data)
        enrollment = models.CourseEnrollment(**payload.model_dump(exclude_none=True))
        return to_document(self.enrollments.create(enrollment))

    def update_course_enrollment(self, enrollment_id: str, data: dict) -> Optional[dict]:
        changes = schemas.CourseEnrollmentUpdate.model_validate(data).model_dump(exclude_unset=True)
        return to_document(self.enrollments.update(enrollment_id, changes))

    def delete_course_enrollment(self, enrollment_id: str) -> None:
        self.enrollments.delete(enrollment_id)

    # terms

    def get_terms_by_school(self, school_id: str) -> List[dict]:
        return [to_document(t) for t in self.terms.list_by_school(school_id)]

    def create_term(self, data: dict) -> dict:
        payload = schemas.TermIn.model_validate(data)
        return to_document(self.terms.create(models.Term(**payload.model_dump(exclude_none=True))))

    # surveys

    def get_surveys_by_course(self, course_id: str) -> List[dict]:
        return [to_document(s, course=self.courses.get(s.course_id)) for s in self.surveys.list_by_course(course_id)]

    def get_surveys_by_school(self, school_id: str) -> List[dict]:
        return [to_document(s, course=self.courses.get(s.course_id)) for s in self.surveys.list_by_school(school_id)]

    def get_active_surveys_by_courses(self, course_ids: List[str]) -> List[dict]:
        """Open surveys (status `active`, not yet closed) of the given courses."""
        if not course_ids:
            return []
        now = datetime.now(timezone.utc)
        return [
            to_document(s, course=self.courses.get(s.course_id))
            for s in self.surveys.list_open_for_courses(course_ids, now)
        ]

    def create_survey(self, data: dict) -> dict:
        payload = schemas.SurveyIn.model_validate(data)
        return to_document(self.surveys.create(models.Survey(**payload.model_dump(exclude_none=True))))

    def update_survey(self, survey_id: str, data: dict) -> Optional[dict]:
        changes = schemas.SurveyUpdate.model_validate(data).model_dump(exclude_unset=True)
        return to_document(self.surveys.update(survey_id, changes))

    def delete_survey(self, survey_id: str) -> None:
        self.surveys.delete(survey_id)

    # survey questions

    def get_survey_questions(self, survey_id: str) -> List[dict]:
        return [to_document(q) for q in self.questions.list_for_survey(survey_id)]

    def create_survey_questions(self, items: List[dict]) -> List[dict]:
        """Validate every question first, then insert them in one commit."""
        payloads = [schemas.SurveyQuestionIn.model_validate(item) for item in items]
        rows = [models.SurveyQuestion(**p.model_dump(exclude_none=True)) for p in payloads]
        return [to_document(q) for q in self.questions.create_many(rows)]

    def delete_survey_question(self, question_id: str) -> None:
        self.questions.delete(question_id)

    # survey responses

    def get_survey_responses_by_school(self, school_id: str) -> List[dict]:
        return [
            to_document(r, survey=self.surveys.get(r.survey_id), question=self.questions.get(r.question_id))
            for r in self.responses.list_by_school(school_id)
        ]

    def get_survey_responses(self, survey_id: str, student_id: str) -> List[dict]:
        return [
            to_document(r, question=self.questions.get(r.question_id))
            for r in self.responses.list_for_student(survey_id, student_id)
        ]

    def get_survey_responses_by_survey(self, survey_id: str) -> List[dict]:
        return [
            to_document(r, question=self.questions.get(r.question_id), student=self.users.get(r.student_id))
            for r in self.responses.list_for_survey(survey_id)
        ]

    def create_survey_response(self, data: dict) -> dict:
        payload = schemas.SurveyResponseIn.model_validate(data)
        response = models.SurveyResponse(**payload.model_dump(exclude_none=True))
        return to_document(self.responses.create(response))

    # notifications

    def get_all_notifications(self) -> List[dict]:
        return [to_document(n) for n in self.notifications.list_recent(settings.NOTIFICATION_LIMIT)]

    def get_notifications_by_user(self, user_id: str) -> List[dict]:
        return [to_document(n) for n in self.notifications.list_for_user(user_id, settings.NOTIFICATION_LIMIT)]

    def create_notification(self, data: dict) -> dict:
        payload = schemas.NotificationIn.model_validate(data)
        return to_document(self.notifications.create(models.Notification(**payload.model_dump(exclude_none=True))))

    def update_notification(self, notification_id: str, data: dict) -> Optional[dict]:
        changes = schemas.NotificationUpdate.model_validate(data).model_dump(exclude_unset=True)
        return to_document(self.notifications.update(notification_id, changes))
