"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the school survey backend.
Controllers are intentionally thin: each one checks that required
identifiers are present, delegates to exactly one `DatabaseService`
method and wraps the result in a JSON envelope keyed by resource name.
Failures of the delegated call are logged and answered with a generic
500 message (see `errors`).

Endpoints implemented (all under /api/mongodb unless noted):
- GET/POST /schools
- GET/POST /courses, GET/DELETE /courses/{id}
- GET/POST /course-enrollments, PUT/DELETE /course-enrollments/{id}
- GET/POST /subjects, PUT/DELETE /subjects/{id}
- GET/POST /surveys, PUT/DELETE /surveys/{id}
- GET/POST /survey-questions, DELETE /survey-questions/{id}
- GET/POST /survey-responses
- GET/POST /terms
- GET/POST/PUT /users, DELETE /users/{id}
- GET /notifications, PUT /notifications/{id}
- GET/POST /api/notifications/admin
- GET /api/navigation/breadcrumbs
- GET /health
"""

from fastapi import FastAPI, Depends, Query, Request
from fastapi.responses import Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
import json
import logging
import time
import uuid
from .config import settings
from .database import create_db_and_tables, get_session
from .errors import MissingParameter, failure_message, register_error_handlers
from .services import DatabaseService
from .utils.navigation import breadcrumb_trail

app = FastAPI(title="School Survey API")
logger = logging.getLogger("schoolsurvey.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

# Wide-open CORS lets the browser portal run from a separate dev server.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_error_handlers(app)
create_db_and_tables()


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    if request.url.path.startswith("/api"):
        logger.info(
            "request_done %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
    return response


def get_database_service(db: Session = Depends(get_session)) -> DatabaseService:
    """FastAPI dependency returning the request-scoped `DatabaseService`."""
    return DatabaseService(db)


async def read_body(request: Request) -> bytes:
    """Raw request body. Handlers decode it inside their failure scope so a
    malformed body is reported with the route's own message."""
    return await request.body()


def _require(value, message: str):
    if not value:
        raise MissingParameter(message)
    return value


def _field(payload, name: str):
    """`payload[name]` for JSON objects, `None` for any other JSON value."""
    if isinstance(payload, dict):
        return payload.get(name)
    return None


# schools

@app.get('/api/mongodb/schools')
def list_schools(slug: str | None = None, svc: DatabaseService = Depends(get_database_service)):
    """List active schools, or look one up by `slug`."""
    with failure_message('Failed to fetch schools'):
        if slug:
            return {'school': svc.get_school_by_slug(slug)}
        schools = svc.get_all_schools()
    return {'schools': schools}


@app.post('/api/mongodb/schools')
def create_school(body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to create school'):
        school = svc.create_school(json.loads(body))
    return {'school': school}


# courses

@app.get('/api/mongodb/courses')
def list_courses(school_id: str | None = Query(default=None, alias='schoolId'), svc: DatabaseService = Depends(get_database_service)):
    """List active courses of a school with subject and teacher embedded."""
    _require(school_id, 'School ID is required')
    with failure_message('Failed to fetch courses'):
        courses = svc.get_courses_by_school(school_id)
    return {'courses': courses}


@app.post('/api/mongodb/courses')
def create_course(body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to create course'):
        course = svc.create_course(json.loads(body))
    return {'course': course}


@app.get('/api/mongodb/courses/{course_id}')
def get_course(course_id: str, svc: DatabaseService = Depends(get_database_service)):
    """Return a single course; unknown ids yield `{"course": null}`."""
    with failure_message('Failed to fetch course'):
        course = svc.get_course_by_id(course_id)
    return {'course': course}


@app.delete('/api/mongodb/courses/{course_id}')
def delete_course(course_id: str, svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to delete course'):
        svc.delete_course(course_id)
    return {'success': True}


# course enrollments

@app.get('/api/mongodb/course-enrollments')
def list_course_enrollments(school_id: str | None = Query(default=None, alias='schoolId'), svc: DatabaseService = Depends(get_database_service)):
    _require(school_id, 'School ID is required')
    with failure_message('Failed to fetch course enrollments'):
        enrollments = svc.get_all_course_enrollments(school_id)
    return {'enrollments': enrollments}


@app.post('/api/mongodb/course-enrollments')
def create_course_enrollment(body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to create course enrollment'):
        enrollment = svc.create_course_enrollment(json.loads(body))
    return {'enrollment': enrollment}


@app.put('/api/mongodb/course-enrollments/{enrollment_id}')
def update_course_enrollment(enrollment_id: str, body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to update course enrollment'):
        enrollment = svc.update_course_enrollment(enrollment_id, json.loads(body))
    return {'enrollment': enrollment}


@app.delete('/api/mongodb/course-enrollments/{enrollment_id}')
def delete_course_enrollment(enrollment_id: str, svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to delete course enrollment'):
        svc.delete_course_enrollment(enrollment_id)
    return {'success': True}


# subjects

@app.get('/api/mongodb/subjects')
def list_subjects(school_id: str | None = Query(default=None, alias='schoolId'), svc: DatabaseService = Depends(get_database_service)):
    _require(school_id, 'School ID is required')
    with failure_message('Failed to fetch subjects'):
        subjects = svc.get_subjects_by_school(school_id)
    return {'subjects': subjects}


@app.post('/api/mongodb/subjects')
def create_subject(body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to create subject'):
        subject = svc.create_subject(json.loads(body))
    return {'subject': subject}


@app.put('/api/mongodb/subjects/{subject_id}')
def update_subject(subject_id: str, body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to update subject'):
        subject = svc.update_subject(subject_id, json.loads(body))
    return {'subject': subject}


@app.delete('/api/mongodb/subjects/{subject_id}')
def delete_subject(subject_id: str, svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to delete subject'):
        svc.delete_subject(subject_id)
    return {'success': True}


# surveys

@app.get('/api/mongodb/surveys')
def list_surveys(
    course_id: str | None = Query(default=None, alias='courseId'),
    school_id: str | None = Query(default=None, alias='schoolId'),
    svc: DatabaseService = Depends(get_database_service),
):
    """List surveys of a course, or failing that, the active surveys of a school."""
    if not course_id and not school_id:
        raise MissingParameter('Missing parameters')
    with failure_message('Failed to fetch surveys'):
        if course_id:
            surveys = svc.get_surveys_by_course(course_id)
        else:
            surveys = svc.get_surveys_by_school(school_id)
    return {'surveys': surveys}


@app.post('/api/mongodb/surveys')
def create_survey(body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to create survey'):
        survey = svc.create_survey(json.loads(body))
    return {'survey': survey}


@app.put('/api/mongodb/surveys/{survey_id}')
def update_survey(survey_id: str, body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to update survey'):
        survey = svc.update_survey(survey_id, json.loads(body))
    return {'survey': survey}


@app.delete('/api/mongodb/surveys/{survey_id}')
def delete_survey(survey_id: str, svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to delete survey'):
        svc.delete_survey(survey_id)
    return {'success': True}


# survey questions

@app.get('/api/mongodb/survey-questions')
def list_survey_questions(survey_id: str | None = Query(default=None, alias='surveyId'), svc: DatabaseService = Depends(get_database_service)):
    """List the questions of a survey in display order."""
    _require(survey_id, 'Survey ID is required')
    with failure_message('Failed to fetch survey questions'):
        questions = svc.get_survey_questions(survey_id)
    return {'questions': questions}


@app.post('/api/mongodb/survey-questions')
def create_survey_questions(body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    """Bulk-create questions from `{"questions": [...]}`; an empty list creates none."""
    with failure_message('Failed to create survey questions'):
        payload = json.loads(body)
    questions = _field(payload, 'questions')
    if not isinstance(questions, list):
        raise MissingParameter('Questions array is required')
    with failure_message('Failed to create survey questions'):
        created = svc.create_survey_questions(questions)
    return {'questions': created}


@app.delete('/api/mongodb/survey-questions/{question_id}')
def delete_survey_question(question_id: str, svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to delete survey question'):
        svc.delete_survey_question(question_id)
    return {'success': True}


# survey responses

@app.get('/api/mongodb/survey-responses')
def list_survey_responses(
    school_id: str | None = Query(default=None, alias='schoolId'),
    survey_id: str | None = Query(default=None, alias='surveyId'),
    student_id: str | None = Query(default=None, alias='studentId'),
    svc: DatabaseService = Depends(get_database_service),
):
    """List responses of a whole school, or of one student for one survey."""
    if not school_id and not (survey_id and student_id):
        raise MissingParameter('Missing parameters')
    with failure_message('Failed to fetch survey responses'):
        if school_id:
            responses = svc.get_survey_responses_by_school(school_id)
        else:
            responses = svc.get_survey_responses(survey_id, student_id)
    return {'responses': responses}


@app.post('/api/mongodb/survey-responses')
def create_survey_response(body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to create survey response'):
        response = svc.create_survey_response(json.loads(body))
    return {'response': response}


# terms

@app.get('/api/mongodb/terms')
def list_terms(school_id: str | None = Query(default=None, alias='schoolId'), svc: DatabaseService = Depends(get_database_service)):
    _require(school_id, 'School ID is required')
    with failure_message('Failed to fetch terms'):
        terms = svc.get_terms_by_school(school_id)
    return {'terms': terms}


@app.post('/api/mongodb/terms')
def create_term(body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to create term'):
        term = svc.create_term(json.loads(body))
    return {'term': term}


# users

@app.get('/api/mongodb/users')
def list_users(
    email: str | None = None,
    school_id: str | None = Query(default=None, alias='schoolId'),
    role: str | None = None,
    svc: DatabaseService = Depends(get_database_service),
):
    """Look a user up by `email`, or list a school's users (optionally by `role`)."""
    if not email and not school_id:
        raise MissingParameter('Missing parameters')
    with failure_message('Failed to fetch users'):
        if email:
            return {'user': svc.get_user_by_email(email)}
        if role:
            users = svc.get_users_by_role(school_id, role)
        else:
            users = svc.get_users_by_school(school_id)
    return {'users': users}


@app.post('/api/mongodb/users')
def create_user(body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    """Create a user; a plaintext `password` is stored only as a hash."""
    with failure_message('Failed to create user'):
        user = svc.create_user(json.loads(body))
    return {'user': user}


@app.put('/api/mongodb/users')
def update_user(user_id: str | None = Query(default=None, alias='id'), body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    _require(user_id, 'User ID is required')
    with failure_message('Failed to update user'):
        user = svc.update_user(user_id, json.loads(body))
    return {'user': user}


@app.delete('/api/mongodb/users/{user_id}')
def delete_user(user_id: str, svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to delete user'):
        svc.delete_user(user_id)
    return {'success': True}


# notifications

@app.get('/api/mongodb/notifications')
def list_user_notifications(user_id: str | None = Query(default=None, alias='userId'), svc: DatabaseService = Depends(get_database_service)):
    _require(user_id, 'User ID is required')
    with failure_message('Failed to fetch notifications'):
        notifications = svc.get_notifications_by_user(user_id)
    return {'notifications': notifications}


@app.put('/api/mongodb/notifications/{notification_id}')
def update_notification(notification_id: str, body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    """Partially update a notification, typically to mark it read."""
    with failure_message('Failed to update notification'):
        notification = svc.update_notification(notification_id, json.loads(body))
    return {'notification': notification}


@app.get('/api/notifications/admin')
def list_admin_notifications(svc: DatabaseService = Depends(get_database_service)):
    with failure_message('Failed to fetch notifications'):
        notifications = svc.get_all_notifications()
    return {'notifications': notifications}


@app.post('/api/notifications/admin')
def create_admin_notification(body: bytes = Depends(read_body), svc: DatabaseService = Depends(get_database_service)):
    """Post a notification to a user or a role.

    `title` and `message` are required; `type` defaults to `info` and the
    notification always starts unread.
    """
    with failure_message('Failed to create notification'):
        payload = json.loads(body)
    title = _field(payload, 'title')
    message = _field(payload, 'message')
    if not title or not message:
        raise MissingParameter('Title and message are required')
    with failure_message('Failed to create notification'):
        notification = svc.create_notification({
            'title': title,
            'message': message,
            'type': payload.get('type') or 'info',
            'user_id': payload.get('user_id'),
            'target_role': payload.get('target_role'),
            'is_read': False,
        })
    return {'notification': notification}


# navigation

@app.get('/api/navigation/breadcrumbs')
def breadcrumbs(path: str = '/'):
    """Return the breadcrumb trail for a portal URL path."""
    return {'breadcrumbs': breadcrumb_trail(path)}


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
