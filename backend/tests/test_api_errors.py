import logging

import pytest
from fastapi.testclient import TestClient

from schoolsurvey.main import app, get_database_service

client = TestClient(app)

SECRET = "connection refused: mongodb://admin:hunter2@db"


class BrokenDatabaseService:
    """Every attribute is a method that fails with a sensitive message."""

    def __getattr__(self, name):
        def _fail(*_args, **_kwargs):
            raise RuntimeError(SECRET)
        return _fail


@pytest.fixture
def broken_db():
    app.dependency_overrides[get_database_service] = lambda: BrokenDatabaseService()
    yield
    app.dependency_overrides.pop(get_database_service, None)


@pytest.mark.parametrize("path, params, message", [
    ('/api/mongodb/courses', {}, 'School ID is required'),
    ('/api/mongodb/course-enrollments', {}, 'School ID is required'),
    ('/api/mongodb/subjects', {}, 'School ID is required'),
    ('/api/mongodb/terms', {}, 'School ID is required'),
    ('/api/mongodb/survey-questions', {}, 'Survey ID is required'),
    ('/api/mongodb/surveys', {}, 'Missing parameters'),
    ('/api/mongodb/survey-responses', {}, 'Missing parameters'),
    ('/api/mongodb/survey-responses', {'surveyId': 'only-survey'}, 'Missing parameters'),
    ('/api/mongodb/users', {'role': 'teacher'}, 'Missing parameters'),
    ('/api/mongodb/notifications', {}, 'User ID is required'),
    ('/api/mongodb/courses', {'schoolId': ''}, 'School ID is required'),
])
def test_missing_query_parameter_is_400(path, params, message):
    r = client.get(path, params=params)
    assert r.status_code == 400
    assert r.json() == {'error': message}


def test_courses_without_school_id_example():
    r = client.get('/api/mongodb/courses')
    assert r.status_code == 400
    assert r.json() == {'error': 'School ID is required'}


def test_update_user_requires_id():
    r = client.put('/api/mongodb/users', json={'full_name': 'X'})
    assert r.status_code == 400
    assert r.json() == {'error': 'User ID is required'}


@pytest.mark.parametrize("body", [{}, {'questions': 'not-a-list'}, {'questions': None}, [{'questions': []}]])
def test_survey_questions_require_array(body):
    r = client.post('/api/mongodb/survey-questions', json=body)
    assert r.status_code == 400
    assert r.json() == {'error': 'Questions array is required'}


def test_empty_questions_array_creates_nothing():
    r = client.post('/api/mongodb/survey-questions', json={'questions': []})
    assert r.status_code == 200
    assert r.json() == {'questions': []}


@pytest.mark.parametrize("body", [
    {}, {'title': 'Only title'}, {'message': 'Only message'}, {'title': '', 'message': 'm'},
    [{'title': 't', 'message': 'm'}],
])
def test_admin_notification_requires_title_and_message(body):
    r = client.post('/api/notifications/admin', json=body)
    assert r.status_code == 400
    assert r.json() == {'error': 'Title and message are required'}


@pytest.mark.parametrize("path, message", [
    ('/api/mongodb/schools', 'Failed to create school'),
    ('/api/mongodb/survey-questions', 'Failed to create survey questions'),
    ('/api/notifications/admin', 'Failed to create notification'),
])
def test_malformed_json_body_is_route_500(path, message):
    r = client.post(path, content=b'{not json', headers={'Content-Type': 'application/json'})
    assert r.status_code == 500
    assert r.json() == {'error': message}


def test_non_object_body_is_route_500():
    r = client.post('/api/mongodb/subjects', json=['History'])
    assert r.status_code == 500
    assert r.json() == {'error': 'Failed to create subject'}


def test_invalid_document_is_generic_500():
    r = client.post('/api/mongodb/courses', json={'name': 'No school'})
    assert r.status_code == 500
    assert r.json() == {'error': 'Failed to create course'}


def test_duplicate_slug_is_generic_500():
    body = {'name': 'Dup', 'slug': 'duplicate-slug-school'}
    client.post('/api/mongodb/schools', json=body)
    r = client.post('/api/mongodb/schools', json=body)
    assert r.status_code == 500
    assert r.json() == {'error': 'Failed to create school'}


@pytest.mark.parametrize("method, path, kwargs, message", [
    ('get', '/api/mongodb/schools', {}, 'Failed to fetch schools'),
    ('get', '/api/mongodb/schools', {'params': {'slug': 'x'}}, 'Failed to fetch schools'),
    ('post', '/api/mongodb/schools', {'json': {}}, 'Failed to create school'),
    ('get', '/api/mongodb/courses', {'params': {'schoolId': 'abc'}}, 'Failed to fetch courses'),
    ('post', '/api/mongodb/courses', {'json': {}}, 'Failed to create course'),
    ('get', '/api/mongodb/courses/abc', {}, 'Failed to fetch course'),
    ('delete', '/api/mongodb/courses/abc', {}, 'Failed to delete course'),
    ('get', '/api/mongodb/course-enrollments', {'params': {'schoolId': 'abc'}}, 'Failed to fetch course enrollments'),
    ('post', '/api/mongodb/course-enrollments', {'json': {}}, 'Failed to create course enrollment'),
    ('put', '/api/mongodb/course-enrollments/abc', {'json': {}}, 'Failed to update course enrollment'),
    ('delete', '/api/mongodb/course-enrollments/abc', {}, 'Failed to delete course enrollment'),
    ('get', '/api/mongodb/subjects', {'params': {'schoolId': 'abc'}}, 'Failed to fetch subjects'),
    ('post', '/api/mongodb/subjects', {'json': {}}, 'Failed to create subject'),
    ('put', '/api/mongodb/subjects/abc', {'json': {}}, 'Failed to update subject'),
    ('delete', '/api/mongodb/subjects/abc', {}, 'Failed to delete subject'),
    ('get', '/api/mongodb/surveys', {'params': {'courseId': 'abc'}}, 'Failed to fetch surveys'),
    ('get', '/api/mongodb/surveys', {'params': {'schoolId': 'abc'}}, 'Failed to fetch surveys'),
    ('post', '/api/mongodb/surveys', {'json': {}}, 'Failed to create survey'),
    ('put', '/api/mongodb/surveys/abc', {'json': {}}, 'Failed to update survey'),
    ('delete', '/api/mongodb/surveys/abc', {}, 'Failed to delete survey'),
    ('get', '/api/mongodb/survey-questions', {'params': {'surveyId': 'abc'}}, 'Failed to fetch survey questions'),
    ('post', '/api/mongodb/survey-questions', {'json': {'questions': [{}]}}, 'Failed to create survey questions'),
    ('delete', '/api/mongodb/survey-questions/abc', {}, 'Failed to delete survey question'),
    ('get', '/api/mongodb/survey-responses', {'params': {'schoolId': 'abc'}}, 'Failed to fetch survey responses'),
    ('get', '/api/mongodb/survey-responses', {'params': {'surveyId': 'a', 'studentId': 'b'}}, 'Failed to fetch survey responses'),
    ('post', '/api/mongodb/survey-responses', {'json': {}}, 'Failed to create survey response'),
    ('get', '/api/mongodb/terms', {'params': {'schoolId': 'abc'}}, 'Failed to fetch terms'),
    ('post', '/api/mongodb/terms', {'json': {}}, 'Failed to create term'),
    ('get', '/api/mongodb/users', {'params': {'email': 'a@b.c'}}, 'Failed to fetch users'),
    ('get', '/api/mongodb/users', {'params': {'schoolId': 'abc', 'role': 'student'}}, 'Failed to fetch users'),
    ('post', '/api/mongodb/users', {'json': {}}, 'Failed to create user'),
    ('put', '/api/mongodb/users', {'params': {'id': 'abc'}, 'json': {}}, 'Failed to update user'),
    ('delete', '/api/mongodb/users/abc', {}, 'Failed to delete user'),
    ('get', '/api/mongodb/notifications', {'params': {'userId': 'abc'}}, 'Failed to fetch notifications'),
    ('put', '/api/mongodb/notifications/abc', {'json': {}}, 'Failed to update notification'),
    ('get', '/api/notifications/admin', {}, 'Failed to fetch notifications'),
    ('post', '/api/notifications/admin', {'json': {'title': 't', 'message': 'm'}}, 'Failed to create notification'),
])
def test_database_failure_is_generic_500(broken_db, method, path, kwargs, message):
    r = client.request(method.upper(), path, **kwargs)
    assert r.status_code == 500
    assert r.json() == {'error': message}
    assert 'hunter2' not in r.text
    assert 'Traceback' not in r.text


def test_failure_is_logged_with_cause(broken_db, caplog):
    with caplog.at_level(logging.ERROR, logger='schoolsurvey.api'):
        r = client.get('/api/mongodb/courses', params={'schoolId': 'abc'}, headers={'X-Request-ID': 'req-42'})
    assert r.status_code == 500
    records = [rec for rec in caplog.records if 'operation_failed' in rec.getMessage()]
    assert records
    assert 'req-42' in records[-1].getMessage()
    assert records[-1].exc_info is not None
    assert SECRET in str(records[-1].exc_info[1])
