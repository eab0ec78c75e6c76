import re

from fastapi.testclient import TestClient

from schoolsurvey.main import app
from schoolsurvey.utils.codes import generate_admin_code, generate_teacher_code
from schoolsurvey.utils.navigation import breadcrumb_label, breadcrumb_trail

client = TestClient(app)


def test_root_has_no_trail():
    assert breadcrumb_trail("/") == []
    assert breadcrumb_trail("") == []


def test_empty_segments_still_show_home():
    assert breadcrumb_trail("//") == [{"label": "Home", "href": "/", "current": False}]


def test_trail_labels_and_hrefs():
    crumbs = breadcrumb_trail("/admin/courses/")
    assert crumbs == [
        {"label": "Home", "href": "/", "current": False},
        {"label": "Administration", "href": "/admin", "current": False},
        {"label": "Courses", "href": "/admin/courses", "current": True},
    ]


def test_known_and_unknown_labels():
    assert breadcrumb_label("teacher") == "Teacher Dashboard"
    assert breadcrumb_label("student") == "Student Dashboard"
    assert breadcrumb_label("parent") == "Parent"
    assert breadcrumb_label("survey-results") == "Survey-results"


def test_breadcrumbs_endpoint():
    r = client.get("/api/navigation/breadcrumbs", params={"path": "/student/surveys"})
    assert r.status_code == 200
    labels = [c["label"] for c in r.json()["breadcrumbs"]]
    assert labels == ["Home", "Student Dashboard", "Surveys"]


def test_registration_codes_format():
    admin = generate_admin_code()
    teacher = generate_teacher_code()
    assert re.fullmatch(r"ADM-[0-9A-F]{8}", admin)
    assert re.fullmatch(r"TCH-[0-9A-F]{8}", teacher)
    assert generate_admin_code() != admin
