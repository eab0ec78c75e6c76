import uuid

from scripts.seed_demo import seed


def test_seed_creates_demo_school(service):
    slug = f"demo-{uuid.uuid4().hex[:6]}"
    result = seed(service, slug, "Demo School")
    assert result["created"] is True
    school_id = result["school"]["_id"]
    assert result["admin"]["role"] == "admin"
    assert result["admin"]["admin_code"] == result["admin_code"]
    assert result["admin_code"].startswith("ADM-")
    assert result["teacher"]["teacher_code"].startswith("TCH-")
    [course] = service.get_courses_by_school(school_id)
    assert course["teacher"]["_id"] == result["teacher"]["_id"]
    assert course["subject"]["name"] == "Mathematics"
    assert [t["name"] for t in service.get_terms_by_school(school_id)] == ["Term 1"]


def test_seed_is_idempotent_per_slug(service):
    slug = f"demo-{uuid.uuid4().hex[:6]}"
    first = seed(service, slug, "Demo School")
    second = seed(service, slug, "Other Name")
    assert second["created"] is False
    assert second["school"]["_id"] == first["school"]["_id"]
    assert len(service.get_users_by_school(first["school"]["_id"])) == 2
