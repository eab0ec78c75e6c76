"""CLI script to seed a demo school into the backend DB.
Usage: python scripts/seed_demo.py [--slug SLUG] [--name NAME]
"""
import sys
import argparse
import pathlib
from datetime import datetime, timedelta, timezone
# Ensure `backend/` is on sys.path so `schoolsurvey` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from schoolsurvey.database import engine, create_db_and_tables
from schoolsurvey.services import DatabaseService
from schoolsurvey.utils.codes import generate_admin_code, generate_teacher_code


def seed(svc: DatabaseService, slug: str, name: str) -> dict:
    """Create a demo school with an admin, a teacher, a subject, a term and a course.

    Re-running with the same slug leaves the existing school untouched and
    returns it without seeding anything else.
    """
    existing = svc.get_school_by_slug(slug)
    if existing:
        return {'school': existing, 'created': False}
    school = svc.create_school({'name': name, 'slug': slug})
    school_id = school['_id']
    admin_code = generate_admin_code()
    admin = svc.create_user({
        'school_id': school_id,
        'unique_id': f'ADMIN-{slug}',
        'email': f'admin@{slug}.example',
        'full_name': f'{name} Administrator',
        'role': 'admin',
        'admin_code': admin_code,
        'email_verified': True,
    })
    teacher_code = generate_teacher_code()
    teacher = svc.create_user({
        'school_id': school_id,
        'unique_id': f'TCH-{slug}',
        'email': f'teacher@{slug}.example',
        'full_name': 'Demo Teacher',
        'role': 'teacher',
        'teacher_code': teacher_code,
        'email_verified': True,
    })
    subject = svc.create_subject({'school_id': school_id, 'name': 'Mathematics'})
    start = datetime.now(timezone.utc)
    term = svc.create_term({
        'school_id': school_id,
        'academic_year_id': str(start.year),
        'name': 'Term 1',
        'start_date': start,
        'end_date': start + timedelta(weeks=12),
    })
    course = svc.create_course({
        'school_id': school_id,
        'subject_id': subject['_id'],
        'teacher_id': teacher['_id'],
        'name': 'Mathematics 10A',
        'class_number': '10A',
        'term': term['name'],
    })
    return {
        'school': school,
        'created': True,
        'admin': admin,
        'admin_code': admin_code,
        'teacher': teacher,
        'teacher_code': teacher_code,
        'course': course,
    }


def main(slug: str = 'demo', name: str = 'Demo School'):
    """Seed the demo school and print a short summary to stdout."""
    create_db_and_tables()
    with Session(engine) as session:
        result = seed(DatabaseService(session), slug, name)
    school = result['school']
    if not result['created']:
        print(f"School '{slug}' already exists (id {school['_id']}); nothing to do")
        return
    print(f"Created school {school['name']} (id {school['_id']})")
    print(f"Admin login: {result['admin']['email']} code {result['admin_code']}")
    print(f"Teacher login: {result['teacher']['email']} code {result['teacher_code']}")
    print(f"Course: {result['course']['name']} (id {result['course']['_id']})")


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--slug', default='demo', help='URL slug of the demo school')
    parser.add_argument('--name', default='Demo School', help='Display name of the demo school')
    args = parser.parse_args()
    main(slug=args.slug, name=args.name)
