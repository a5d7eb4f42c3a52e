import asyncio

from utils.seed import ADMIN_PASSWORD, ADMIN_USERNAME, seed_store
from utils.security import verify_password


def test_seed_creates_demo_data_once(store):
    assert asyncio.run(seed_store(store)) is True
    assert asyncio.run(seed_store(store)) is False

    admin = asyncio.run(store.get_user_by_username(ADMIN_USERNAME))
    assert admin.role == "admin"
    assert verify_password(ADMIN_PASSWORD, admin.password_hash)

    courses = asyncio.run(store.get_all_courses())
    assert len(courses) == 3
    assert sum(1 for c in courses if c.is_required) == 2

    completed = asyncio.run(store.get_all_assessments("completed"))
    assert [a.title for a in completed] == ["Office Environmental Check"]
    assert completed[0].completed_at is not None
    assert len(asyncio.run(store.get_notifications())) == 2
