"""
Profiles service: signup, own profile, student and teacher directories.
"""
from __future__ import annotations

import pytest

from backend.identity_access.domain import Identity, Role
from backend.identity_access.provider import IdentityError
from backend.scheduling.errors import Forbidden, InvalidArgument
from backend.tests.utils import seed


@pytest.fixture
def svc():
    s = seed.services()
    seed.add_profile(s, "a1", "admin", name="Alma")
    seed.add_profile(s, "t1", "teacher", name="Tina")
    seed.add_profile(s, "t2", "teacher", name="Theo")
    seed.add_profile(s, "s1", "student", teacher="t1", subject="python")
    seed.add_profile(s, "s2", "student", teacher="t2", subject="frontend")
    seed.add_profile(s, "s3", "student")
    return s


def test_register_forces_student_role_with_zero_balance():
    s = seed.services()
    identity = s.profiles.register(email="new@example.com", password="pw123456", name="  Nia ")
    profile = s.profiles.profiles.get(identity.id)
    assert profile.role == "student"
    assert profile.balance == 0
    assert profile.name == "Nia"
    assert profile.teacher is None
    assert identity.metadata == {"name": "Nia", "role": "student"}


@pytest.mark.parametrize(
    "email, password, name, code",
    [
        ("a@example.com", "pw", "", "invalid_name"),
        ("", "pw", "Nia", "invalid_email"),
        ("a@example.com", "", "Nia", "invalid_password"),
    ],
)
def test_register_validates_input(email, password, name, code):
    s = seed.services()
    with pytest.raises(InvalidArgument) as info:
        s.profiles.register(email=email, password=password, name=name)
    assert info.value.code == code


def test_register_duplicate_email_is_rejected_by_identity_provider():
    s = seed.services()
    s.profiles.register(email="dup@example.com", password="pw123456", name="One")
    with pytest.raises(IdentityError) as info:
        s.profiles.register(email="dup@example.com", password="pw123456", name="Two")
    assert info.value.code == "signup_failed"


def test_get_profile_falls_back_to_identity_without_record(svc):
    result = svc.profiles.get_profile(Identity(id="u9", email="u9@example.com"))
    assert result == {"id": "u9", "email": "u9@example.com"}


def test_get_profile_returns_stored_record(svc):
    result = svc.profiles.get_profile(Identity(id="s1", email="s1@example.com"))
    assert result["role"] == "student"
    assert result["teacher"] == "t1"
    assert result["createdAt"]


def test_admin_lists_all_students_and_unassigned(svc):
    result = svc.profiles.list_students(seed.actor("a1", "admin"))
    assert {p["id"] for p in result["students"]} == {"s1", "s2", "s3"}
    assert {p["id"] for p in result["newStudents"]} == {"s3"}
    names = {p["id"]: p["teacherName"] for p in result["students"]}
    assert names == {"s1": "Tina", "s2": "Theo", "s3": None}


def test_teacher_lists_own_and_unassigned_students_only(svc):
    result = svc.profiles.list_students(seed.actor("t1", "teacher"))
    assert [p["id"] for p in result["students"]] == ["s1"]
    assert [p["id"] for p in result["newStudents"]] == ["s3"]


def test_student_cannot_list_students(svc):
    with pytest.raises(Forbidden):
        svc.profiles.list_students(seed.actor("s1", "student"))


def test_list_teachers_is_admin_only_and_includes_admins(svc):
    teachers = svc.profiles.list_teachers(seed.actor("a1", "admin"))
    assert {t["id"] for t in teachers} == {"a1", "t1", "t2"}
    with pytest.raises(Forbidden):
        svc.profiles.list_teachers(seed.actor("t1", "teacher"))


def test_provision_creates_staff_profile_and_refuses_students():
    s = seed.services()
    profile = s.profiles.provision(email="t@example.com", password="pw123456", name="Tom", role=Role.TEACHER)
    assert profile.role == "teacher"
    assert profile.balance is None
    assert s.profiles.profiles.get(profile.id).role == "teacher"
    with pytest.raises(InvalidArgument):
        s.profiles.provision(email="x@example.com", password="pw", name="X", role=Role.STUDENT)


@pytest.mark.parametrize("uid, role", [("t1", "teacher"), ("a1", "admin")])
def test_get_profile_returns_stored_record_for_staff(svc, uid, role):
    result = svc.profiles.get_profile(Identity(id=uid, email=f"{uid}@example.com"))
    assert result["id"] == uid
    assert result["role"] == role
