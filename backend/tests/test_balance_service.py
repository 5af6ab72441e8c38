"""
Balance service: add/set semantics, ownership and the audit log.
"""
from __future__ import annotations

import pytest

from backend.scheduling.domain import BalanceLogEntry
from backend.scheduling.errors import Forbidden, InvalidArgument, NotFound
from backend.storage import keys
from backend.tests.utils import seed


@pytest.fixture
def svc():
    s = seed.services()
    seed.add_profile(s, "a1", "admin")
    seed.add_profile(s, "t1", "teacher")
    seed.add_profile(s, "t2", "teacher")
    seed.add_profile(s, "s1", "student", balance=2, teacher="t1", subject="python")
    seed.add_profile(s, "s2", "student", balance=7, teacher="t2", subject="python")
    return s


def _log_entries(svc, student_id):
    prefix = f"{keys.BALANCE_LOG_PREFIX}{student_id}:"
    return [BalanceLogEntry.from_record(v) for v in svc.kv.get_by_prefix(prefix)]


def test_add_increments_and_logs(svc):
    entry = svc.balance.update_balance(seed.actor("t1", "teacher"), "s1", amount=3, operation="add")
    assert entry.new_balance == 5
    assert svc.profiles.profiles.get("s1").balance == 5
    (logged,) = _log_entries(svc, "s1")
    assert (logged.previous_balance, logged.new_balance, logged.amount) == (2, 5, 3)
    assert logged.operation == "add"
    assert logged.admin_id == "t1"


def test_set_replaces_balance(svc):
    entry = svc.balance.update_balance(seed.actor("a1", "admin"), "s2", amount=1, operation="set")
    assert (entry.previous_balance, entry.new_balance) == (7, 1)


def test_negative_results_are_allowed(svc):
    entry = svc.balance.update_balance(seed.actor("a1", "admin"), "s1", amount=-5, operation="add")
    assert entry.new_balance == -3


def test_every_update_gets_its_own_log_entry(svc):
    admin = seed.actor("a1", "admin")
    for _ in range(3):
        svc.balance.update_balance(admin, "s1", amount=1, operation="add")
    entries = _log_entries(svc, "s1")
    assert [e.new_balance for e in sorted(entries, key=lambda e: e.new_balance)] == [3, 4, 5]


def test_teacher_cannot_touch_other_teachers_student(svc):
    with pytest.raises(Forbidden):
        svc.balance.update_balance(seed.actor("t1", "teacher"), "s2", amount=1, operation="add")
    assert svc.profiles.profiles.get("s2").balance == 7
    assert _log_entries(svc, "s2") == []


def test_student_cannot_update_balance(svc):
    with pytest.raises(Forbidden):
        svc.balance.update_balance(seed.actor("s1", "student"), "s1", amount=10, operation="add")


@pytest.mark.parametrize(
    "amount, operation, code",
    [
        (1, "multiply", "invalid_operation"),
        (1, None, "invalid_operation"),
        ("3", "add", "invalid_amount"),
        (True, "add", "invalid_amount"),
        (1.5, "set", "invalid_amount"),
    ],
)
def test_invalid_input_is_rejected(svc, amount, operation, code):
    with pytest.raises(InvalidArgument) as info:
        svc.balance.update_balance(seed.actor("a1", "admin"), "s1", amount=amount, operation=operation)
    assert info.value.code == code
    assert svc.profiles.profiles.get("s1").balance == 2


def test_unknown_student_is_not_found(svc):
    with pytest.raises(NotFound):
        svc.balance.update_balance(seed.actor("a1", "admin"), "ghost", amount=1, operation="add")
