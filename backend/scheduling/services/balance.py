"""Balance use case: adjust a student's lesson credits and log the change."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from ..domain import BalanceLogEntry, normalize_operation, utc_now_iso
from ..errors import InvalidArgument, NotFound
from ..policy import Action, Actor, require
from ..stores import BalanceLogStore, ProfileStore

logger = logging.getLogger("tutorbook.scheduling")


def _normalize_amount(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument("invalid_amount")
    return value


@dataclass
class BalanceService:
    profiles: ProfileStore
    log: BalanceLogStore

    def update_balance(self, actor: Actor, student_id: str, *, amount: object, operation: object) -> BalanceLogEntry:
        """Apply `add` (relative) or `set` (absolute) to the student's balance.

        Negative results are allowed. The profile is written first, then the
        log entry; neither step is atomic with the read before it.
        """
        require(actor, Action.UPDATE_BALANCE)
        op = normalize_operation(operation)
        value = _normalize_amount(amount)
        try:
            student = self.profiles.get(student_id)
        except ValueError as exc:
            raise NotFound("student_not_found") from exc
        if student is None or not student.is_student:
            raise NotFound("student_not_found")
        require(actor, Action.UPDATE_BALANCE, student, detail="not_your_student")

        previous = student.balance or 0
        new_balance = previous + value if op == "add" else value
        self.profiles.put(replace(student, balance=new_balance))
        entry = BalanceLogEntry(
            student_id=student.id,
            operation=op,
            amount=value,
            previous_balance=previous,
            new_balance=new_balance,
            timestamp=utc_now_iso(),
            admin_id=actor.id,
        )
        self.log.append(entry)
        logger.info("balance %s id=%s %d -> %d", op, student_id[-6:], previous, new_balance)
        return entry


__all__ = ["BalanceService"]
