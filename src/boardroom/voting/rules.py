"""
Completion threshold evaluation.

Pure functions: given a tally, the eligible-voter snapshot, the item's
thresholds and deadline, decide whether an open item stays ``voting`` or
moves to ``passed`` / ``failed``. Rates are exact fractions and threshold
checks use integer cross-multiplication, so 1 of 2 votes meets 50%.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from fractions import Fraction
from typing import Optional

from boardroom.db.base import as_utc
from .kinds import CompletionReason, ItemStatus, Tally


def rate(part: int, whole: int) -> Fraction:
    """part/whole, with an empty denominator treated as a rate of 0."""
    if whole <= 0:
        return Fraction(0)
    return Fraction(part, whole)


def meets_percent(value: Fraction, percent: int) -> bool:
    return value * 100 >= percent


def deadline_passed(deadline: Optional[datetime], now: datetime) -> bool:
    if deadline is None:
        return False
    return as_utc(now) >= as_utc(deadline)


@dataclass(frozen=True)
class Decision:
    status: ItemStatus
    reason: Optional[CompletionReason]
    approval_rate: Fraction
    participation_rate: Fraction
    approval_met: bool
    quorum_met: bool
    deadline_passed: bool
    total_eligible_voters: int

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def as_dict(self) -> dict:
        return {
            "status": self.status.value,
            "reason": self.reason.value if self.reason else None,
            "approval_rate": round(float(self.approval_rate) * 100, 2),
            "participation_rate": round(float(self.participation_rate) * 100, 2),
            "approval_met": self.approval_met,
            "quorum_met": self.quorum_met,
            "deadline_passed": self.deadline_passed,
            "total_eligible_voters": self.total_eligible_voters,
        }


def evaluate(
    tally: Tally,
    *,
    total_eligible_voters: int,
    approval_threshold: int,
    minimum_quorum: int,
    voting_deadline: Optional[datetime],
    now: datetime,
    force_close: bool = False,
) -> Decision:
    """
    Decide the status of an item that is currently open for voting.

    ``force_close`` evaluates as if the deadline had already passed (the
    manual-completion path).
    """
    approval = rate(tally.affirmative, tally.total)
    participation = rate(tally.total, total_eligible_voters)

    # an empty ledger never passes, whatever the thresholds
    approval_met = tally.total > 0 and meets_percent(approval, approval_threshold)
    quorum_met = tally.total > 0 and meets_percent(participation, minimum_quorum)
    expired = deadline_passed(voting_deadline, now)

    if expired or force_close:
        status = ItemStatus.PASSED if (approval_met and quorum_met) else ItemStatus.FAILED
        reason = CompletionReason.DEADLINE_EXPIRED if expired else CompletionReason.MANUAL_COMPLETION
    elif approval_met and quorum_met:
        status = ItemStatus.PASSED
        if total_eligible_voters > 0 and tally.total >= total_eligible_voters:
            reason = CompletionReason.ALL_VOTED
        else:
            reason = CompletionReason.THRESHOLD_MET
    else:
        status = ItemStatus.VOTING
        reason = None

    return Decision(
        status=status,
        reason=reason,
        approval_rate=approval,
        participation_rate=participation,
        approval_met=approval_met,
        quorum_met=quorum_met,
        deadline_passed=expired,
        total_eligible_voters=total_eligible_voters,
    )


__all__ = ["Decision", "evaluate", "rate", "meets_percent", "deadline_passed"]
