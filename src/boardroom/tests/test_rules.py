# src/boardroom/tests/test_rules.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from fractions import Fraction

import pytest

from boardroom.voting.kinds import CompletionReason, ItemStatus, Tally
from boardroom.voting.rules import deadline_passed, evaluate, rate

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
PAST = NOW - timedelta(hours=1)
FUTURE = NOW + timedelta(days=2)


def _evaluate(tally, *, eligible=4, approval=50, quorum=50, deadline=None, **kw):
    return evaluate(
        tally,
        total_eligible_voters=eligible,
        approval_threshold=approval,
        minimum_quorum=quorum,
        voting_deadline=deadline,
        now=NOW,
        **kw,
    )


def test_thresholds_met_before_deadline_pass_early():
    d = _evaluate(Tally(affirmative=2, negative=1), deadline=FUTURE)
    assert d.status is ItemStatus.PASSED
    assert d.reason is CompletionReason.THRESHOLD_MET
    assert d.approval_rate == Fraction(2, 3)
    assert d.participation_rate == Fraction(3, 4)


def test_everyone_voted_reports_all_voted():
    d = _evaluate(Tally(affirmative=3, negative=1))
    assert d.status is ItemStatus.PASSED
    assert d.reason is CompletionReason.ALL_VOTED


def test_exact_half_meets_fifty_percent_after_deadline():
    d = _evaluate(Tally(affirmative=1, negative=1), deadline=PAST)
    assert d.status is ItemStatus.PASSED
    assert d.reason is CompletionReason.DEADLINE_EXPIRED
    assert d.approval_met and d.quorum_met


def test_no_affirmative_votes_fail_at_deadline():
    d = _evaluate(Tally(negative=1, abstain=1), deadline=PAST)
    assert d.status is ItemStatus.FAILED
    assert d.reason is CompletionReason.DEADLINE_EXPIRED
    assert d.approval_rate == 0


def test_empty_ledger_fails_at_deadline():
    d = _evaluate(Tally(), deadline=PAST)
    assert d.status is ItemStatus.FAILED
    assert d.approval_rate == 0
    assert d.participation_rate == 0


def test_empty_ledger_never_passes_even_with_zero_thresholds():
    d = _evaluate(Tally(), approval=0, quorum=0)
    assert d.status is ItemStatus.VOTING
    d = _evaluate(Tally(), approval=0, quorum=0, deadline=PAST)
    assert d.status is ItemStatus.FAILED


def test_below_threshold_stays_open_before_deadline():
    d = _evaluate(Tally(affirmative=1, negative=2), deadline=FUTURE)
    assert d.status is ItemStatus.VOTING
    assert d.reason is None
    assert not d.is_terminal


def test_quorum_shortfall_stays_open_without_deadline():
    d = _evaluate(Tally(affirmative=1), eligible=4, quorum=50)
    assert d.approval_met
    assert not d.quorum_met
    assert d.status is ItemStatus.VOTING


def test_force_close_uses_manual_reason():
    d = _evaluate(Tally(affirmative=1), deadline=FUTURE, force_close=True)
    assert d.status is ItemStatus.FAILED
    assert d.reason is CompletionReason.MANUAL_COMPLETION


def test_expired_deadline_wins_over_manual_reason():
    d = _evaluate(Tally(affirmative=3, negative=1), deadline=PAST, force_close=True)
    assert d.reason is CompletionReason.DEADLINE_EXPIRED


def test_no_eligible_voters_means_zero_participation():
    d = _evaluate(Tally(affirmative=2), eligible=0)
    assert d.participation_rate == 0
    assert not d.quorum_met
    assert d.status is ItemStatus.VOTING


def test_seventy_five_percent_is_exact():
    # 3/4 is exactly 75%; 2/3 is just under
    assert _evaluate(Tally(affirmative=3, negative=1), approval=75).approval_met
    assert not _evaluate(Tally(affirmative=2, negative=1), approval=75).approval_met


@pytest.mark.parametrize(
    "deadline, expected",
    [(None, False), (NOW, True), (PAST, True), (FUTURE, False), (NOW.replace(tzinfo=None), True)],
)
def test_deadline_boundary(deadline, expected):
    assert deadline_passed(deadline, NOW) is expected


def test_rate_zero_denominator():
    assert rate(3, 0) == 0
    assert rate(1, 2) == Fraction(1, 2)


def test_decision_as_dict_reports_percentages():
    d = _evaluate(Tally(affirmative=2, negative=1))
    out = d.as_dict()
    assert out["status"] == "passed"
    assert out["approval_rate"] == 66.67
    assert out["participation_rate"] == 75.0
