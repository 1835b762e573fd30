# src/boardroom/tests/test_statistics.py
from __future__ import annotations

from boardroom.voting.kinds import Tally
from boardroom.voting.statistics import (
    analyze_comments,
    compute_statistics,
    consensus_level,
    quorum_status,
    voting_margin,
)


def test_percentages_round_to_two_decimals():
    stats = compute_statistics(
        Tally(affirmative=2, negative=1),
        total_eligible_voters=7,
        approval_threshold=50,
        minimum_quorum=40,
    )
    assert stats.total_votes == 3
    assert stats.participation_rate == 42.86
    assert stats.approval_percentage == 66.67
    assert stats.rejection_percentage == 33.33
    assert stats.abstention_percentage == 0.0
    assert stats.passed
    assert stats.passed_reason == "Majority approval (66.67% of votes)"


def test_quorum_status_reports_required_and_shortfall():
    q = quorum_status(total_votes=2, total_eligible_voters=7, minimum_quorum=50)
    assert not q.met
    assert q.required == 4
    assert q.shortfall == 2

    q = quorum_status(total_votes=4, total_eligible_voters=7, minimum_quorum=50)
    assert q.met
    assert q.shortfall is None


def test_margin_types_and_descriptions():
    m = voting_margin(3, 1)
    assert (m.margin_type, m.absolute_margin, m.percentage_margin) == ("victory", 2, 50.0)
    assert m.description == "Passed by 2 votes (50.0% margin)"

    m = voting_margin(1, 2)
    assert m.margin_type == "defeat"
    assert m.description.startswith("Failed by 1 vote ")

    m = voting_margin(0, 0)
    assert m.margin_type == "tie"
    assert m.percentage_margin == 0


def test_unanimous_approval():
    stats = compute_statistics(
        Tally(affirmative=4), total_eligible_voters=4, approval_threshold=75, minimum_quorum=50
    )
    assert stats.is_unanimous
    assert stats.unanimous_type == "affirmative"
    assert stats.passed_reason == "Unanimous approval"
    assert stats.consensus_level == "high"


def test_abstention_breaks_unanimity():
    stats = compute_statistics(
        Tally(affirmative=3, abstain=1), total_eligible_voters=4, approval_threshold=50, minimum_quorum=50
    )
    assert not stats.is_unanimous


def test_failure_reasons():
    low_turnout = compute_statistics(
        Tally(affirmative=1), total_eligible_voters=10, approval_threshold=50, minimum_quorum=50
    )
    assert not low_turnout.passed
    assert low_turnout.passed_reason == "Quorum not met (10.0% participation, 50% required)"

    rejected = compute_statistics(
        Tally(affirmative=1, negative=3), total_eligible_voters=4, approval_threshold=50, minimum_quorum=50
    )
    assert rejected.passed_reason == "Insufficient approval (25.0% approval, 50% required)"


def test_empty_tally_is_never_passed():
    stats = compute_statistics(Tally(), total_eligible_voters=0, approval_threshold=0, minimum_quorum=0)
    assert not stats.passed
    assert stats.participation_rate == 0
    assert stats.consensus_level == "polarized"


def test_consensus_levels():
    assert consensus_level(False, voting_margin(9, 1)) == "high"       # 80%
    assert consensus_level(False, voting_margin(7, 3)) == "moderate"   # 40%
    assert consensus_level(False, voting_margin(6, 4)) == "low"        # 20%
    assert consensus_level(False, voting_margin(5, 5)) == "polarized"


def test_comment_analysis_flags_concerns():
    analysis = analyze_comments(
        [
            ("affirmative", "Looks good"),
            ("negative", None),
            ("abstain", "Some risk with the budget"),
            ("affirmative", "   "),
        ]
    )
    assert analysis.total_comments == 2
    assert analysis.comments_by_side == {"affirmative": 1, "negative": 0, "abstain": 1}
    assert analysis.concern_keywords == ["risk"]
    assert analysis.has_significant_concerns
    assert analysis.participation_with_comments == 50.0
    assert analysis.average_comment_length == 18


def test_engagement_score_weights_participation_and_comments():
    stats = compute_statistics(
        Tally(affirmative=2),
        total_eligible_voters=4,
        approval_threshold=50,
        minimum_quorum=50,
        comments=[("affirmative", "yes please"), ("affirmative", None)],
    )
    # 50 * 0.7 + min(50 * 2, 100) * 0.3
    assert stats.engagement_score == 65
