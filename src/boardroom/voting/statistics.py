"""
Voting statistics for reports and the ``/statistics`` endpoint.

Everything here is derived from a tally plus the ledger's free-text
reasons; nothing is persisted. Percentages are rounded to two decimals for
display, while the pass/quorum verdicts reuse the exact comparisons in
``rules``. Completed items are reported from the tally recorded at
completion, not the live one.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional

from .kinds import Tally
from .rules import meets_percent, rate

CONCERN_KEYWORDS = ("concern", "worried", "issue", "problem", "disagree", "oppose", "against", "risk")

# (percentage margin floor, consensus level), checked in order
CONSENSUS_LEVELS = ((60, "high"), (30, "moderate"), (10, "low"))

SIDES = ("affirmative", "negative", "abstain")


def percent(part: int, whole: int) -> float:
    return round(float(rate(part, whole)) * 100, 2)


@dataclass(frozen=True)
class QuorumStatus:
    met: bool
    required: int
    actual: int
    percentage: float
    shortfall: Optional[int] = None


@dataclass(frozen=True)
class VotingMargin:
    absolute_margin: int
    percentage_margin: float
    margin_type: str
    description: str


@dataclass(frozen=True)
class CommentAnalysis:
    total_comments: int
    comments_by_side: dict[str, int]
    average_comment_length: int
    has_significant_concerns: bool
    concern_keywords: list[str]
    participation_with_comments: float


@dataclass(frozen=True)
class VotingStatistics:
    total_votes: int
    total_eligible_voters: int
    affirmative_votes: int
    negative_votes: int
    abstain_votes: int
    participation_rate: float
    approval_percentage: float
    rejection_percentage: float
    abstention_percentage: float
    is_unanimous: bool
    unanimous_type: Optional[str]
    quorum_status: QuorumStatus
    voting_margin: VotingMargin
    comment_analysis: CommentAnalysis
    passed: bool
    passed_reason: str
    engagement_score: int
    consensus_level: str
    non_voters: list = field(default_factory=list)

    def as_dict(self) -> dict:
        return asdict(self)


def quorum_status(total_votes: int, total_eligible_voters: int, minimum_quorum: int) -> QuorumStatus:
    met = total_votes > 0 and meets_percent(rate(total_votes, total_eligible_voters), minimum_quorum)
    # ceil(minimum_quorum% of eligible) without floats
    required = -(-minimum_quorum * total_eligible_voters // 100)
    return QuorumStatus(
        met=met,
        required=required,
        actual=total_votes,
        percentage=percent(total_votes, total_eligible_voters),
        shortfall=None if met else max(required - total_votes, 0),
    )


def voting_margin(affirmative: int, negative: int) -> VotingMargin:
    absolute = abs(affirmative - negative)
    pct = percent(absolute, affirmative + negative)
    plural = "" if absolute == 1 else "s"
    if affirmative > negative:
        return VotingMargin(absolute, pct, "victory", f"Passed by {absolute} vote{plural} ({pct}% margin)")
    if negative > affirmative:
        return VotingMargin(absolute, pct, "defeat", f"Failed by {absolute} vote{plural} ({pct}% margin)")
    return VotingMargin(absolute, pct, "tie", "Tied vote - no margin")


def analyze_comments(comments: Iterable[tuple[str, Optional[str]]]) -> CommentAnalysis:
    """
    ``comments`` yields one ``(side, reason)`` pair per cast vote, where side is
    one of ``affirmative``, ``negative`` or ``abstain``.
    """
    rows = list(comments)
    with_text = [(side, text.strip()) for side, text in rows if text and text.strip()]

    by_side = {side: 0 for side in SIDES}
    for side, _ in with_text:
        by_side[side] = by_side.get(side, 0) + 1

    total = len(with_text)
    avg_len = round(sum(len(text) for _, text in with_text) / total) if total else 0

    blob = " ".join(text.lower() for _, text in with_text)
    found = [kw for kw in CONCERN_KEYWORDS if kw in blob]

    return CommentAnalysis(
        total_comments=total,
        comments_by_side=by_side,
        average_comment_length=avg_len,
        has_significant_concerns=bool(found) or by_side["negative"] > 0,
        concern_keywords=found,
        participation_with_comments=percent(total, len(rows)),
    )


def consensus_level(is_unanimous: bool, margin: VotingMargin) -> str:
    if is_unanimous:
        return "high"
    for floor, level in CONSENSUS_LEVELS:
        if margin.percentage_margin >= floor:
            return level
    return "polarized"


def compute_statistics(
    tally: Tally,
    *,
    total_eligible_voters: int,
    approval_threshold: int,
    minimum_quorum: int,
    comments: Iterable[tuple[str, Optional[str]]] = (),
    non_voters: Iterable = (),
    final_status: Optional[str] = None,
) -> VotingStatistics:
    """
    ``final_status`` is the recorded outcome of a completed item; when given
    it decides ``passed``.
    """
    total = tally.total
    participation = percent(total, total_eligible_voters)
    approval = percent(tally.affirmative, total)

    # abstentions break unanimity
    is_unanimous = total > 0 and (tally.affirmative == total or tally.negative == total)
    unanimous_type = None
    if is_unanimous:
        unanimous_type = "affirmative" if tally.affirmative == total else "negative"

    quorum = quorum_status(total, total_eligible_voters, minimum_quorum)
    margin = voting_margin(tally.affirmative, tally.negative)
    analysis = analyze_comments(comments)

    approval_met = total > 0 and meets_percent(rate(tally.affirmative, total), approval_threshold)
    passed = quorum.met and approval_met
    if final_status is not None:
        passed = final_status == "passed"

    if not quorum.met:
        reason = f"Quorum not met ({quorum.percentage}% participation, {minimum_quorum}% required)"
    elif not approval_met:
        reason = f"Insufficient approval ({approval}% approval, {approval_threshold}% required)"
    elif unanimous_type == "affirmative":
        reason = "Unanimous approval"
    else:
        reason = f"Majority approval ({approval}% of votes)"

    comment_score = min(analysis.participation_with_comments * 2, 100)
    engagement = round(min(participation, 100) * 0.7 + comment_score * 0.3)

    return VotingStatistics(
        total_votes=total,
        total_eligible_voters=total_eligible_voters,
        affirmative_votes=tally.affirmative,
        negative_votes=tally.negative,
        abstain_votes=tally.abstain,
        participation_rate=participation,
        approval_percentage=approval,
        rejection_percentage=percent(tally.negative, total),
        abstention_percentage=percent(tally.abstain, total),
        is_unanimous=is_unanimous,
        unanimous_type=unanimous_type,
        quorum_status=quorum,
        voting_margin=margin,
        comment_analysis=analysis,
        passed=passed,
        passed_reason=reason,
        engagement_score=engagement,
        consensus_level=consensus_level(is_unanimous, margin),
        non_voters=list(non_voters),
    )


__all__ = [
    "QuorumStatus",
    "VotingMargin",
    "CommentAnalysis",
    "VotingStatistics",
    "compute_statistics",
    "quorum_status",
    "voting_margin",
    "analyze_comments",
    "consensus_level",
]
