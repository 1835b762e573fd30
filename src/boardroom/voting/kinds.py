"""
Votable item kinds.

Resolutions and minutes share one tally/threshold implementation; an
``ItemKind`` carries everything that differs between them (tables, the
ledger's foreign key, the vote vocabulary and the tally column names).
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from boardroom.db.models import (
    Minutes,
    MinutesVote,
    Resolution,
    ResolutionVote,
    MINUTES_CHOICES,
    RESOLUTION_CHOICES,
)
from boardroom.exceptions import InvalidVoteChoiceError, UnknownItemKindError


class ItemStatus(str, Enum):
    DRAFT = "draft"
    VOTING = "voting"
    PASSED = "passed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.PASSED, ItemStatus.FAILED)


class CompletionReason(str, Enum):
    ALL_VOTED = "all_voted"
    THRESHOLD_MET = "threshold_met"
    DEADLINE_EXPIRED = "deadline_expired"
    MANUAL_COMPLETION = "manual_completion"


@dataclass(frozen=True)
class Tally:
    affirmative: int = 0
    negative: int = 0
    abstain: int = 0

    @property
    def total(self) -> int:
        return self.affirmative + self.negative + self.abstain

    def as_dict(self) -> dict[str, int]:
        return {
            "affirmative": self.affirmative,
            "negative": self.negative,
            "abstain": self.abstain,
            "total": self.total,
        }


# Accepted spellings, mapped onto a position in (affirmative, negative, abstain).
_ALIASES = {
    "for": 0, "approve": 0, "yes": 0, "aye": 0,
    "against": 1, "reject": 1, "no": 1, "nay": 1,
    "abstain": 2,
}


@dataclass(frozen=True)
class ItemKind:
    name: str
    item_model: type
    vote_model: type
    item_fk: str
    choices: tuple[str, str, str]
    affirmative_field: str
    negative_field: str

    @property
    def vote_item_column(self):
        return getattr(self.vote_model, self.item_fk)

    @property
    def affirmative_choice(self) -> str:
        return self.choices[0]

    @property
    def negative_choice(self) -> str:
        return self.choices[1]

    @property
    def abstain_choice(self) -> str:
        return self.choices[2]

    def normalize_choice(self, raw: str) -> str:
        key = (raw or "").strip().lower()
        if key not in _ALIASES:
            raise InvalidVoteChoiceError(self.name, raw, self.choices)
        return self.choices[_ALIASES[key]]

    def tally_from_counts(self, counts: Mapping[str, int]) -> Tally:
        return Tally(
            affirmative=int(counts.get(self.affirmative_choice, 0)),
            negative=int(counts.get(self.negative_choice, 0)),
            abstain=int(counts.get(self.abstain_choice, 0)),
        )

    def read_tally(self, item: Any) -> Tally:
        return Tally(
            affirmative=getattr(item, self.affirmative_field) or 0,
            negative=getattr(item, self.negative_field) or 0,
            abstain=item.votes_abstain or 0,
        )

    def write_tally(self, item: Any, tally: Tally) -> None:
        setattr(item, self.affirmative_field, tally.affirmative)
        setattr(item, self.negative_field, tally.negative)
        item.votes_abstain = tally.abstain
        item.total_votes = tally.total


RESOLUTION = ItemKind(
    name="resolution",
    item_model=Resolution,
    vote_model=ResolutionVote,
    item_fk="resolution_id",
    choices=RESOLUTION_CHOICES,
    affirmative_field="votes_for",
    negative_field="votes_against",
)

MINUTES = ItemKind(
    name="minutes",
    item_model=Minutes,
    vote_model=MinutesVote,
    item_fk="minutes_id",
    choices=MINUTES_CHOICES,
    affirmative_field="approve_votes",
    negative_field="reject_votes",
)

KINDS: dict[str, ItemKind] = {RESOLUTION.name: RESOLUTION, MINUTES.name: MINUTES}


def get_kind(name: str) -> ItemKind:
    key = (name or "").strip().lower()
    if key == "resolutions":
        key = "resolution"
    kind = KINDS.get(key)
    if kind is None:
        raise UnknownItemKindError(name)
    return kind


__all__ = [
    "ItemStatus",
    "CompletionReason",
    "Tally",
    "ItemKind",
    "RESOLUTION",
    "MINUTES",
    "KINDS",
    "get_kind",
]
