"""
VotingService: the unit of work around the tally & completion engine.

Every mutating command runs as one transaction: lock the item row, touch
the ledger, recount the tally from the ledger, evaluate completion, record
the outbox event, commit. Completion notifications are delivered only
after that commit.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, AsyncIterator, Callable, Iterable, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from boardroom.app_logger import get_logger
from boardroom.core.config import Settings, settings as default_settings
from boardroom.db.base import as_utc, utcnow
from boardroom.db.models import VotingCompletionEvent
from boardroom.exceptions import (
    InvalidTransitionError,
    ItemNotFoundError,
    ProfileNotFoundError,
    VoterNotEligibleError,
    VotingNotOpenError,
)
from boardroom.repositories import (
    CompletionEventRepository,
    ProfileRepository,
    VotableItemRepository,
    VoteLedgerRepository,
)
from .kinds import KINDS, ItemKind, ItemStatus, Tally
from .notifier import CompletionNotifier, LoggingCompletionNotifier, event_payload
from .rules import Decision, evaluate
from .statistics import SIDES, VotingStatistics, compute_statistics
from .tally import apply_tally

log = get_logger("voting.service")


@dataclass
class VoteOutcome:
    """What a ledger mutation did to its item."""

    kind: ItemKind
    item: Any
    tally: Tally
    vote: Optional[Any] = None
    decision: Optional[Decision] = None
    event: Optional[VotingCompletionEvent] = None
    changed: bool = True

    @property
    def completed(self) -> bool:
        return self.event is not None


@dataclass(frozen=True)
class UpcomingDeadline:
    kind: str
    item_id: UUID
    title: str
    voting_deadline: datetime
    hours_remaining: float
    total_votes: int
    total_eligible_voters: int


@dataclass(frozen=True)
class ResyncEntry:
    kind: str
    item_id: UUID
    before: Tally
    after: Tally


@dataclass
class DispatchResult:
    delivered: list[UUID] = field(default_factory=list)
    failed: list[UUID] = field(default_factory=list)


class VotingService:
    def __init__(
        self,
        session: AsyncSession,
        notifier: Optional[CompletionNotifier] = None,
        *,
        clock: Callable[[], datetime] = utcnow,
        eligible_roles: Optional[Iterable[str]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.session = session
        self.notifier = notifier or LoggingCompletionNotifier()
        self.clock = clock
        self.settings = settings or default_settings
        self.eligible_roles = tuple(eligible_roles or self.settings.eligible_voter_roles)

    # ------------------------------------------------------------------ utils
    def now(self) -> datetime:
        return as_utc(self.clock())

    def _items(self, kind: ItemKind) -> VotableItemRepository:
        return VotableItemRepository(self.session, kind)

    def _ledger(self, kind: ItemKind) -> VoteLedgerRepository:
        return VoteLedgerRepository(self.session, kind)

    @property
    def _profiles(self) -> ProfileRepository:
        return ProfileRepository(self.session)

    @property
    def _events(self) -> CompletionEventRepository:
        return CompletionEventRepository(self.session)

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        try:
            yield
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def _locked_item(self, kind: ItemKind, item_id: UUID) -> Any:
        item = await self._items(kind).get_by_id(item_id, for_update=True)
        if item is None:
            raise ItemNotFoundError(kind.name, item_id)
        return item

    async def eligible_voter_count(self) -> int:
        return await self._profiles.count_eligible(self.eligible_roles)

    # -------------------------------------------------------------- lifecycle
    async def create_item(self, kind: ItemKind, *, title: str, **fields: Any) -> Any:
        fields.setdefault("approval_threshold", self.settings.DEFAULT_APPROVAL_THRESHOLD)
        fields.setdefault("minimum_quorum", self.settings.DEFAULT_MINIMUM_QUORUM)
        if fields.get("voting_deadline") is not None:
            fields["voting_deadline"] = as_utc(fields["voting_deadline"])
        fields = {k: v for k, v in fields.items() if v is not None}

        async with self._transaction():
            item = await self._items(kind).create(title=title, status=ItemStatus.DRAFT.value, **fields)
        log.info("created %s %s", kind.name, item.id)
        return item

    async def open_voting(
        self,
        kind: ItemKind,
        item_id: UUID,
        *,
        voting_deadline: Optional[datetime] = None,
        approval_threshold: Optional[int] = None,
        minimum_quorum: Optional[int] = None,
    ) -> Any:
        """``draft -> voting``; snapshots the eligible-voter count."""
        async with self._transaction():
            item = await self._locked_item(kind, item_id)
            if item.status != ItemStatus.DRAFT.value:
                raise InvalidTransitionError(kind.name, item_id, item.status, ItemStatus.VOTING.value)
            if voting_deadline is not None:
                item.voting_deadline = as_utc(voting_deadline)
            if approval_threshold is not None:
                item.approval_threshold = approval_threshold
            if minimum_quorum is not None:
                item.minimum_quorum = minimum_quorum
            item.total_eligible_voters = await self.eligible_voter_count()
            item.status = ItemStatus.VOTING.value
            item.updated_at = self.now()
            await self.session.flush()
        log.info(
            "voting opened on %s %s (eligible=%s, deadline=%s)",
            kind.name, item_id, item.total_eligible_voters, item.voting_deadline,
        )
        return item

    async def get_item(self, kind: ItemKind, item_id: UUID) -> Any:
        item = await self._items(kind).get_by_id(item_id)
        if item is None:
            raise ItemNotFoundError(kind.name, item_id)
        return item

    async def list_items(self, kind: ItemKind, *, status: Optional[str] = None) -> list[Any]:
        return await self._items(kind).list(status=status)

    async def delete_item(self, kind: ItemKind, item_id: UUID) -> None:
        async with self._transaction():
            item = await self._locked_item(kind, item_id)
            await self._items(kind).delete(item)
        log.info("deleted %s %s", kind.name, item_id)

    # ----------------------------------------------------------------- ledger
    async def _check_voter(self, voter_id: UUID) -> None:
        profile = await self._profiles.get_by_id(voter_id)
        if profile is None:
            raise ProfileNotFoundError(voter_id)
        if not profile.is_active or profile.role not in self.eligible_roles:
            raise VoterNotEligibleError(voter_id, profile.role, profile.is_active)

    async def cast_vote(
        self,
        kind: ItemKind,
        item_id: UUID,
        voter_id: UUID,
        choice: str,
        reason: Optional[str] = None,
    ) -> VoteOutcome:
        """
        Record (or replace) ``voter_id``'s ballot and settle the item.

        Votes are accepted while voting and after completion; on a terminal
        item only the tally moves, the status never does.
        """
        normalized = kind.normalize_choice(choice)
        now = self.now()

        async with self._transaction():
            item = await self._locked_item(kind, item_id)
            if item.status == ItemStatus.DRAFT.value:
                raise VotingNotOpenError(kind.name, item_id, item.status)
            await self._check_voter(voter_id)

            vote = await self._ledger(kind).upsert(item_id, voter_id, normalized, reason, now)
            outcome = await self._settle(kind, item, now)
            outcome.vote = vote

        await self._deliver_outcome(outcome)
        return outcome

    async def withdraw_vote(self, kind: ItemKind, item_id: UUID, voter_id: UUID) -> Optional[VoteOutcome]:
        """Remove a ballot. Missing items and missing ballots are no-ops."""
        now = self.now()
        async with self._transaction():
            item = await self._items(kind).get_by_id(item_id, for_update=True)
            if item is None:
                return None
            removed = await self._ledger(kind).remove(item_id, voter_id)
            if not removed:
                return VoteOutcome(kind=kind, item=item, tally=kind.read_tally(item), changed=False)
            outcome = await self._settle(kind, item, now)

        log.info("%s %s: vote withdrawn by %s", kind.name, item_id, voter_id)
        await self._deliver_outcome(outcome)
        return outcome

    async def get_vote(self, kind: ItemKind, item_id: UUID, voter_id: UUID) -> Any:
        vote = await self._ledger(kind).get(item_id, voter_id)
        if vote is None:
            raise ItemNotFoundError(f"{kind.name} vote", f"{item_id}/{voter_id}")
        return vote

    async def list_votes(self, kind: ItemKind, item_id: UUID) -> list[Any]:
        await self.get_item(kind, item_id)
        return await self._ledger(kind).list_for_item(item_id)

    # ------------------------------------------------------------- evaluation
    async def _settle(self, kind: ItemKind, item: Any, now: datetime, *, force_close: bool = False) -> VoteOutcome:
        """Recount, then evaluate while the item is still open. Caller holds the row lock."""
        tally = await apply_tally(self.session, kind, item, now)
        outcome = VoteOutcome(kind=kind, item=item, tally=tally)
        if item.status != ItemStatus.VOTING.value:
            return outcome

        eligible = await self.eligible_voter_count()
        item.total_eligible_voters = eligible
        decision = evaluate(
            tally,
            total_eligible_voters=eligible,
            approval_threshold=item.approval_threshold,
            minimum_quorum=item.minimum_quorum,
            voting_deadline=item.voting_deadline,
            now=now,
            force_close=force_close,
        )
        outcome.decision = decision

        if decision.is_terminal:
            item.status = decision.status.value
            item.completed_at = now
            outcome.event = await self._record_completion(kind, item, tally, decision, now)
            log.info(
                "%s %s %s (%s): %s",
                kind.name, item.id, decision.status.value, decision.reason.value, tally.as_dict(),
            )
        await self.session.flush()
        return outcome

    async def _record_completion(
        self, kind: ItemKind, item: Any, tally: Tally, decision: Decision, now: datetime
    ) -> VotingCompletionEvent:
        summary = decision.as_dict()
        return await self._events.create(
            item_type=kind.name,
            item_id=item.id,
            final_status=decision.status.value,
            completion_reason=decision.reason.value,
            votes_affirmative=tally.affirmative,
            votes_negative=tally.negative,
            votes_abstain=tally.abstain,
            total_votes=tally.total,
            total_eligible_voters=decision.total_eligible_voters,
            participation_rate=summary["participation_rate"],
            approval_rate=summary["approval_rate"],
            completed_at=now,
            delivery_attempts=0,
        )

    async def recompute(self, kind: ItemKind, item_id: UUID) -> Optional[VoteOutcome]:
        """Recount and evaluate one item; ``None`` when it no longer exists."""
        now = self.now()
        async with self._transaction():
            item = await self._items(kind).get_by_id(item_id, for_update=True)
            if item is None:
                return None
            outcome = await self._settle(kind, item, now)
        await self._deliver_outcome(outcome)
        return outcome

    async def force_complete(self, kind: ItemKind, item_id: UUID) -> VoteOutcome:
        """Close voting now, evaluating as if the deadline had passed."""
        now = self.now()
        async with self._transaction():
            item = await self._locked_item(kind, item_id)
            if item.status == ItemStatus.DRAFT.value:
                raise InvalidTransitionError(kind.name, item_id, item.status, "completed")
            outcome = await self._settle(kind, item, now, force_close=True)
        await self._deliver_outcome(outcome)
        return outcome

    async def close_expired(self, now: Optional[datetime] = None) -> dict[str, list[UUID]]:
        """
        Settle every open item whose deadline has passed. Each item is its
        own transaction; an item that errors is logged and left open for the next sweep.
        """
        now = as_utc(now) if now is not None else self.now()
        closed: dict[str, list[UUID]] = {}
        for kind in KINDS.values():
            closed[kind.name] = []
            expired_ids = [item.id for item in await self._items(kind).list_expired(now)]
            for item_id in expired_ids:
                try:
                    async with self._transaction():
                        item = await self._items(kind).get_by_id(item_id, for_update=True)
                        if item is None or item.status != ItemStatus.VOTING.value:
                            continue
                        outcome = await self._settle(kind, item, now)
                except Exception:
                    log.exception("deadline sweep failed for %s %s", kind.name, item_id)
                    continue
                if outcome.completed:
                    closed[kind.name].append(item_id)
                    await self._deliver_outcome(outcome)
        log.info("deadline sweep at %s closed %s", now.isoformat(), {k: len(v) for k, v in closed.items()})
        return closed

    async def upcoming_deadlines(self, hours_ahead: int = 24) -> list[UpcomingDeadline]:
        now = self.now()
        until = now + timedelta(hours=hours_ahead)
        upcoming: list[UpcomingDeadline] = []
        for kind in KINDS.values():
            for item in await self._items(kind).list_upcoming(now, until):
                deadline = as_utc(item.voting_deadline)
                upcoming.append(
                    UpcomingDeadline(
                        kind=kind.name,
                        item_id=item.id,
                        title=item.title,
                        voting_deadline=deadline,
                        hours_remaining=round((deadline - now).total_seconds() / 3600, 2),
                        total_votes=item.total_votes,
                        total_eligible_voters=item.total_eligible_voters,
                    )
                )
        upcoming.sort(key=lambda u: u.voting_deadline)
        return upcoming

    async def resync_tallies(self, kind: Optional[ItemKind] = None) -> list[ResyncEntry]:
        """Recount every item of ``kind`` (default: all kinds); report the ones that had drifted."""
        now = self.now()
        drifted: list[ResyncEntry] = []
        outcomes: list[VoteOutcome] = []
        kinds = [kind] if kind is not None else list(KINDS.values())

        async with self._transaction():
            for k in kinds:
                for item in await self._items(k).list():
                    before = k.read_tally(item)
                    outcome = await self._settle(k, item, now)
                    if outcome.tally != before:
                        drifted.append(ResyncEntry(kind=k.name, item_id=item.id, before=before, after=outcome.tally))
                        log.warning("%s %s tally drifted: %s -> %s", k.name, item.id, before, outcome.tally)
                    outcomes.append(outcome)

        for outcome in outcomes:
            await self._deliver_outcome(outcome)
        return drifted

    # ------------------------------------------------------------- statistics
    async def statistics(self, kind: ItemKind, item_id: UUID) -> VotingStatistics:
        """
        Report on an item. Open items use the live ledger and eligible set;
        completed items report the tally and eligible count recorded with
        their completion, so the verdict matches the final status.
        """
        item = await self.get_item(kind, item_id)
        votes = await self._ledger(kind).list_for_item(item_id)
        tally = kind.tally_from_counts(await self._ledger(kind).count_by_choice(item_id))
        final_status = None

        if item.status == ItemStatus.VOTING.value:
            eligible_ids = await self._profiles.list_eligible_ids(self.eligible_roles)
            eligible = len(eligible_ids)
        else:
            eligible_ids = []
            eligible = item.total_eligible_voters
            event = await self._events.get_for_item(kind.name, item_id)
            if event is not None:
                tally = Tally(
                    affirmative=event.votes_affirmative,
                    negative=event.votes_negative,
                    abstain=event.votes_abstain,
                )
                eligible = event.total_eligible_voters
                final_status = event.final_status
        voted = {v.voter_id for v in votes}

        return compute_statistics(
            tally,
            total_eligible_voters=eligible,
            approval_threshold=item.approval_threshold,
            minimum_quorum=item.minimum_quorum,
            comments=[(SIDES[kind.choices.index(v.choice)], v.reason) for v in votes],
            non_voters=[pid for pid in eligible_ids if pid not in voted],
            final_status=final_status,
        )

    # ----------------------------------------------------------------- outbox
    async def list_completion_events(self, *, pending: Optional[bool] = None) -> list[VotingCompletionEvent]:
        return await self._events.list(pending=pending)

    async def _deliver_outcome(self, outcome: VoteOutcome) -> None:
        if outcome.event is not None:
            await self.deliver(outcome.event)

    async def deliver(self, event: VotingCompletionEvent) -> bool:
        """
        Claim ``event`` and hand it to the notifier. Returns True when this
        call delivered it; a failed notify releases the claim for a retry.
        """
        async with self._transaction():
            claimed = await self._events.claim(event.id, self.now())
        if not claimed:
            log.debug("completion %s already claimed", event.id)
            return False

        try:
            await self.notifier.notify(event_payload(event))
        except Exception as exc:
            log.exception("completion notifier failed for %s %s", event.item_type, event.item_id)
            async with self._transaction():
                await self._events.release(event.id, f"{type(exc).__name__}: {exc}")
            await self.session.refresh(event)
            return False
        await self.session.refresh(event)
        return True

    async def dispatch_pending(self) -> DispatchResult:
        result = DispatchResult()
        for event in await self._events.list(pending=True):
            if await self.deliver(event):
                result.delivered.append(event.id)
            else:
                result.failed.append(event.id)
        if result.delivered or result.failed:
            log.info("dispatched %d completion(s), %d failed", len(result.delivered), len(result.failed))
        return result


__all__ = [
    "VotingService",
    "VoteOutcome",
    "UpcomingDeadline",
    "ResyncEntry",
    "DispatchResult",
]
