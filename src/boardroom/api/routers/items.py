"""
Router factory for votable items.

``build_item_router`` mounts the same lifecycle and ballot endpoints for
every ``ItemKind``; only the schemas and the URL prefix differ between
resolutions and minutes.
"""
import textwrap
import uuid
from typing import Iterable, Optional, Type

from fastapi import APIRouter, Body, Depends, Response, status
from pydantic import BaseModel

from boardroom.api.deps import get_voting_service
from boardroom.exceptions import ItemNotFoundError
from boardroom.schemas import (
    CompletionEventOut,
    DecisionOut,
    OpenVotingIn,
    StatisticsOut,
    TallyOut,
    VoteIn,
    VoteOut,
    VoteOutcomeOut,
)
from boardroom.voting.kinds import ItemKind
from boardroom.voting.service import VoteOutcome, VotingService


def _model_note(model: type) -> str:
    note = (getattr(model, "NOTE", "") or "").strip()
    if note.lower().startswith("description="):
        note = note[len("description="):]
    return " ".join(note.split())


def _describe(note: str, extra: str) -> str:
    if note:
        return textwrap.dedent(f"""{note}\n\n{extra}""").strip()
    return extra


def outcome_out(outcome: VoteOutcome) -> VoteOutcomeOut:
    return VoteOutcomeOut(
        item_type=outcome.kind.name,
        item_id=outcome.item.id,
        status=outcome.item.status,
        changed=outcome.changed,
        tally=TallyOut.model_validate(outcome.tally),
        decision=DecisionOut(**outcome.decision.as_dict()) if outcome.decision else None,
        vote=VoteOut.model_validate(outcome.vote) if outcome.vote is not None else None,
        event=CompletionEventOut.model_validate(outcome.event) if outcome.event is not None else None,
    )


def build_item_router(
    *,
    kind: ItemKind,
    create_schema: Type[BaseModel],
    read_schema: Type[BaseModel],
    path_prefix: str,
    tags: Optional[Iterable[str]] = None,
) -> APIRouter:
    router = APIRouter(prefix=path_prefix, tags=list(tags or [kind.name]))
    note = _model_note(kind.item_model)
    label = kind.name

    # CREATE
    async def create_item(payload: create_schema, svc: VotingService = Depends(get_voting_service)):  # type: ignore[valid-type]
        data = payload.model_dump(exclude_unset=True)
        item = await svc.create_item(kind, **data)
        return read_schema.model_validate(item)

    router.add_api_route(
        "",
        create_item,
        methods=["POST"],
        response_model=read_schema,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create {label}",
        description=_describe(note, f"Create a new `{label}` in `draft` status."),
    )

    # LIST
    async def list_items(svc: VotingService = Depends(get_voting_service)):
        return [read_schema.model_validate(it) for it in await svc.list_items(kind)]

    router.add_api_route(
        "",
        list_items,
        methods=["GET"],
        response_model=list[read_schema],  # type: ignore[valid-type]
        summary=f"List {label}",
    )

    # GET ONE
    async def get_item(item_id: uuid.UUID, svc: VotingService = Depends(get_voting_service)):
        return read_schema.model_validate(await svc.get_item(kind, item_id))

    router.add_api_route(
        "/{item_id}",
        get_item,
        methods=["GET"],
        response_model=read_schema,
        summary=f"Get {label}",
        description=_describe(note, "Returns HTTP 404 if the record is not found."),
    )

    # DELETE
    async def delete_item(item_id: uuid.UUID, svc: VotingService = Depends(get_voting_service)) -> Response:
        await svc.delete_item(kind, item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    router.add_api_route(
        "/{item_id}",
        delete_item,
        methods=["DELETE"],
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        summary=f"Delete {label}",
        description=f"Delete a `{label}` and its ballots.",
    )

    # OPEN VOTING
    async def open_voting(
        item_id: uuid.UUID,
        payload: Optional[OpenVotingIn] = Body(default=None),
        svc: VotingService = Depends(get_voting_service),
    ):
        data = payload.model_dump(exclude_none=True) if payload else {}
        item = await svc.open_voting(kind, item_id, **data)
        return read_schema.model_validate(item)

    router.add_api_route(
        "/{item_id}/open-voting",
        open_voting,
        methods=["POST"],
        response_model=read_schema,
        summary=f"Open voting on {label}",
        description="Moves a draft item to `voting` and snapshots the eligible voter count. "
        "Returns HTTP 409 if the item is not a draft.",
    )

    # CAST / CHANGE VOTE
    async def cast_vote(item_id: uuid.UUID, payload: VoteIn, svc: VotingService = Depends(get_voting_service)):
        outcome = await svc.cast_vote(kind, item_id, payload.voter_id, payload.choice, payload.reason)
        return outcome_out(outcome)

    router.add_api_route(
        "/{item_id}/vote",
        cast_vote,
        methods=["POST"],
        response_model=VoteOutcomeOut,
        summary=f"Vote on {label}",
        description=f"Accepted choices: {', '.join(kind.choices)}. A second ballot from the same "
        "voter replaces the first. The response carries the recomputed tally and, when this "
        "ballot completed the vote, the completion event.",
    )

    # WITHDRAW VOTE
    async def withdraw_vote(
        item_id: uuid.UUID, voter_id: uuid.UUID, svc: VotingService = Depends(get_voting_service)
    ):
        outcome = await svc.withdraw_vote(kind, item_id, voter_id)
        if outcome is None:
            raise ItemNotFoundError(kind.name, item_id)
        return outcome_out(outcome)

    router.add_api_route(
        "/{item_id}/vote/{voter_id}",
        withdraw_vote,
        methods=["DELETE"],
        response_model=VoteOutcomeOut,
        summary=f"Withdraw a vote on {label}",
    )

    # LEDGER
    async def list_votes(item_id: uuid.UUID, svc: VotingService = Depends(get_voting_service)):
        return [VoteOut.model_validate(v) for v in await svc.list_votes(kind, item_id)]

    router.add_api_route(
        "/{item_id}/votes",
        list_votes,
        methods=["GET"],
        response_model=list[VoteOut],
        summary=f"List votes on {label}",
    )

    async def get_vote(item_id: uuid.UUID, voter_id: uuid.UUID, svc: VotingService = Depends(get_voting_service)):
        return VoteOut.model_validate(await svc.get_vote(kind, item_id, voter_id))

    router.add_api_route(
        "/{item_id}/votes/{voter_id}",
        get_vote,
        methods=["GET"],
        response_model=VoteOut,
        summary=f"Get one voter's ballot on {label}",
    )

    # STATISTICS
    async def statistics(item_id: uuid.UUID, svc: VotingService = Depends(get_voting_service)):
        return StatisticsOut.model_validate(await svc.statistics(kind, item_id))

    router.add_api_route(
        "/{item_id}/statistics",
        statistics,
        methods=["GET"],
        response_model=StatisticsOut,
        summary=f"Voting statistics for {label}",
    )

    # RECOMPUTE
    async def recompute(item_id: uuid.UUID, svc: VotingService = Depends(get_voting_service)):
        outcome = await svc.recompute(kind, item_id)
        if outcome is None:
            raise ItemNotFoundError(kind.name, item_id)
        return outcome_out(outcome)

    router.add_api_route(
        "/{item_id}/recompute",
        recompute,
        methods=["POST"],
        response_model=VoteOutcomeOut,
        summary=f"Recount {label} from its ballots",
    )

    # MANUAL COMPLETION
    async def complete(item_id: uuid.UUID, svc: VotingService = Depends(get_voting_service)):
        return outcome_out(await svc.force_complete(kind, item_id))

    router.add_api_route(
        "/{item_id}/complete",
        complete,
        methods=["POST"],
        response_model=VoteOutcomeOut,
        summary=f"Close voting on {label} now",
        description="Evaluates the item as if its deadline had passed. No-op once the item is terminal.",
    )

    return router


__all__ = ["build_item_router", "outcome_out"]
