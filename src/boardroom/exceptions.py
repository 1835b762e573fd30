"""
Boardroom exception hierarchy.

Every error raised across the voting service boundary derives from
``BoardroomError`` and carries a machine-readable ``error_code`` plus a
context dict, so the HTTP layer can map it to a status code without
string matching.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class BoardroomError(Exception):
    """
    Base exception class for all Boardroom errors.

    Attributes
    ----------
    message : str
        Human-readable error message
    error_code : str
        Machine-readable error code for categorization
    context : Dict[str, Any]
        Additional error context and metadata
    timestamp : datetime
        When the error occurred
    """

    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str = "boardroom_error",
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = dict(context or {})  # Create a copy to avoid mutation
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "context": {k: str(v) for k, v in self.context.items()},
        }


class ItemNotFoundError(BoardroomError):
    status_code = 404

    def __init__(self, item_type: str, item_id: Any) -> None:
        super().__init__(
            f"{item_type} {item_id} not found",
            error_code="item_not_found",
            context={"item_type": item_type, "item_id": item_id},
        )


class ProfileNotFoundError(BoardroomError):
    status_code = 404

    def __init__(self, profile_id: Any) -> None:
        super().__init__(
            f"profile {profile_id} not found",
            error_code="profile_not_found",
            context={"profile_id": profile_id},
        )


class VoterNotEligibleError(BoardroomError):
    status_code = 403

    def __init__(self, profile_id: Any, role: str, is_active: bool) -> None:
        super().__init__(
            f"profile {profile_id} may not vote (role={role}, active={is_active})",
            error_code="voter_not_eligible",
            context={"profile_id": profile_id, "role": role, "is_active": is_active},
        )


class VotingNotOpenError(BoardroomError):
    status_code = 409

    def __init__(self, item_type: str, item_id: Any, status: str) -> None:
        super().__init__(
            f"{item_type} {item_id} is not open for voting (status={status})",
            error_code="voting_not_open",
            context={"item_type": item_type, "item_id": item_id, "status": status},
        )


class InvalidTransitionError(BoardroomError):
    status_code = 409

    def __init__(self, item_type: str, item_id: Any, current: str, target: str) -> None:
        super().__init__(
            f"cannot move {item_type} {item_id} from {current} to {target}",
            error_code="invalid_transition",
            context={"item_type": item_type, "item_id": item_id, "current": current, "target": target},
        )


class InvalidVoteChoiceError(BoardroomError):
    status_code = 422

    def __init__(self, item_type: str, choice: str, allowed: tuple[str, ...]) -> None:
        super().__init__(
            f"invalid vote choice {choice!r} for {item_type}; expected one of {', '.join(allowed)}",
            error_code="invalid_vote_choice",
            context={"item_type": item_type, "choice": choice},
        )


class UnknownItemKindError(BoardroomError):
    status_code = 404

    def __init__(self, kind: str) -> None:
        super().__init__(
            f"unknown votable item kind {kind!r}",
            error_code="unknown_item_kind",
            context={"kind": kind},
        )


__all__ = [
    "BoardroomError",
    "ItemNotFoundError",
    "ProfileNotFoundError",
    "VoterNotEligibleError",
    "VotingNotOpenError",
    "InvalidTransitionError",
    "InvalidVoteChoiceError",
    "UnknownItemKindError",
]
