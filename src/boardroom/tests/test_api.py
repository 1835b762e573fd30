# src/boardroom/tests/test_api.py
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest


async def _profile(client, email, role="board_member", **kw):
    r = await client.post("/profiles", json={"email": email, "role": role, **kw})
    assert r.status_code == 201, r.text
    return r.json()["id"]


async def _board(client, n=4):
    return [await _profile(client, f"api{i}@board.test", role="admin" if i == 0 else "board_member") for i in range(n)]


async def _open_resolution(client, **voting):
    r = await client.post("/resolutions", json={"title": "Approve calendar", "resolution_number": "R-2025-01"})
    assert r.status_code == 201, r.text
    rid = r.json()["id"]
    assert r.json()["status"] == "draft"
    r = await client.post(f"/resolutions/{rid}/open-voting", json=voting or None)
    assert r.status_code == 200, r.text
    return rid


@pytest.mark.anyio
async def test_profiles_crud(client):
    pid = await _profile(client, "chair@board.test", role="admin", full_name="Chair")
    r = await client.patch(f"/profiles/{pid}", json={"is_active": False})
    assert r.status_code == 200
    assert r.json()["is_active"] is False

    r = await client.get("/profiles")
    assert [p["email"] for p in r.json()] == ["chair@board.test"]

    r = await client.patch(f"/profiles/{uuid.uuid4()}", json={"is_active": True})
    assert r.status_code == 404
    assert r.json()["detail"]["error"] == "profile_not_found"


@pytest.mark.anyio
async def test_duplicate_email_is_a_conflict(client):
    await _profile(client, "dup@board.test")
    r = await client.post("/profiles", json={"email": "dup@board.test"})
    assert r.status_code == 409
    assert r.json()["detail"]["error"] == "integrity_error"


@pytest.mark.anyio
async def test_resolution_vote_flow(client, notifier):
    voters = await _board(client)
    rid = await _open_resolution(client, approval_threshold=50, minimum_quorum=50)

    r = await client.get(f"/resolutions/{rid}")
    assert r.json()["status"] == "voting"
    assert r.json()["total_eligible_voters"] == 4

    r = await client.post(f"/resolutions/{rid}/vote", json={"voter_id": voters[0], "choice": "for"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "voting"
    assert body["tally"] == {"affirmative": 1, "negative": 0, "abstain": 0, "total": 1}
    assert body["vote"]["choice"] == "for"
    assert body["event"] is None

    r = await client.post(
        f"/resolutions/{rid}/vote", json={"voter_id": voters[1], "choice": "against", "reason": "too costly"}
    )
    body = r.json()
    assert body["status"] == "passed"
    assert body["decision"]["reason"] == "threshold_met"
    assert body["event"]["final_status"] == "passed"
    assert len(notifier.payloads) == 1

    r = await client.get(f"/resolutions/{rid}")
    item = r.json()
    assert (item["votes_for"], item["votes_against"], item["total_votes"]) == (1, 1, 2)

    r = await client.get(f"/resolutions/{rid}/votes")
    assert len(r.json()) == 2
    r = await client.get(f"/resolutions/{rid}/votes/{voters[1]}")
    assert r.json()["reason"] == "too costly"
    r = await client.get(f"/resolutions/{rid}/votes/{voters[2]}")
    assert r.status_code == 404

    r = await client.get("/voting/completions")
    assert [e["item_id"] for e in r.json()] == [rid]


@pytest.mark.anyio
async def test_vote_errors(client):
    voters = await _board(client)
    viewer = await _profile(client, "viewer@board.test", role="viewer")

    r = await client.post("/resolutions", json={"title": "Draft only"})
    draft_id = r.json()["id"]
    r = await client.post(f"/resolutions/{draft_id}/vote", json={"voter_id": voters[0], "choice": "for"})
    assert r.status_code == 409
    assert r.json()["detail"]["error"] == "voting_not_open"

    rid = await _open_resolution(client)
    r = await client.post(f"/resolutions/{rid}/vote", json={"voter_id": voters[0], "choice": "maybe"})
    assert r.status_code == 422
    r = await client.post(f"/resolutions/{rid}/vote", json={"voter_id": viewer, "choice": "for"})
    assert r.status_code == 403
    r = await client.post(f"/resolutions/{uuid.uuid4()}/vote", json={"voter_id": voters[0], "choice": "for"})
    assert r.status_code == 404
    r = await client.post(f"/resolutions/{rid}/open-voting")
    assert r.status_code == 409
    r = await client.get("/resolutions/not-a-uuid")
    assert r.status_code == 422


@pytest.mark.anyio
async def test_minutes_withdraw_and_statistics(client):
    voters = await _board(client)
    r = await client.post("/minutes", json={"title": "March meeting", "meeting_date": "2025-03-01"})
    mid = r.json()["id"]
    await client.post(f"/minutes/{mid}/open-voting", json={"approval_threshold": 100, "minimum_quorum": 100})

    await client.post(f"/minutes/{mid}/vote", json={"voter_id": voters[0], "choice": "approve"})
    await client.post(f"/minutes/{mid}/vote", json={"voter_id": voters[1], "choice": "reject", "reason": "typo concern"})

    r = await client.get(f"/minutes/{mid}/statistics")
    stats = r.json()
    assert stats["total_votes"] == 2
    assert stats["participation_rate"] == 50.0
    assert stats["comment_analysis"]["concern_keywords"] == ["concern"]
    assert len(stats["non_voters"]) == 2

    r = await client.delete(f"/minutes/{mid}/vote/{voters[1]}")
    assert r.status_code == 200
    assert r.json()["tally"]["total"] == 1
    r = await client.delete(f"/minutes/{mid}/vote/{voters[1]}")
    assert r.json()["changed"] is False

    r = await client.post(f"/minutes/{mid}/recompute")
    assert r.json()["tally"] == {"affirmative": 1, "negative": 0, "abstain": 0, "total": 1}

    r = await client.post(f"/minutes/{mid}/complete")
    assert r.json()["status"] == "failed"
    assert r.json()["event"]["completion_reason"] == "manual_completion"


@pytest.mark.anyio
async def test_deadline_endpoints(client):
    await _board(client)
    soon = (datetime.now(timezone.utc) + timedelta(hours=2)).isoformat()
    past = (datetime.now(timezone.utc) - timedelta(minutes=1)).isoformat()

    upcoming_id = await _open_resolution(client, voting_deadline=soon)
    r = await client.post("/minutes", json={"title": "Late minutes"})
    expired_id = r.json()["id"]
    await client.post(f"/minutes/{expired_id}/open-voting", json={"voting_deadline": past})

    r = await client.get("/voting/deadlines/upcoming", params={"hours_ahead": 24})
    assert [u["item_id"] for u in r.json()] == [upcoming_id]

    r = await client.post("/voting/deadlines/close-expired")
    assert r.json()["closed"] == {"resolution": [], "minutes": [expired_id]}

    r = await client.get(f"/minutes/{expired_id}")
    assert r.json()["status"] == "failed"

    r = await client.post("/voting/notifications/dispatch")
    assert r.json() == {"delivered": [], "failed": []}

    r = await client.post("/voting/tallies/resync")
    assert r.json() == []


@pytest.mark.anyio
async def test_delete_item(client):
    r = await client.post("/resolutions", json={"title": "Scratch"})
    rid = r.json()["id"]
    r = await client.delete(f"/resolutions/{rid}")
    assert r.status_code == 204
    r = await client.get(f"/resolutions/{rid}")
    assert r.status_code == 404
