"""REST API surface for positions, answers and radar matches."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from icebreaker.core import MatchingCore
from icebreaker.domain.matching.schemas import BestMatchOut, CompatibilityOut, CandidateOut, MatchesResponse
from icebreaker.domain.profile.schemas import AnswerPayload, AnswerResponse
from icebreaker.domain.proximity.schemas import PositionPayload, PositionResponse, VisibilityPayload

router = APIRouter()


def get_core(request: Request) -> MatchingCore:
    return request.app.state.core


@router.put("/users/{user_id}/position", response_model=PositionResponse)
async def update_position(user_id: str, payload: PositionPayload, core: MatchingCore = Depends(get_core)):
    accepted = await core.positions.update_position(
        user_id,
        payload.coordinates(),
        payload.radius,
        handle=payload.handle,
        timestamp=payload.ts,
    )
    user = core.positions.get(user_id)
    return PositionResponse(accepted=accepted, visible=user.visible, radius=user.radius, last_seen=user.last_seen)


@router.put("/users/{user_id}/visibility")
async def set_visibility(user_id: str, payload: VisibilityPayload, core: MatchingCore = Depends(get_core)):
    await core.positions.set_visible(user_id, payload.visible)
    return {"ok": True, "visible": payload.visible}


@router.delete("/users/{user_id}")
async def remove_user(user_id: str, core: MatchingCore = Depends(get_core)):
    await core.remove_user(user_id)
    return {"ok": True}


@router.post("/users/{user_id}/answers", response_model=AnswerResponse, status_code=status.HTTP_201_CREATED)
async def submit_answer(user_id: str, payload: AnswerPayload, core: MatchingCore = Depends(get_core)):
    answer = await core.profiles.submit_answer(
        user_id,
        payload.question_id,
        payload.value,
        shared=payload.shared,
        category=payload.category,
        timestamp=payload.ts,
    )
    return AnswerResponse.from_answer(answer, core.profiles.version(user_id))


@router.get("/users/{user_id}/matches", response_model=MatchesResponse)
async def matches(
    user_id: str,
    range_: Optional[float] = Query(default=None, alias="range"),
    limit: Optional[int] = Query(default=None, ge=1, le=200),
    core: MatchingCore = Depends(get_core),
):
    candidates = await core.matcher.find_matches(user_id, range_, limit=limit)
    record = core.selector.best_match(user_id)
    return MatchesResponse(
        items=[CandidateOut.from_domain(candidate) for candidate in candidates],
        best_match=BestMatchOut.from_domain(record) if record else None,
    )


@router.get("/users/{user_id}/best-match", response_model=BestMatchOut)
async def best_match(user_id: str, core: MatchingCore = Depends(get_core)):
    record = core.selector.best_match(user_id)
    if record is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "no_best_match_today")
    return BestMatchOut.from_domain(record)


@router.post("/users/{user_id}/pass/{target_id}")
async def pass_user(user_id: str, target_id: str, core: MatchingCore = Depends(get_core)):
    if user_id == target_id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "self_interaction")
    core.interactions.pass_user(user_id, target_id)
    return {"ok": True}


@router.post("/users/{user_id}/block/{target_id}")
async def block_user(user_id: str, target_id: str, core: MatchingCore = Depends(get_core)):
    if user_id == target_id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "self_interaction")
    core.interactions.block_user(user_id, target_id)
    return {"ok": True}


@router.get("/pairs/{user_a}/{user_b}/compatibility", response_model=CompatibilityOut)
async def compatibility(user_a: str, user_b: str, core: MatchingCore = Depends(get_core)):
    if user_a == user_b:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "self_pair")
    result = await core.matcher.compatibility(user_a, user_b)
    return CompatibilityOut.from_domain(result)
