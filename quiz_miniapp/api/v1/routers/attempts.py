from fastapi import APIRouter, Query, status
from typing import Annotated, Optional
from ....core.config import settings
from ....schemas.attempt_schemas import AttemptOut, AttemptSubmitIn, LeaderboardEntry
from ...deps import AttemptServiceDep

router = APIRouter(prefix="/quiz-attempts", tags=["attempts"])


@router.post("/", response_model=AttemptOut, status_code=status.HTTP_201_CREATED)
async def submit_attempt(payload: AttemptSubmitIn, svc: AttemptServiceDep):
    # scored server-side against the stored answer key
    return svc.submit(payload.userId, payload.quizId, payload.selected, payload.timeTaken)


@router.get("/", response_model=list[LeaderboardEntry])
async def leaderboard(
    svc: AttemptServiceDep,
    quizId: Annotated[str, Query(min_length=1)],
    limit: Annotated[Optional[int], Query(ge=1, le=100)] = None,
):
    return svc.leaderboard(quizId, limit or settings.LEADERBOARD_LIMIT)


@router.get("/{user_id}", response_model=list[AttemptOut])
async def history(user_id: str, svc: AttemptServiceDep):
    return svc.history(user_id)
