from fastapi import APIRouter, HTTPException, Query, Response, status
from typing import Annotated
from ....schemas.quiz_schemas import StatsOut
from ....schemas.user_schemas import PremiumOut, ProfileOut, UserIn, UserOut
from ...deps import QuizServiceDep, UserServiceDep

router = APIRouter(tags=["users"])


@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserIn, response: Response, svc: UserServiceDep):
    user, created = svc.ensure_user(
        payload.telegramId, payload.username, payload.firstName, payload.lastName
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return user


@router.get("/users/{telegram_id}", response_model=UserOut)
async def get_user(telegram_id: str, svc: UserServiceDep):
    user = svc.get_user(telegram_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/users/{telegram_id}/profile", response_model=ProfileOut)
async def get_profile(telegram_id: str, svc: UserServiceDep):
    profile = svc.get_profile(telegram_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.get("/users/{telegram_id}/premium", response_model=PremiumOut)
async def get_premium(telegram_id: str, svc: UserServiceDep):
    return {"isPremium": svc.is_premium(telegram_id)}


@router.get("/stats", response_model=StatsOut)
async def stats(svc: QuizServiceDep, userId: Annotated[str, Query(min_length=1)]):
    return svc.stats(userId)
