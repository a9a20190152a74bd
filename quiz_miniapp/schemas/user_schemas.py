from typing import List, Optional
from pydantic import BaseModel, Field


class UserIn(BaseModel):
    telegramId: str = Field(..., min_length=1)
    username: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None


class UserOut(BaseModel):
    id: str
    telegramId: str
    username: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    createdAt: Optional[str] = None


class StreakOut(BaseModel):
    current: int
    best: int
    lastQuizDate: Optional[str] = None


class ProfileOut(UserOut):
    totalQuizzes: int
    totalQuestionsAnswered: int
    totalCorrectAnswers: int
    totalIncorrectAnswers: int
    avgScorePercentage: float
    streak: StreakOut
    isPremium: bool
    achievements: List[str]


class PremiumOut(BaseModel):
    isPremium: bool
