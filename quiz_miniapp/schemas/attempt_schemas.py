from typing import Annotated, List, Optional
from pydantic import BaseModel, Field


class AttemptSubmitIn(BaseModel):
    userId: str = Field(..., min_length=1)
    quizId: str = Field(..., min_length=1)
    # one entry per question, -1 = unanswered
    selected: List[Annotated[int, Field(ge=-1)]] = Field(..., min_length=1)
    timeTaken: int = Field(0, ge=0)


class AnswerOut(BaseModel):
    question_index: int
    user_answer: int
    correct_answer: int
    is_correct: bool


class AttemptOut(BaseModel):
    id: Optional[str] = None
    userId: str
    quizId: str
    quizTitle: Optional[str] = None
    score: float
    totalQuestions: int
    correctAnswers: int
    incorrectAnswers: int
    unanswered: int
    scorePercentage: float
    timeTaken: int
    negativeMarking: float
    answers: List[AnswerOut]
    createdAt: Optional[str] = None


class LeaderboardEntry(BaseModel):
    rank: int
    userId: str
    score: float
    scorePercentage: float
    totalQuestions: int
    timeTaken: int
