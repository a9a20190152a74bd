from pydantic import BaseModel, Field
from typing import List, Literal, Optional


class PlayerSelect(BaseModel):
    type: Literal["player:select"] = "player:select"
    optionIndex: int = Field(..., ge=0)


class PlayerNext(BaseModel):
    type: Literal["player:next"] = "player:next"


class PlayerPrevious(BaseModel):
    type: Literal["player:previous"] = "player:previous"


class PlayerSubmit(BaseModel):
    type: Literal["player:submit"] = "player:submit"


class CurrentQuestion(BaseModel):
    # no correct answer here: it is revealed only in results
    question: str
    options: list[str]


class ServerStateSync(BaseModel):
    type: Literal["state_sync"] = "state_sync"
    sessionId: str
    quizId: str
    phase: Literal["NOT_STARTED", "IN_PROGRESS", "SUBMITTED"]
    currentIndex: int
    questionCount: int
    timer: int
    timeLeft: int | None = None
    answers: List[int]
    question: CurrentQuestion | None = None


class ServerResults(BaseModel):
    type: Literal["results"] = "results"
    sessionId: str
    quizId: str
    correct: int
    incorrect: int
    unanswered: int
    finalScore: float
    scorePercentage: float
    performance: str
    timeTaken: int
    recorded: bool
    attemptId: Optional[str] = None


class ServerError(BaseModel):
    type: Literal["error"] = "error"
    message: str


EventPayload = PlayerSelect | PlayerNext | PlayerPrevious | PlayerSubmit
