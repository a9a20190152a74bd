from typing import Annotated, List, Optional
from pydantic import BaseModel, Field, model_validator

MIN_TIMER_SECONDS = 11


class QuestionIn(BaseModel):
    question: str = Field(..., min_length=1)
    options: Annotated[list[Annotated[str, Field(min_length=1)]], Field(min_length=2)]
    correctAnswer: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _answer_in_range(self):
        if self.correctAnswer >= len(self.options):
            raise ValueError("correctAnswer must point at one of the options")
        return self

    def to_row(self) -> dict:
        return {
            "question": self.question,
            "options": self.options,
            "correct_answer": self.correctAnswer,
        }


class QuizCreateIn(BaseModel):
    userId: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    isPaid: bool = False
    price: int = Field(0, ge=0)
    timer: int = Field(30, ge=MIN_TIMER_SECONDS)
    negativeMarking: float = Field(0, ge=0)
    questions: List[QuestionIn] = []

    def to_row(self) -> dict:
        return {
            "user_id": self.userId,
            "title": self.title,
            "description": self.description,
            "is_paid": self.isPaid,
            "price": self.price if self.isPaid else 0,
            "timer": self.timer,
            "negative_marking": self.negativeMarking,
        }


class QuizUpdateIn(BaseModel):
    """Metadata only; question content is not edited through this payload."""

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    isPaid: Optional[bool] = None
    price: Optional[int] = Field(None, ge=0)
    timer: Optional[int] = Field(None, ge=MIN_TIMER_SECONDS)
    negativeMarking: Optional[float] = Field(None, ge=0)

    @model_validator(mode="after")
    def _no_null_columns(self):
        # only description may be cleared; the other columns are NOT NULL
        for name in ("title", "isPaid", "price", "timer", "negativeMarking"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def to_patch(self) -> dict:
        columns = {
            "title": "title",
            "description": "description",
            "isPaid": "is_paid",
            "price": "price",
            "timer": "timer",
            "negativeMarking": "negative_marking",
        }
        data = self.model_dump(exclude_unset=True)
        return {columns[k]: v for k, v in data.items() if k in columns}


class QuestionOut(BaseModel):
    id: str
    quizId: str
    question: str
    options: list[str]
    correctAnswer: int
    order: int


class QuizOut(BaseModel):
    id: str
    userId: str
    title: str
    description: Optional[str] = None
    isPaid: bool
    price: int
    timer: int
    negativeMarking: float
    participants: int
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class QuizDetailOut(QuizOut):
    questions: List[QuestionOut]


class QuizListItem(QuizOut):
    questionCount: int


class ParsedQuestionOut(BaseModel):
    question: str
    options: list[str]
    correctAnswer: int
    answerMarked: bool


class ParsePreviewIn(BaseModel):
    text: str


class ParsePreviewOut(BaseModel):
    questions: List[ParsedQuestionOut]
    questionCount: int
    unmarkedCount: int
    droppedCount: int = 0


class UploadOut(BaseModel):
    quiz: QuizDetailOut
    questionCount: int
    unmarkedCount: int
    droppedCount: int = 0


class StatsOut(BaseModel):
    totalQuizzes: int
    freeQuizzes: int
    paidQuizzes: int
    engagement: int
