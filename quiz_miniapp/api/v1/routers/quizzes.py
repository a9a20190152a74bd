import logging

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from typing import Annotated, Optional
from ....core.config import settings
from ....schemas.quiz_schemas import (
    MIN_TIMER_SECONDS,
    ParsePreviewIn,
    ParsePreviewOut,
    QuestionIn,
    QuestionOut,
    QuizCreateIn,
    QuizDetailOut,
    QuizListItem,
    QuizOut,
    QuizUpdateIn,
    UploadOut,
)
from ...deps import QuizServiceDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quizzes", tags=["quizzes"])


@router.get("/", response_model=list[QuizListItem])
async def list_quizzes(svc: QuizServiceDep, userId: Annotated[str, Query(min_length=1)]):
    return svc.list_quizzes(userId)


@router.post("/upload", response_model=UploadOut, status_code=status.HTTP_201_CREATED)
async def upload_quiz(
    svc: QuizServiceDep,
    file: Annotated[UploadFile, File()],
    userId: Annotated[str, Form(min_length=1)],
    title: Annotated[str, Form(min_length=1)] = "Imported Quiz",
    isPaid: Annotated[bool, Form()] = False,
    price: Annotated[int, Form(ge=0)] = 0,
    timer: Annotated[Optional[int], Form(ge=MIN_TIMER_SECONDS)] = None,
    negativeMarking: Annotated[float, Form(ge=0)] = 0.0,
):
    filename = file.filename or ""
    media_type = (file.content_type or "").split(";")[0].strip().lower()
    if media_type != "text/plain" and not filename.lower().endswith(".txt"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only .txt files are allowed")

    content = await file.read(settings.UPLOAD_MAX_BYTES + 1)
    if len(content) > settings.UPLOAD_MAX_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.UPLOAD_MAX_BYTES} bytes",
        )
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is not valid UTF-8")

    logger.info("Importing %s (%d bytes) for user %s", filename, len(content), userId)
    return svc.import_text(
        text,
        {
            "user_id": userId,
            "title": title,
            "is_paid": isPaid,
            "price": price if isPaid else 0,
            "timer": timer or settings.DEFAULT_TIMER,
            "negative_marking": negativeMarking,
        },
    )


@router.post("/parse-preview", response_model=ParsePreviewOut)
async def parse_preview(payload: ParsePreviewIn, svc: QuizServiceDep):
    return svc.preview_text(payload.text)


@router.get("/{quiz_id}", response_model=QuizDetailOut)
async def get_quiz(quiz_id: str, svc: QuizServiceDep):
    data = svc.get_quiz(quiz_id)
    if not data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return data


@router.post("/", response_model=QuizDetailOut, status_code=status.HTTP_201_CREATED)
async def create_quiz(payload: QuizCreateIn, svc: QuizServiceDep):
    return svc.create_quiz(payload.to_row(), [q.to_row() for q in payload.questions])


@router.put("/{quiz_id}", response_model=QuizOut)
async def update_quiz(quiz_id: str, payload: QuizUpdateIn, svc: QuizServiceDep):
    patch = payload.to_patch()
    if not patch:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update")
    data = svc.update_quiz(quiz_id, patch)
    if not data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return data


@router.delete("/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quiz(quiz_id: str, svc: QuizServiceDep):
    if not svc.delete_quiz(quiz_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return None


@router.get("/{quiz_id}/questions", response_model=list[QuestionOut])
async def list_questions(quiz_id: str, svc: QuizServiceDep):
    return svc.list_questions(quiz_id)


@router.post("/{quiz_id}/questions", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
async def add_question(quiz_id: str, payload: QuestionIn, svc: QuizServiceDep):
    return svc.add_question(quiz_id, payload.to_row())
