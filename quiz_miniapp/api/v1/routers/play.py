import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query
from pydantic import ValidationError

from ....core.config import settings
from ....core.redis_manager import get_redis
from ....domain.errors import QuizError
from ....domain.model import ScoreResult
from ....ws.schemas import EventPayload, PlayerNext, PlayerPrevious, PlayerSelect, PlayerSubmit, ServerError
from ....ws.session_manager import LiveSession, SessionManager
from ...deps import AttemptServiceDep, QuizServiceDep

logger = logging.getLogger(__name__)

play_router = APIRouter()
manager = SessionManager(
    tick_seconds=settings.SESSION_TICK_SECONDS,
    ttl_seconds=settings.SESSION_TTL_SECONDS,
)

EVENTS = {
    "player:select": PlayerSelect,
    "player:next": PlayerNext,
    "player:previous": PlayerPrevious,
    "player:submit": PlayerSubmit,
}


def parse_event(raw: str) -> EventPayload:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")
    model = EVENTS.get(data.get("type"))
    if model is None:
        raise ValueError(f"Unknown event type: {data.get('type')}")
    return model(**data)


async def send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_text(ServerError(message=message).model_dump_json())


@play_router.websocket("/ws/play")
async def play_endpoint(
    websocket: WebSocket,
    quiz_svc: QuizServiceDep,
    attempt_svc: AttemptServiceDep,
    quizId: str = Query(...),
    userId: str = Query(...),
) -> None:
    await websocket.accept()
    logger.info("Play connection: user=%s quiz=%s", userId, quizId)

    quiz = quiz_svc.get_quiz(quizId)
    if not quiz or not quiz["questions"]:
        await send_error(websocket, "Quiz not found or has no questions")
        await websocket.close()
        return

    async def record(live: LiveSession, result: ScoreResult):
        return attempt_svc.record(
            live.user_id,
            {"id": quiz["id"], "title": quiz["title"], "negative_marking": quiz["negativeMarking"]},
            result,
            live.session.time_taken,
        )

    r = await get_redis()
    session_id = await manager.open(r, websocket, quiz, userId, record)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                evt = parse_event(raw)
                logger.debug("Play session %s event %s", session_id, evt.type)
                if isinstance(evt, PlayerSelect):
                    await manager.select(r, session_id, evt.optionIndex)
                elif isinstance(evt, PlayerNext):
                    await manager.next(r, session_id)
                elif isinstance(evt, PlayerPrevious):
                    await manager.previous(r, session_id)
                elif isinstance(evt, PlayerSubmit):
                    await manager.submit(r, session_id)
            except (QuizError, ValidationError, ValueError) as e:
                await send_error(websocket, str(e))

    except WebSocketDisconnect:
        logger.info("Play session %s disconnected", session_id)

    except Exception:
        logger.exception("Play session %s failed", session_id)
        try:
            await send_error(websocket, "Internal error")
        except (RuntimeError, WebSocketDisconnect):
            pass

    finally:
        await manager.close(r, session_id)
