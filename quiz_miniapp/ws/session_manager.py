import json
import uuid
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from fastapi.websockets import WebSocket
from redis.asyncio import Redis

from ..domain.model import ScoreResult
from ..domain.scoring import performance_label
from ..domain.session import Phase, PlaySession, TickEvent
from .schemas import CurrentQuestion, ServerResults, ServerStateSync

logger = logging.getLogger(__name__)

REDIS_PREFIX = "quiz:play:"

# called once per session with the final result; returns the stored attempt or None
Recorder = Callable[["LiveSession", ScoreResult], Awaitable[Optional[dict]]]


@dataclass
class LiveSession:
    session_id: str
    user_id: str
    quiz: dict
    session: PlaySession
    websocket: WebSocket
    on_submitted: Recorder


class SessionManager:
    """
    Live quiz-taking sessions, one WebSocket each.

    Every session owns one countdown task that calls PlaySession.tick() each
    tick interval. The task is cancelled on submission and on disconnect so a
    stale timer never advances or submits a session that is gone.
    """

    def __init__(self, tick_seconds: float = 1.0, ttl_seconds: int = 6 * 60 * 60) -> None:
        self.tick_seconds = tick_seconds
        self.ttl_seconds = ttl_seconds
        self.live: Dict[str, LiveSession] = {}
        self.countdowns: Dict[str, asyncio.Task] = {}

    # --- Redis keys ---

    def k_state(self, session_id: str) -> str:
        return f"{REDIS_PREFIX}{session_id}:state"

    def k_submitted(self, session_id: str) -> str:
        return f"{REDIS_PREFIX}{session_id}:submitted"

    # --- lifecycle ---

    async def open(
        self,
        r: Redis,
        websocket: WebSocket,
        quiz: dict,
        user_id: str,
        on_submitted: Recorder,
    ) -> str:
        """Start a session for an accepted websocket and push the first state."""
        questions = quiz["questions"]
        session = PlaySession(
            correct_answers=[q["correctAnswer"] for q in questions],
            options_count=[len(q["options"]) for q in questions],
            timer=quiz["timer"],
            negative_marking=quiz["negativeMarking"],
        )
        session.start()

        session_id = str(uuid.uuid4())
        self.live[session_id] = LiveSession(
            session_id=session_id,
            user_id=user_id,
            quiz=quiz,
            session=session,
            websocket=websocket,
            on_submitted=on_submitted,
        )
        logger.info(
            "Play session %s opened: user=%s quiz=%s (%d questions, %ss each)",
            session_id,
            user_id,
            quiz["id"],
            session.question_count,
            session.timer,
        )
        await self.push_state(r, session_id)
        self._restart_countdown(r, session_id)
        return session_id

    async def close(self, r: Redis, session_id: str) -> None:
        """The user navigated away: stop the timer and forget the session."""
        self._cancel_countdown(session_id)
        live = self.live.pop(session_id, None)
        if live is None:
            return
        if live.session.phase != Phase.SUBMITTED:
            await r.delete(self.k_state(session_id))
            logger.info("Play session %s abandoned at question %d", session_id, live.session.current_index)

    # --- countdown ---

    def _cancel_countdown(self, session_id: str) -> None:
        task = self.countdowns.pop(session_id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    def _restart_countdown(self, r: Redis, session_id: str) -> None:
        self._cancel_countdown(session_id)
        self.countdowns[session_id] = asyncio.create_task(self._countdown(r, session_id))

    async def _countdown(self, r: Redis, session_id: str) -> None:
        try:
            while True:
                await asyncio.sleep(self.tick_seconds)
                live = self.live.get(session_id)
                if live is None or live.session.phase != Phase.IN_PROGRESS:
                    return
                event = live.session.tick()
                if event == TickEvent.SUBMITTED:
                    logger.info("Play session %s: time is up on the last question", session_id)
                    await self.finish(r, session_id)
                    return
                if event == TickEvent.ADVANCED:
                    logger.debug("Play session %s: time is up, moved to %d", session_id, live.session.current_index)
                await self.push_state(r, session_id)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Countdown failed for play session %s", session_id)

    # --- player actions ---

    def get(self, session_id: str) -> LiveSession:
        return self.live[session_id]

    async def select(self, r: Redis, session_id: str, option_index: int) -> None:
        self.get(session_id).session.select(option_index)
        await self.push_state(r, session_id)

    async def next(self, r: Redis, session_id: str) -> None:
        live = self.get(session_id)
        live.session.next()
        if live.session.phase == Phase.SUBMITTED:
            await self.finish(r, session_id)
            return
        self._restart_countdown(r, session_id)
        await self.push_state(r, session_id)

    async def previous(self, r: Redis, session_id: str) -> None:
        live = self.get(session_id)
        before = live.session.current_index
        live.session.previous()
        if live.session.current_index != before:
            self._restart_countdown(r, session_id)
        await self.push_state(r, session_id)

    async def submit(self, r: Redis, session_id: str) -> None:
        self.get(session_id).session.submit()
        await self.finish(r, session_id)

    async def finish(self, r: Redis, session_id: str) -> None:
        """Score a submitted session, record it at most once and send results."""
        self._cancel_countdown(session_id)
        live = self.get(session_id)
        result = live.session.result()

        attempt = None
        first = await r.set(self.k_submitted(session_id), "1", nx=True, ex=self.ttl_seconds)
        if first:
            attempt = await live.on_submitted(live, result)
        else:
            logger.warning("Play session %s already recorded, skipping duplicate submit", session_id)

        await self.persist(r, session_id)
        msg = ServerResults(
            sessionId=session_id,
            quizId=live.quiz["id"],
            correct=result.correct,
            incorrect=result.incorrect,
            unanswered=result.unanswered,
            finalScore=result.final_score,
            scorePercentage=result.score_percentage,
            performance=performance_label(result.score_percentage),
            timeTaken=live.session.time_taken,
            recorded=bool(first),
            attemptId=attempt.get("id") if attempt else None,
        )
        await live.websocket.send_text(msg.model_dump_json())

    # --- state ---

    def state_message(self, session_id: str) -> ServerStateSync:
        live = self.get(session_id)
        s = live.session
        question = None
        if s.phase == Phase.IN_PROGRESS:
            q = live.quiz["questions"][s.current_index]
            question = CurrentQuestion(question=q["question"], options=q["options"])
        return ServerStateSync(
            sessionId=session_id,
            quizId=live.quiz["id"],
            phase=s.phase.value,
            currentIndex=s.current_index,
            questionCount=s.question_count,
            timer=s.timer,
            timeLeft=s.time_left,
            answers=list(s.answers),
            question=question,
        )

    async def persist(self, r: Redis, session_id: str) -> None:
        live = self.get(session_id)
        state = {**live.session.snapshot(), "quizId": live.quiz["id"], "userId": live.user_id}
        await r.set(self.k_state(session_id), json.dumps(state), ex=self.ttl_seconds)

    async def push_state(self, r: Redis, session_id: str) -> None:
        await self.persist(r, session_id)
        msg = self.state_message(session_id)
        await self.get(session_id).websocket.send_text(msg.model_dump_json())
