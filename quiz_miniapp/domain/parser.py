"""Plain-text quiz import.

Two conventions are accepted in the same file without the uploader declaring
which one is used::

    1. What is JavaScript?
    A) A programming language *
    B) A database

    महाराणा प्रताप कहा के राजा थे?
    (a) उदयपुर
    (b) चित्तौड़ ✅
    Answer: B

Lines are classified one at a time and folded into an immutable parse state,
so the parser keeps no module-level state and is safe to call concurrently.
"""
import logging
import re
from dataclasses import dataclass, replace
from functools import reduce
from typing import Iterable, Optional, Tuple

from .errors import InvalidInputError
from .model import ParsedQuestion

logger = logging.getLogger(__name__)

OPTION_RE = re.compile(r"^[(\[]?[A-Da-d][)\.\]]\s*")
ANSWER_LINE_RE = re.compile(r"^(?:Answer|Correct|Ans)\s*:(?P<rest>.*)$", re.IGNORECASE)
ANSWER_LETTER_RE = re.compile(r"[A-Da-d]")
QUESTION_PREFIX_RE = re.compile(r"^(?:Q\.|Question|[0-9]+\.|\*)\s*", re.IGNORECASE)
CORRECT_MARK_RE = re.compile(r"\*+|✅|\(correct\)|\(answer\)", re.IGNORECASE)

OPTION_LETTERS = "ABCD"


@dataclass(frozen=True)
class _ParseState:
    done: Tuple[ParsedQuestion, ...] = ()
    current: Optional[ParsedQuestion] = None


def _flush(state: _ParseState) -> Tuple[ParsedQuestion, ...]:
    current = state.current
    if current is None or not current.options:
        return state.done
    if current.correct_answer >= len(current.options):
        # "Answer: D" under a two-option question
        logger.warning(
            "Answer index %d out of range for %r (%d options), falling back to 0",
            current.correct_answer,
            current.question,
            len(current.options),
        )
        current = replace(current, correct_answer=0, answer_marked=False)
    return state.done + (current,)


def _on_option(state: _ParseState, line: str) -> _ParseState:
    if state.current is None:
        logger.debug("Option line before any question ignored: %r", line)
        return state

    text = OPTION_RE.sub("", line, count=1)
    position = len(state.current.options)
    current = replace(
        state.current,
        options=state.current.options + [CORRECT_MARK_RE.sub("", text).strip()],
    )
    if CORRECT_MARK_RE.search(text):
        # last marked option wins
        current = replace(current, correct_answer=position, answer_marked=True)
    return replace(state, current=current)


def _on_answer(state: _ParseState, rest: str, line: str) -> _ParseState:
    if state.current is None:
        logger.debug("Answer line before any question ignored: %r", line)
        return state

    m = ANSWER_LETTER_RE.search(rest)
    if not m:
        logger.warning("Answer line without an A-D letter ignored: %r", line)
        return state

    index = ord(m.group(0).upper()) - ord("A")
    current = replace(state.current, correct_answer=index, answer_marked=True)
    return replace(state, current=current)


def _on_question(state: _ParseState, line: str) -> _ParseState:
    text = QUESTION_PREFIX_RE.sub("", line, count=1).strip()
    if not text:
        logger.warning(
            "Line %r has no question text after its prefix; keeping %r open",
            line,
            state.current.question if state.current else None,
        )
        return state

    if state.current is not None and not state.current.options:
        logger.debug("Question without options dropped: %r", state.current.question)
    return _ParseState(done=_flush(state), current=ParsedQuestion(question=text, options=[]))


def _step(state: _ParseState, line: str) -> _ParseState:
    if OPTION_RE.match(line):
        return _on_option(state, line)
    m = ANSWER_LINE_RE.match(line)
    if m:
        return _on_answer(state, m.group("rest"), line)
    return _on_question(state, line)


def parse_quiz_text(text: str) -> list[ParsedQuestion]:
    """Parse an uploaded quiz text into questions, in source order.

    Never raises: lines that fit no convention are skipped or reread as
    question headers. Questions collecting no options are dropped, and a
    question without any correctness mark gets ``correct_answer == 0`` with
    ``answer_marked`` left False so callers can warn about it. An empty list
    is a valid result.
    """
    lines = (raw.strip() for raw in text.split("\n"))
    state = reduce(_step, (line for line in lines if line), _ParseState())
    questions = list(_flush(state))
    logger.debug("Parsed %d questions", len(questions))
    return questions


def serialize_quiz_text(questions: Iterable[ParsedQuestion]) -> str:
    """Render questions in the ``1. question`` / ``A) option *`` convention."""
    blocks = []
    for num, q in enumerate(questions, start=1):
        if len(q.options) > len(OPTION_LETTERS):
            raise InvalidInputError(f"Question {num} has more than {len(OPTION_LETTERS)} options")
        if not 0 <= q.correct_answer < len(q.options):
            raise InvalidInputError(f"Question {num} has no option {q.correct_answer}")
        for option in q.options:
            if CORRECT_MARK_RE.search(option):
                raise InvalidInputError(f"Question {num} option {option!r} contains a correctness marker")
        lines = [f"{num}. {q.question}"]
        for idx, option in enumerate(q.options):
            mark = " *" if idx == q.correct_answer else ""
            lines.append(f"{OPTION_LETTERS[idx]}) {option}{mark}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"
