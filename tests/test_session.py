import pytest

from quiz_miniapp.domain.errors import InvalidInputError, SessionStateError
from quiz_miniapp.domain.session import Phase, PlaySession, TickEvent


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def make_session(n=3, timer=3, negative_marking=0.0, clock=None):
    return PlaySession(
        correct_answers=[0] * n,
        options_count=[4] * n,
        timer=timer,
        negative_marking=negative_marking,
        clock=clock or FakeClock(),
    )


def test_start_initialises_answers_and_timer():
    s = make_session()
    assert s.phase == Phase.NOT_STARTED
    s.start()
    assert s.phase == Phase.IN_PROGRESS
    assert s.answers == [-1, -1, -1]
    assert (s.current_index, s.time_left) == (0, 3)


def test_select_overwrites_without_advancing():
    s = make_session()
    s.start()
    s.select(2)
    s.select(1)
    assert s.answers[0] == 1
    assert s.current_index == 0


def test_select_rejects_missing_option():
    s = make_session()
    s.start()
    with pytest.raises(InvalidInputError):
        s.select(4)


def test_next_requires_a_selection():
    s = make_session()
    s.start()
    with pytest.raises(InvalidInputError):
        s.next()


def test_timeout_on_middle_question_advances_and_resets_timer():
    s = make_session(timer=2)
    s.start()
    assert s.tick() == TickEvent.COUNTDOWN
    assert s.tick() == TickEvent.ADVANCED
    assert s.current_index == 1
    assert s.answers[0] == -1
    assert s.time_left == 2


def test_timeout_on_last_question_submits():
    s = make_session(n=1, timer=1)
    s.start()
    assert s.tick() == TickEvent.SUBMITTED
    assert s.phase == Phase.SUBMITTED
    assert s.result().unanswered == 1


def test_previous_resets_timer_and_stays_at_zero():
    s = make_session(timer=5)
    s.start()
    s.previous()
    assert s.current_index == 0
    s.select(0)
    s.next()
    s.tick()
    s.previous()
    assert (s.current_index, s.time_left) == (0, 5)


def test_next_on_last_question_submits_and_scores():
    clock = FakeClock()
    s = make_session(n=2, negative_marking=0.5, clock=clock)
    s.start()
    s.select(0)
    s.next()
    s.select(3)
    clock.now += 42.7
    s.next()
    assert s.phase == Phase.SUBMITTED
    res = s.result()
    assert (res.correct, res.incorrect) == (1, 1)
    assert res.final_score == pytest.approx(0.5)
    assert s.time_taken == 42


def test_submit_only_from_last_question():
    s = make_session()
    s.start()
    with pytest.raises(SessionStateError):
        s.submit()


def test_no_changes_after_submission():
    s = make_session(n=1)
    s.start()
    s.submit()
    for action in (lambda: s.select(0), s.next, s.previous, s.tick, s.submit):
        with pytest.raises(SessionStateError):
            action()


def test_result_before_submission_is_an_error():
    s = make_session()
    s.start()
    with pytest.raises(SessionStateError):
        s.result()


def test_invalid_construction():
    with pytest.raises(InvalidInputError):
        PlaySession([], [], timer=30)
    with pytest.raises(InvalidInputError):
        PlaySession([0], [4, 4], timer=30)
