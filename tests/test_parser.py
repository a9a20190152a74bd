import logging

import pytest

from quiz_miniapp.domain.errors import InvalidInputError
from quiz_miniapp.domain.model import ParsedQuestion
from quiz_miniapp.domain.parser import parse_quiz_text, serialize_quiz_text


def test_numbered_question_with_star_marker():
    text = """
    1. What is JavaScript?
    A) A programming language *
    B) A database
    C) An operating system
    D) A browser
    """
    [q] = parse_quiz_text(text)
    assert q.question == "What is JavaScript?"
    assert q.options == ["A programming language", "A database", "An operating system", "A browser"]
    assert q.correct_answer == 0
    assert q.answer_marked


def test_devanagari_question_with_check_mark():
    text = "महाराणा प्रताप कहा के राजा थे?\n(a) उदयपुर\n(b) चित्तौड़ ✅\n(c) मेवाड़\n(d) जयपुर\n"
    [q] = parse_quiz_text(text)
    assert q.question == "महाराणा प्रताप कहा के राजा थे?"
    assert q.options == ["उदयपुर", "चित्तौड़", "मेवाड़", "जयपुर"]
    assert q.correct_answer == 1


@pytest.mark.parametrize(
    "marked",
    ["Paris *", "Paris ✅", "Paris (correct)", "Paris (Correct)", "Paris (answer)", "Paris (ANSWER)", "**Paris**"],
)
def test_each_marker_selects_option_and_is_stripped(marked):
    text = f"Capital of France?\nA. Berlin\nB. {marked}\nC. Rome\n"
    [q] = parse_quiz_text(text)
    assert q.correct_answer == 1
    assert q.options == ["Berlin", "Paris", "Rome"]


def test_option_marker_styles():
    text = "Pick one\n(a) one\n[b] two\nc. three\nD) four\n"
    [q] = parse_quiz_text(text)
    assert q.options == ["one", "two", "three", "four"]


def test_unmarked_question_defaults_to_first_option():
    [q] = parse_quiz_text("Q. Which?\nA) x\nB) y\n")
    assert q.correct_answer == 0
    assert not q.answer_marked


def test_two_marked_options_last_one_wins():
    [q] = parse_quiz_text("Which?\nA) x *\nB) y\nC) z ✅\n")
    assert q.correct_answer == 2


def test_answer_line_overrides_inline_marker():
    [q] = parse_quiz_text("Which?\nA) x *\nB) y\nC) z\nAnswer: B\n")
    assert q.correct_answer == 1
    assert q.answer_marked


@pytest.mark.parametrize("line", ["Answer: B", "answer:b", "Ans: (b)", "Correct: B", "ANSWER : b"])
def test_answer_line_letter_is_taken_after_colon(line):
    [q] = parse_quiz_text(f"Which?\nA) x\nB) y\n{line}\n")
    assert q.correct_answer == 1


def test_inline_marker_after_answer_line_wins():
    [q] = parse_quiz_text("Which?\nA) x\nAnswer: A\nB) y *\n")
    assert q.correct_answer == 1


def test_answer_line_without_letter_is_ignored():
    [q] = parse_quiz_text("Which?\nA) x\nB) y *\nAnswer: 42\n")
    assert q.correct_answer == 1


def test_answer_letter_past_last_option_falls_back(caplog):
    with caplog.at_level(logging.WARNING, logger="quiz_miniapp.domain.parser"):
        [q] = parse_quiz_text("Which?\nA) x\nB) y\nAnswer: D\n")
    assert q.correct_answer == 0
    assert not q.answer_marked
    assert "out of range" in caplog.text


def test_question_without_options_is_dropped():
    text = "Orphan header\nReal question?\nA) yes *\nB) no\n"
    [q] = parse_quiz_text(text)
    assert q.question == "Real question?"


def test_question_prefixes_are_stripped():
    text = "Q. one?\nA) a\nQuestion two?\nA) a\n12. three?\nA) a\n* four?\nA) a\n"
    assert [q.question for q in parse_quiz_text(text)] == ["one?", "two?", "three?", "four?"]


def test_prefix_only_line_keeps_previous_question_open(caplog):
    text = "1. First?\nA) a\n2.\nB) b *\n3. Second?\nA) c\n"
    with caplog.at_level(logging.WARNING, logger="quiz_miniapp.domain.parser"):
        questions = parse_quiz_text(text)
    assert [q.question for q in questions] == ["First?", "Second?"]
    assert questions[0].options == ["a", "b"]
    assert questions[0].correct_answer == 1
    assert "keeping" in caplog.text


def test_lines_before_any_question_are_ignored():
    text = "A) stray option\nAnswer: B\nReal?\nA) a\nB) b\n"
    [q] = parse_quiz_text(text)
    assert q.question == "Real?"
    assert q.correct_answer == 0


def test_blank_lines_and_crlf_are_tolerated():
    text = "\r\n\r\n  1. Spaced?  \r\n\r\n  A) yes *\r\n   B) no\r\n\r\n"
    [q] = parse_quiz_text(text)
    assert q.question == "Spaced?"
    assert q.options == ["yes", "no"]


def test_empty_and_garbage_input_yield_no_questions():
    assert parse_quiz_text("") == []
    assert parse_quiz_text("just some\nprose without\noptions") == []


def test_several_questions_in_source_order():
    text = "1. a?\nA) 1\nB) 2 *\n\n2. b?\nA) 3 *\nB) 4\nC) 5\n"
    questions = parse_quiz_text(text)
    assert [(q.question, len(q.options), q.correct_answer) for q in questions] == [
        ("a?", 2, 1),
        ("b?", 3, 0),
    ]


def test_serialized_questions_parse_back_unchanged():
    original = [
        ParsedQuestion("What is 2 + 2?", ["3", "4", "5", "22"], 1),
        ParsedQuestion("भारत की राजधानी?", ["मुंबई", "नई दिल्ली"], 1),
        ParsedQuestion("Largest planet", ["Jupiter", "Mars", "Venus"], 0),
        ParsedQuestion("Last one", ["a", "b", "c", "d"], 3),
    ]
    parsed = parse_quiz_text(serialize_quiz_text(original))
    assert [(q.question, q.options, q.correct_answer) for q in parsed] == [
        (q.question, q.options, q.correct_answer) for q in original
    ]


def test_serialize_rejects_more_than_four_options():
    with pytest.raises(InvalidInputError):
        serialize_quiz_text([ParsedQuestion("Too many", ["a", "b", "c", "d", "e"], 0)])


@pytest.mark.parametrize("options", [["2*3", "6"], ["6", "done ✅"], ["x (Correct)", "y"]])
def test_serialize_rejects_options_that_would_read_back_as_marked(options):
    with pytest.raises(InvalidInputError, match="correctness marker"):
        serialize_quiz_text([ParsedQuestion("Product?", options, 1)])


@pytest.mark.parametrize("correct", [2, -1])
def test_serialize_rejects_answer_outside_options(correct):
    with pytest.raises(InvalidInputError, match="no option"):
        serialize_quiz_text([ParsedQuestion("Which?", ["a", "b"], correct)])
