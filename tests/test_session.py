import pytest

from mathion.models import HINT_BUDGET
from mathion.session import (
    GENERATION_ERROR_NOTICE,
    HINT_FAILURE_TEXT,
    QuizSession,
    check_answer,
)

from .conftest import make_questions


def started_session(n: int = 5) -> QuizSession:
    s = QuizSession()
    s.select_category("Arithmetic")
    gen = s.select_difficulty("Easy")
    assert s.apply_questions(gen, make_questions(n))
    return s


# ----------------------------------------------------------------------
#  正誤判定
# ----------------------------------------------------------------------
@pytest.mark.parametrize(
    "user, correct, expected",
    [
        ("7", "7", True),
        ("7 ", "7", True),
        ("  7", " 7 ", True),
        ("7.0", "7", False),
        ("Triangle", "triangle", True),
        ("x = 3", "3", False),
        ("", "0", False),
    ],
)
def test_check_answer(user, correct, expected):
    assert check_answer(user, correct) is expected


def test_check_answer_is_deterministic():
    assert check_answer("ABC", "abc") == check_answer("ABC", "abc")


# ----------------------------------------------------------------------
#  カテゴリ・難易度
# ----------------------------------------------------------------------
def test_initial_state():
    s = QuizSession()
    assert s.state == "idle"
    assert s.category is None
    assert s.difficulty is None
    assert s.hint_budget == HINT_BUDGET
    assert s.current_question is None


def test_select_category_then_difficulty_enters_loading():
    s = QuizSession()
    assert s.select_category("Geometry")
    assert s.state == "idle"
    gen = s.select_difficulty("Hard")
    assert gen == s.generation
    assert s.state == "loading"
    assert s.difficulty == "Hard"


def test_difficulty_without_category_is_ignored():
    s = QuizSession()
    assert s.select_difficulty("Easy") is None
    assert s.state == "idle"


def test_unknown_values_raise():
    s = QuizSession()
    with pytest.raises(ValueError):
        s.select_category("Calculus")
    s.select_category("Algebra")
    with pytest.raises(ValueError):
        s.select_difficulty("Impossible")


def test_back_to_categories():
    s = QuizSession()
    s.select_category("Mixed")
    assert s.back_to_categories()
    assert s.category is None


# ----------------------------------------------------------------------
#  問題取得結果
# ----------------------------------------------------------------------
def test_apply_questions_starts_quiz():
    s = started_session()
    assert s.state == "active"
    assert s.current_index == 0
    assert s.score == 0
    assert s.hint_budget == HINT_BUDGET
    assert s.current_question.text == "What is 1 + 1?"


def test_short_batch_is_accepted():
    s = started_session(n=2)
    assert s.total_questions == 2


def test_empty_batch_resets_to_idle():
    s = QuizSession()
    s.select_category("Arithmetic")
    gen = s.select_difficulty("Easy")
    assert not s.apply_questions(gen, [])
    assert s.state == "idle"
    assert s.category is None
    assert s.difficulty is None
    assert s.score == 0
    assert s.hint_budget == HINT_BUDGET
    assert s.error_notice == GENERATION_ERROR_NOTICE


def test_stale_batch_is_discarded_after_reset():
    s = QuizSession()
    s.select_category("Arithmetic")
    gen = s.select_difficulty("Easy")
    s.reset()
    assert not s.apply_questions(gen, make_questions())
    assert s.state == "idle"
    assert s.questions == ()


def test_stale_failure_does_not_touch_new_session():
    s = QuizSession()
    s.select_category("Arithmetic")
    old = s.select_difficulty("Easy")
    s.reset()
    s.select_category("Algebra")
    new = s.select_difficulty("Medium")
    assert not s.fail_generation(old)
    assert s.state == "loading"
    assert s.apply_questions(new, make_questions())


# ----------------------------------------------------------------------
#  解答と進行
# ----------------------------------------------------------------------
def test_blank_answer_is_ignored():
    s = started_session()
    assert s.submit_answer("   ") is None
    assert s.state == "active"


def test_correct_and_incorrect_feedback():
    s = started_session()
    assert s.submit_answer(" 2 ") is True
    assert s.state == "feedback"
    assert s.score == 1
    assert s.feedback.message == "Correct!"

    s.next_question()
    assert s.submit_answer("4.0") is False
    assert s.score == 1
    assert s.feedback.message == "Incorrect! The answer is 4"


def test_submit_only_once_per_question():
    s = started_session()
    s.submit_answer("2")
    assert s.submit_answer("2") is None
    assert s.score == 1


def test_next_question_clears_per_question_state():
    s = started_session()
    s.set_user_answer("2")
    s.begin_hint()
    s.submit_answer()
    s.next_question()
    assert s.state == "active"
    assert s.current_index == 1
    assert s.user_answer == ""
    assert s.last_hint_text is None
    assert not s.hint_used_for_current_question
    assert s.feedback is None


def test_all_correct_reaches_finished_with_full_score():
    s = started_session()
    states = []
    for q in make_questions():
        s.submit_answer(q.answer)
        states.append(s.state)
        s.next_question()
    assert states == ["feedback"] * 5
    assert s.state == "finished"
    assert s.score == 5


def test_score_stays_within_bounds():
    s = started_session()
    for _ in range(5):
        s.submit_answer("2")
        assert 0 <= s.score <= s.total_questions
        s.next_question()
    assert s.state == "finished"
    assert s.next_question() is False


# ----------------------------------------------------------------------
#  ヒント
# ----------------------------------------------------------------------
def test_hint_only_once_per_question():
    s = started_session()
    ticket = s.begin_hint()
    assert ticket is not None
    assert s.hint_budget == HINT_BUDGET - 1
    assert s.begin_hint() is None
    assert s.hint_budget == HINT_BUDGET - 1

    assert s.complete_hint(ticket, "first")
    assert s.begin_hint() is None
    assert s.last_hint_text == "first"
    assert s.hint_budget == HINT_BUDGET - 1


def test_hint_failure_still_spends_budget():
    s = started_session()
    ticket = s.begin_hint()
    s.fail_hint(ticket)
    assert s.last_hint_text == HINT_FAILURE_TEXT
    assert s.hint_budget == HINT_BUDGET - 1
    assert s.hint_used_for_current_question


def test_hint_budget_never_negative():
    s = started_session()
    for _ in range(5):
        ticket = s.begin_hint()
        if ticket is not None:
            s.complete_hint(ticket, "hint")
        assert s.hint_budget >= 0
        s.submit_answer("x")
        s.next_question()
    assert s.hint_budget == 0


def test_hint_not_available_in_feedback():
    s = started_session()
    s.submit_answer("2")
    assert s.begin_hint() is None


def test_hint_for_previous_question_is_discarded():
    s = started_session()
    ticket = s.begin_hint()
    s.submit_answer("2")
    s.next_question()
    assert not s.complete_hint(ticket, "late")
    assert s.last_hint_text is None


def test_hint_from_before_reset_is_discarded_by_new_session():
    s = started_session()
    old_ticket = s.begin_hint()
    s.reset()

    s.select_category("Geometry")
    gen = s.select_difficulty("Hard")
    assert s.apply_questions(gen, make_questions(5))
    new_ticket = s.begin_hint()
    assert new_ticket.question_index == old_ticket.question_index

    assert not s.complete_hint(old_ticket, "late")
    assert s.last_hint_text is None
    assert s.hint_pending

    assert s.complete_hint(new_ticket, "fresh")
    assert s.last_hint_text == "fresh"


# ----------------------------------------------------------------------
#  スコア保存・リセット
# ----------------------------------------------------------------------
def test_high_score_entry_only_when_finished_and_unsaved():
    s = started_session(n=1)
    assert s.high_score_entry(1000) is None
    s.submit_answer("2")
    s.next_question()
    entry = s.high_score_entry(1000)
    assert entry.score == 1
    assert entry.category == "Arithmetic"
    assert entry.difficulty == "Easy"
    s.mark_score_saved()
    assert s.high_score_entry(2000) is None


def test_reset_clears_everything_and_bumps_generation():
    s = started_session()
    gen = s.generation
    s.submit_answer("2")
    s.reset()
    assert s.generation == gen + 1
    assert s.state == "idle"
    assert s.score == 0
    assert s.questions == ()
    assert s.hint_budget == HINT_BUDGET
    assert not s.score_saved
