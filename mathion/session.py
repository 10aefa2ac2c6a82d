"""
session.py
======================

1 回分のクイズ進行を表す状態機械 (QuizSession)。

状態遷移:

    idle ──(カテゴリ選択)──> idle ──(難易度選択)──> loading
    loading ──(問題取得成功)──> active
    loading ──(失敗 / 0 問)──> idle（カテゴリ・難易度もクリア）
    active ──(解答送信)──> feedback
    feedback ──(次へ)──> active / finished
    finished ──(もう一度)──> idle
    どの状態からでも reset() で idle に戻る

ここには I/O は一切無い。非同期の問い合わせは controller.py 側が行い、
結果を apply_questions() / complete_hint() などで戻す。
戻すときは generation（reset のたびに増えるカウンタ）を照合し、
古いセッション宛ての結果は捨てる。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .models import (
    HINT_BUDGET,
    Category,
    Difficulty,
    Feedback,
    HighScoreEntry,
    Question,
    QuizState,
    validate_category,
    validate_difficulty,
)

logger = logging.getLogger(__name__)

GENERATION_ERROR_NOTICE = "Sorry, there was an error generating the quiz. Please try again."
HINT_FAILURE_TEXT = "Sorry, couldn't get a hint right now."


def check_answer(user_answer: str, correct_answer: str) -> bool:
    """
    前後の空白を除き、大文字小文字を無視して完全一致を判定する。

    数値としての解釈はしない（"4" と "4.0" は別物）。
    """
    return user_answer.strip().casefold() == str(correct_answer).strip().casefold()


@dataclass(frozen=True)
class HintTicket:
    """発行済みヒント要求。結果を戻すときの照合に使う。"""

    generation: int
    question_index: int
    question: Question


class QuizSession:
    """
    クイズ 1 回分の状態を保持するクラス。

    不正な状態での操作（無効なボタン押下に相当）は何もせず
    False / None を返す。
    """

    def __init__(self) -> None:
        self.generation = 0
        self._clear()

    # ------------------------------------------------------------------
    # 初期化
    # ------------------------------------------------------------------
    def _clear(self) -> None:
        self.state: QuizState = "idle"
        self.category: Optional[Category] = None
        self.difficulty: Optional[Difficulty] = None
        self.questions: Tuple[Question, ...] = ()
        self.current_index = 0
        self.user_answer = ""
        self.score = 0
        self.hint_budget = HINT_BUDGET
        self.hint_used_for_current_question = False
        self.hint_pending = False
        self.last_hint_text: Optional[str] = None
        self.feedback: Optional[Feedback] = None
        self.score_saved = False
        self.error_notice: Optional[str] = None

    def reset(self) -> None:
        """すべてのセッション項目をクリアして idle に戻る。"""
        self.generation += 1
        self._clear()

    # ------------------------------------------------------------------
    # 参照用
    # ------------------------------------------------------------------
    @property
    def current_question(self) -> Optional[Question]:
        if self.state not in ("active", "feedback"):
            return None
        return self.questions[self.current_index]

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def is_last_question(self) -> bool:
        return self.current_index >= len(self.questions) - 1

    @property
    def can_request_hint(self) -> bool:
        return (
            self.state == "active"
            and self.hint_budget > 0
            and not self.hint_used_for_current_question
        )

    # ------------------------------------------------------------------
    # カテゴリ・難易度選択
    # ------------------------------------------------------------------
    def select_category(self, category: str) -> bool:
        category = validate_category(category)
        if self.state != "idle":
            return False
        self.category = category
        self.difficulty = None
        self.error_notice = None
        return True

    def back_to_categories(self) -> bool:
        if self.state != "idle":
            return False
        self.category = None
        self.difficulty = None
        return True

    def select_difficulty(self, difficulty: str) -> Optional[int]:
        """
        難易度を確定して loading に入る。

        戻り値は問題取得結果を戻すときに渡す generation。
        カテゴリ未選択など、開始できない場合は None。
        """
        difficulty = validate_difficulty(difficulty)
        if self.state != "idle" or self.category is None:
            return None
        self.difficulty = difficulty
        self.error_notice = None
        self.state = "loading"
        return self.generation

    # ------------------------------------------------------------------
    # 問題取得結果の反映
    # ------------------------------------------------------------------
    def _is_current_fetch(self, generation: int) -> bool:
        if generation != self.generation or self.state != "loading":
            logger.info(
                "Discarding stale question batch (generation %d, current %d)",
                generation,
                self.generation,
            )
            return False
        return True

    def apply_questions(self, generation: int, questions: Sequence[Question]) -> bool:
        """取得した問題で active に入る。0 問なら失敗扱い。"""
        if not self._is_current_fetch(generation):
            return False
        if not questions:
            self.fail_generation(generation)
            return False

        self.questions = tuple(questions)
        self.current_index = 0
        self.score = 0
        self.hint_budget = HINT_BUDGET
        self._clear_question_state()
        self.state = "active"
        return True

    def fail_generation(self, generation: int, notice: str = GENERATION_ERROR_NOTICE) -> bool:
        """取得失敗: 全体をリセットし、画面側に通知メッセージを残す。"""
        if not self._is_current_fetch(generation):
            return False
        self.reset()
        self.error_notice = notice
        return True

    # ------------------------------------------------------------------
    # 解答
    # ------------------------------------------------------------------
    def set_user_answer(self, text: str) -> None:
        if self.state == "active":
            self.user_answer = text

    def submit_answer(self, answer: Optional[str] = None) -> Optional[bool]:
        """
        解答を判定して feedback に進む。

        空（空白のみ）の解答は無視して None を返す。
        """
        if answer is not None:
            self.set_user_answer(answer)
        if self.state != "active" or not self.user_answer.strip():
            return None

        question = self.questions[self.current_index]
        correct = check_answer(self.user_answer, question.answer)
        if correct:
            self.score += 1
            self.feedback = Feedback(correct=True, message="Correct!")
        else:
            self.feedback = Feedback(
                correct=False,
                message=f"Incorrect! The answer is {question.answer}",
            )
        self.state = "feedback"
        return correct

    def next_question(self) -> bool:
        if self.state != "feedback":
            return False

        self._clear_question_state()
        if self.is_last_question:
            self.state = "finished"
        else:
            self.current_index += 1
            self.state = "active"
        return True

    def _clear_question_state(self) -> None:
        self.user_answer = ""
        self.feedback = None
        self.last_hint_text = None
        self.hint_used_for_current_question = False
        self.hint_pending = False

    # ------------------------------------------------------------------
    # ヒント
    # ------------------------------------------------------------------
    def begin_hint(self) -> Optional[HintTicket]:
        """
        ヒントを 1 枚消費して要求チケットを返す。

        この問題で使用済み、または残りが 0 なら None。
        消費と使用済みフラグは非同期要求の前にここで確定させる。
        """
        if not self.can_request_hint:
            return None

        self.hint_used_for_current_question = True
        self.hint_budget -= 1
        self.hint_pending = True
        return HintTicket(
            generation=self.generation,
            question_index=self.current_index,
            question=self.questions[self.current_index],
        )

    def complete_hint(self, ticket: HintTicket, text: str) -> bool:
        if (
            ticket.generation != self.generation
            or ticket.question_index != self.current_index
            or not self.hint_pending
        ):
            logger.info("Discarding stale hint for question %d", ticket.question_index + 1)
            return False
        self.last_hint_text = text
        self.hint_pending = False
        return True

    def fail_hint(self, ticket: HintTicket) -> bool:
        return self.complete_hint(ticket, HINT_FAILURE_TEXT)

    # ------------------------------------------------------------------
    # スコア保存
    # ------------------------------------------------------------------
    def high_score_entry(self, timestamp: int) -> Optional[HighScoreEntry]:
        """保存可能なら HighScoreEntry を作る。保存済み・未完了なら None。"""
        if (
            self.state != "finished"
            or self.score_saved
            or self.category is None
            or self.difficulty is None
        ):
            return None
        return HighScoreEntry(
            score=self.score,
            category=self.category,
            difficulty=self.difficulty,
            timestamp=timestamp,
        )

    def mark_score_saved(self) -> None:
        self.score_saved = True

    # ------------------------------------------------------------------
    # デバッグ・表示用
    # ------------------------------------------------------------------
    def summary(self) -> dict:
        return {
            "state": self.state,
            "category": self.category,
            "difficulty": self.difficulty,
            "question": self.current_index + 1 if self.questions else 0,
            "total_questions": self.total_questions,
            "score": self.score,
            "hint_budget": self.hint_budget,
            "generation": self.generation,
        }

