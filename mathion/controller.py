"""
controller.py
======================

画面からの操作を QuizSession に流し込み、
必要なタイミングで QuestionProvider / HighScoreStore を呼び出す。

- 問題取得・ヒント取得は async で 1 回だけ問い合わせる（リトライなし）
- 問い合わせ中にリセットされた場合、戻ってきた結果は
  generation が一致しないので QuizSession 側で捨てられる
- request_timeout を指定した場合は asyncio.wait_for で打ち切り、失敗として扱う
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional

from .high_scores import HighScoreStore
from .models import QUIZ_LENGTH, HighScoreEntry
from .provider import GenerationFailure, HintFailure, QuestionProvider
from .session import QuizSession

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class QuizController:
    """
    QuizSession 1 つを専有して操作するコントローラー。

    ハイスコア表は生成時に一度だけ読み込み、以後はメモリ上の表を正とする。
    """

    def __init__(
        self,
        provider: QuestionProvider,
        store: HighScoreStore,
        session: Optional[QuizSession] = None,
        request_timeout: Optional[float] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.provider = provider
        self.store = store
        self.session = session or QuizSession()
        self.request_timeout = request_timeout
        self.clock = clock
        self._high_scores: List[HighScoreEntry] = store.load()

    @property
    def high_scores(self) -> List[HighScoreEntry]:
        return list(self._high_scores)

    async def _bounded(self, coro):
        if self.request_timeout is None:
            return await coro
        return await asyncio.wait_for(coro, timeout=self.request_timeout)

    # ------------------------------------------------------------------
    # カテゴリ・難易度
    # ------------------------------------------------------------------
    def select_category(self, category: str) -> bool:
        return self.session.select_category(category)

    def back_to_categories(self) -> bool:
        return self.session.back_to_categories()

    async def choose_difficulty(self, difficulty: str) -> bool:
        """
        難易度を確定し、問題セットを取得する。

        active に入れたら True。失敗・破棄の場合は False
        （失敗時は session.error_notice にメッセージが入る）。
        """
        session = self.session
        generation = session.select_difficulty(difficulty)
        if generation is None:
            return False

        category = session.category
        logger.info("Generating %s %s quiz", session.difficulty, category)

        try:
            questions = await self._bounded(
                self.provider.fetch_questions(category, session.difficulty, QUIZ_LENGTH)
            )
        except GenerationFailure as e:
            logger.error("Error generating questions: %s", e)
            session.fail_generation(generation)
            return False
        except asyncio.TimeoutError:
            logger.error("Timed out generating questions after %ss", self.request_timeout)
            session.fail_generation(generation)
            return False

        applied = session.apply_questions(generation, questions)
        if applied:
            logger.info("Quiz started: %s", session.summary())
        return applied

    # ------------------------------------------------------------------
    # 解答・進行
    # ------------------------------------------------------------------
    def set_user_answer(self, text: str) -> None:
        self.session.set_user_answer(text)

    def submit_answer(self, answer: Optional[str] = None) -> Optional[bool]:
        return self.session.submit_answer(answer)

    def next_question(self) -> bool:
        moved = self.session.next_question()
        if moved and self.session.state == "finished":
            logger.info("Quiz finished: %s", self.session.summary())
        return moved

    # ------------------------------------------------------------------
    # ヒント
    # ------------------------------------------------------------------
    async def request_hint(self) -> Optional[str]:
        """
        ヒントを取得して表示用テキストを返す。

        要求できない状態（残り 0・この問題で使用済み）なら None。
        取得に失敗しても 1 枚消費し、お詫びの文言が入る。
        """
        ticket = self.session.begin_hint()
        if ticket is None:
            return None

        try:
            text = await self._bounded(self.provider.fetch_hint(ticket.question))
        except HintFailure as e:
            logger.error("Error getting hint: %s", e)
            applied = self.session.fail_hint(ticket)
        except asyncio.TimeoutError:
            logger.error("Timed out getting hint after %ss", self.request_timeout)
            applied = self.session.fail_hint(ticket)
        else:
            applied = self.session.complete_hint(ticket, text)

        return self.session.last_hint_text if applied else None

    # ------------------------------------------------------------------
    # ハイスコア
    # ------------------------------------------------------------------
    def save_score(self) -> bool:
        """完了したセッションのスコアを 1 回だけ保存する。"""
        entry = self.session.high_score_entry(self.clock())
        if entry is None:
            return False
        self._high_scores = self.store.save(entry, self._high_scores)
        self.session.mark_score_saved()
        logger.info(
            "Saved score %d/%d (%s, %s)",
            entry.score,
            self.session.total_questions,
            entry.category,
            entry.difficulty,
        )
        return True

    def clear_scores(self) -> None:
        self._high_scores = self.store.clear()
        logger.info("Cleared high scores")

    # ------------------------------------------------------------------
    # リセット
    # ------------------------------------------------------------------
    def play_again(self) -> None:
        self.session.reset()
