"""
models.py
======================

クイズアプリ全体で共有するデータモデル。

- Question: AI が生成した 1 問（問題文と解答）
- HighScoreEntry: ハイスコア表の 1 行
- Feedback: 解答直後に表示する正誤メッセージ
- Category / Difficulty / QuizState: 取りうる値を Literal で固定

JSON 上のキー名はブラウザ版と同じものを使う:

    Question:       {"question": "...", "answer": "..."}
    HighScoreEntry: {"score": 3, "category": "Algebra",
                     "difficulty": "Easy", "date": 1700000000000}
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Literal, Tuple

# ----------------------------------------------------------------------
#  固定値
# ----------------------------------------------------------------------
QUIZ_LENGTH = 5
HINT_BUDGET = 3
MAX_HIGH_SCORES = 10

Category = Literal["Arithmetic", "Geometry", "Algebra", "Mixed"]
Difficulty = Literal["Easy", "Medium", "Hard"]
QuizState = Literal["idle", "loading", "active", "feedback", "finished"]

CATEGORIES: Tuple[str, ...] = ("Arithmetic", "Geometry", "Algebra", "Mixed")
DIFFICULTIES: Tuple[str, ...] = ("Easy", "Medium", "Hard")


def validate_category(value: Any) -> Category:
    if value not in CATEGORIES:
        raise ValueError(f"unknown category: {value!r}")
    return value


def validate_difficulty(value: Any) -> Difficulty:
    if value not in DIFFICULTIES:
        raise ValueError(f"unknown difficulty: {value!r}")
    return value


# ----------------------------------------------------------------------
#  Question
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Question:
    """AI が生成した 1 問。ロード後は変更しない。"""

    text: str
    answer: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        """
        {"question": str, "answer": str | number} から生成する。

        answer は数値で返ってくることがあるので文字列に揃える。
        形式が合わない場合は ValueError。
        """
        if not isinstance(data, dict):
            raise ValueError("question item must be an object")

        text = data.get("question")
        answer = data.get("answer")

        if not isinstance(text, str) or not text.strip():
            raise ValueError("question item has no 'question' text")
        if isinstance(answer, bool) or not isinstance(answer, (str, int, float)):
            raise ValueError("question item has no usable 'answer'")

        return cls(text=text.strip(), answer=str(answer))

    def to_dict(self) -> Dict[str, str]:
        return {"question": self.text, "answer": self.answer}


# ----------------------------------------------------------------------
#  HighScoreEntry
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class HighScoreEntry:
    """
    ハイスコア 1 件。

    timestamp はエポックミリ秒（JSON 上のキーは "date"）。
    """

    score: int
    category: Category
    difficulty: Difficulty
    timestamp: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HighScoreEntry":
        if not isinstance(data, dict):
            raise ValueError("high score entry must be an object")

        score = data.get("score")
        date = data.get("date")
        if isinstance(score, bool) or not isinstance(score, int):
            raise ValueError("high score entry has no integer 'score'")
        if isinstance(date, bool) or not isinstance(date, (int, float)):
            raise ValueError("high score entry has no numeric 'date'")
        if isinstance(date, float) and not math.isfinite(date):
            raise ValueError("high score entry has a non-finite 'date'")

        return cls(
            score=score,
            category=validate_category(data.get("category")),
            difficulty=validate_difficulty(data.get("difficulty")),
            timestamp=int(date),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "category": self.category,
            "difficulty": self.difficulty,
            "date": self.timestamp,
        }


@dataclass(frozen=True)
class Feedback:
    correct: bool
    message: str
