"""
mathion パッケージ
======================

このパッケージは、数学クイズアプリ MATHION の内部ロジックを提供する。

主な役割:
- 設定管理（config）
- データモデル（models）
- キー・バリュー保存領域（storage）
- ハイスコア表（high_scores）
- Gemini による問題・ヒント生成（provider）
- クイズ進行の状態機械（session）
- 非同期呼び出しのまとめ役（controller）

app.py と ui.py が Streamlit の描画を担当し、内部ロジックはすべて本パッケージから呼ぶ。
ui は Streamlit を読み込むため、ここでは再エクスポートしない。
"""

from .config import AppConfig, setup_logging
from .controller import QuizController
from .high_scores import HighScoreStore, StorageReadFailure, StorageWriteFailure
from .models import (
    CATEGORIES,
    DIFFICULTIES,
    HINT_BUDGET,
    MAX_HIGH_SCORES,
    QUIZ_LENGTH,
    Feedback,
    HighScoreEntry,
    Question,
)
from .provider import (
    GeminiQuestionProvider,
    GenerationFailure,
    HintFailure,
    QuestionProvider,
)
from .session import QuizSession, check_answer
from .storage import JsonFileStorage, MemoryStorage

__all__ = [
    "AppConfig",
    "setup_logging",
    "QuizController",
    "HighScoreStore",
    "StorageReadFailure",
    "StorageWriteFailure",
    "CATEGORIES",
    "DIFFICULTIES",
    "HINT_BUDGET",
    "MAX_HIGH_SCORES",
    "QUIZ_LENGTH",
    "Feedback",
    "HighScoreEntry",
    "Question",
    "GeminiQuestionProvider",
    "GenerationFailure",
    "HintFailure",
    "QuestionProvider",
    "QuizSession",
    "check_answer",
    "JsonFileStorage",
    "MemoryStorage",
]
