"""
provider.py
======================

問題とヒントを生成する外部サービス（QuestionProvider）。

要件:
- fetch_questions(): カテゴリ・難易度を指定して QUIZ_LENGTH 問をまとめて生成
- fetch_hint(): 1 問に対して 1 文のヒントを生成（答えは含めない）
- 失敗は GenerationFailure / HintFailure として呼び出し側に伝える
- リトライはしない（1 リクエスト 1 回のみ）

Gemini への問い合わせは google-generativeai の非同期 API
(GenerativeModel.generate_content_async) を使う。
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Protocol, TypedDict

import google.generativeai as genai
from google.api_core.exceptions import GoogleAPIError, ResourceExhausted

from .models import QUIZ_LENGTH, Category, Difficulty, Question

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "gemini-2.5-flash"


class GenerationFailure(Exception):
    """問題セットを生成できなかった（通信エラー・空・形式不正）。"""


class HintFailure(Exception):
    """ヒントを生成できなかった。"""


class QuestionProvider(Protocol):
    async def fetch_questions(
        self,
        category: Category,
        difficulty: Difficulty,
        count: int = QUIZ_LENGTH,
    ) -> List[Question]: ...

    async def fetch_hint(self, question: Question) -> str: ...


# ----------------------------------------------------------------------
#  レスポンススキーマ（JSON モード用）
# ----------------------------------------------------------------------
class QuizItem(TypedDict):
    question: str
    answer: str


class QuizBatch(TypedDict):
    questions: List[QuizItem]


# ----------------------------------------------------------------------
#  プロンプト
# ----------------------------------------------------------------------
def build_questions_prompt(
    category: Category,
    difficulty: Difficulty,
    count: int = QUIZ_LENGTH,
) -> str:
    return (
        f"Generate {count} math quiz questions for a middle school student "
        f"on the topic of {category} with a difficulty of {difficulty}.\n"
        "For each question, provide a clear question and a concise, "
        "numerical or single-word answer.\n"
    )


def build_hint_prompt(question: Question) -> str:
    return (
        "Provide a simple, one-sentence hint for the following math problem. "
        f'Do not give the answer. Problem: "{question.text}"'
    )


# ----------------------------------------------------------------------
#  レスポンス解析
# ----------------------------------------------------------------------
def parse_question_batch(text: str) -> List[Question]:
    """
    {"questions": [{"question": ..., "answer": ...}, ...]} を Question のリストにする。

    - JSON として読めない / questions が無い・空 → GenerationFailure
    - 要素が 1 つでも形式不正 → GenerationFailure
    - 要求数より少なくても 1 問以上あればそのまま受け入れる
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise GenerationFailure("response is not valid JSON") from e

    items = data.get("questions") if isinstance(data, dict) else None
    if not isinstance(items, list) or not items:
        raise GenerationFailure("response has no questions")

    try:
        return [Question.from_dict(item) for item in items]
    except ValueError as e:
        raise GenerationFailure(f"malformed question in response: {e}") from e


# ----------------------------------------------------------------------
#  Gemini 実装
# ----------------------------------------------------------------------
class GeminiQuestionProvider:
    """
    Google Gemini を使う QuestionProvider。

    model を渡した場合はそれを使う（テスト用）。
    渡さない場合は api_key で genai を設定し、model_name のモデルを生成する。
    """

    def __init__(
        self,
        api_key: str = "",
        model_name: str = DEFAULT_MODEL_NAME,
        model: Optional[Any] = None,
    ):
        self.model_name = model_name
        if model is None:
            if api_key:
                genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name)
        self._model = model

    async def fetch_questions(
        self,
        category: Category,
        difficulty: Difficulty,
        count: int = QUIZ_LENGTH,
    ) -> List[Question]:
        prompt = build_questions_prompt(category, difficulty, count)
        config = genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=QuizBatch,
        )

        try:
            response = await self._model.generate_content_async(
                prompt,
                generation_config=config,
            )
            text = response.text
        except ResourceExhausted as e:
            # クォータ上限（429）
            logger.warning("Gemini quota exhausted while generating questions: %s", e)
            raise GenerationFailure("quota exhausted") from e
        except GoogleAPIError as e:
            logger.error("Gemini API error while generating questions: %s", e)
            raise GenerationFailure(str(e)) from e
        except ValueError as e:
            # response.text はブロックされた応答などで ValueError を投げる
            raise GenerationFailure(f"empty response: {e}") from e
        except Exception as e:
            # その他エラー（通信断など）
            logger.error("Error generating questions: %s", e)
            raise GenerationFailure(str(e)) from e

        questions = parse_question_batch(text)
        if len(questions) != count:
            logger.info(
                "Requested %d questions but received %d", count, len(questions)
            )
        return questions

    async def fetch_hint(self, question: Question) -> str:
        try:
            response = await self._model.generate_content_async(
                build_hint_prompt(question)
            )
            text = response.text
        except ResourceExhausted as e:
            logger.warning("Gemini quota exhausted while generating hint: %s", e)
            raise HintFailure("quota exhausted") from e
        except Exception as e:
            logger.error("Error getting hint: %s", e)
            raise HintFailure(str(e)) from e

        hint = (text or "").strip()
        if not hint:
            raise HintFailure("empty hint")
        return hint
