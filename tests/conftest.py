import asyncio
from typing import List, Optional

import pytest

from mathion.high_scores import HighScoreStore
from mathion.models import Question
from mathion.provider import GenerationFailure, HintFailure
from mathion.storage import MemoryStorage


def make_questions(n: int = 5) -> List[Question]:
    return [Question(text=f"What is {i} + {i}?", answer=str(i * 2)) for i in range(1, n + 1)]


class FakeProvider:
    """ネットワークを使わない QuestionProvider。"""

    def __init__(
        self,
        questions: Optional[List[Question]] = None,
        hint: str = "Try adding the numbers.",
        fail_questions: bool = False,
        fail_hint: bool = False,
        delay: float = 0.0,
    ):
        self.questions = make_questions() if questions is None else questions
        self.hint = hint
        self.fail_questions = fail_questions
        self.fail_hint = fail_hint
        self.delay = delay
        self.gate: Optional[asyncio.Event] = None
        self.question_calls = []
        self.hint_calls = []
        self.states_seen = []
        self.session = None

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)

    async def fetch_questions(self, category, difficulty, count=5):
        self.question_calls.append((category, difficulty, count))
        if self.session is not None:
            self.states_seen.append(self.session.state)
        await self._wait()
        if self.fail_questions:
            raise GenerationFailure("boom")
        return list(self.questions)

    async def fetch_hint(self, question):
        self.hint_calls.append(question)
        await self._wait()
        if self.fail_hint:
            raise HintFailure("boom")
        return self.hint


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return HighScoreStore(storage)


@pytest.fixture
def provider():
    return FakeProvider()
