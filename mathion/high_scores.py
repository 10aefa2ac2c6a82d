"""
high_scores.py
======================

ローカルのハイスコア表を管理するモジュール。

不変条件:
- 件数は MAX_HIGH_SCORES (10) 以下
- score の降順、同点なら timestamp の降順（新しいものが上）

読み書きの失敗はユーザーに見せない:
- 読み込み失敗 → 空の表として扱う
- 書き込み失敗 → ログだけ残して捨てる（画面側はメモリ上の表で更新済み）
"""

from __future__ import annotations

import json
import logging
from typing import Iterable, List

from .models import MAX_HIGH_SCORES, HighScoreEntry
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "mathQuizHighScores"


class StorageReadFailure(Exception):
    """保存済みハイスコアを読めなかった（存在しない場合は含まない）。"""


class StorageWriteFailure(Exception):
    """ハイスコアを書き込めなかった。"""


def sort_high_scores(entries: Iterable[HighScoreEntry]) -> List[HighScoreEntry]:
    """並べ替えて上位 MAX_HIGH_SCORES 件に切り詰める。"""
    ordered = sorted(
        entries,
        key=lambda e: (e.score, e.timestamp),
        reverse=True,
    )
    return ordered[:MAX_HIGH_SCORES]


class HighScoreStore:
    """
    KeyValueStorage の 1 キーにハイスコア表を JSON 配列として保存する。

    主な機能:
    - load(): 読み込み（失敗時は空）
    - save(): 追加 → 並べ替え → 10 件に切り詰め → 保存
    - clear(): 保存キーを削除
    """

    def __init__(self, storage: KeyValueStorage, key: str = STORAGE_KEY):
        self.storage = storage
        self.key = key

    # ------------------------------------------------------------------
    # 公開 API
    # ------------------------------------------------------------------
    def load(self) -> List[HighScoreEntry]:
        try:
            return sort_high_scores(self._read())
        except StorageReadFailure as e:
            logger.warning("Failed to load high scores, starting empty: %s", e)
            return []

    def save(
        self,
        entry: HighScoreEntry,
        current: Iterable[HighScoreEntry],
    ) -> List[HighScoreEntry]:
        table = sort_high_scores([*current, entry])
        self._persist(table)
        return table

    def clear(self) -> List[HighScoreEntry]:
        """保存済みの表をキーごと消す。"""
        try:
            self.storage.remove_item(self.key)
        except (OSError, ValueError) as e:
            logger.error("Failed to clear high scores: %s", e)
        return []

    # ------------------------------------------------------------------
    # 内部処理
    # ------------------------------------------------------------------
    def _read(self) -> List[HighScoreEntry]:
        try:
            blob = self.storage.get_item(self.key)
        except (OSError, ValueError) as e:
            raise StorageReadFailure(str(e)) from e

        if blob is None:
            return []

        try:
            raw = json.loads(blob)
        except ValueError as e:
            raise StorageReadFailure(f"invalid JSON under {self.key!r}") from e

        if not isinstance(raw, list):
            raise StorageReadFailure(f"{self.key!r} does not hold a JSON array")

        try:
            return [HighScoreEntry.from_dict(item) for item in raw]
        except (ValueError, OverflowError) as e:
            raise StorageReadFailure(str(e)) from e

    def _persist(self, table: List[HighScoreEntry]) -> None:
        try:
            self._write(table)
        except StorageWriteFailure as e:
            logger.error("Failed to save high scores: %s", e)

    def _write(self, table: List[HighScoreEntry]) -> None:
        blob = json.dumps([e.to_dict() for e in table], ensure_ascii=False)
        try:
            self.storage.set_item(self.key, blob)
        except (OSError, ValueError) as e:
            raise StorageWriteFailure(str(e)) from e
