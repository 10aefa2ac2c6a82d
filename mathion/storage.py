"""
storage.py
======================

ブラウザの localStorage に相当する、名前付きの小さなキー・バリュー領域。

値は常に文字列（JSON エンコード済みの blob）として扱い、
中身の解釈は呼び出し側（HighScoreStore）に任せる。

ファイル形式 (data/storage.json):

{
  "mathQuizHighScores": "[{\\"score\\": 5, ...}]"
}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Protocol, Union


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


# ----------------------------------------------------------------------
#  JSON ファイル版
# ----------------------------------------------------------------------
class JsonFileStorage:
    """
    1 つの JSON ファイルを丸ごと読み書きするストレージ。

    読み込み時の JSON 破損・I/O エラーは例外のまま呼び出し側へ伝える。
    （握りつぶすかどうかは HighScoreStore が決める）
    """

    def __init__(self, path: Union[str, Path] = "data/storage.json"):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} is not a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # 書きかけのファイルを残さないよう一時ファイル経由で置き換える
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except ValueError:
            # 壊れたファイルは上書きして作り直す
            data = {}
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


# ----------------------------------------------------------------------
#  メモリ版（テスト・一時利用）
# ----------------------------------------------------------------------
class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)
