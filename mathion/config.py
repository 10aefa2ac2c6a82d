"""
config.py
=========

アプリ全体で利用する設定値を一元管理する。
Gemini API キー、モデル名、保存先パス、タイムアウト、ログ設定を
すべてこのクラスを通じて取得する。

優先順位:
    環境変数 > .env > config.toml > 既定値

config.toml の例:

    [gemini]
    model = "gemini-2.5-flash"
    request_timeout = 30

    [storage]
    path = "data/storage.json"

    [logging]
    level = "INFO"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import toml

from .provider import DEFAULT_MODEL_NAME

# ------------------------------------------------------------
# 基本パス定義
# ------------------------------------------------------------

ROOT_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = ROOT_DIR / "data"

API_KEY_ENV_NAMES = ("GEMINI_API_KEY", "API_KEY")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# ------------------------------------------------------------
# AppConfig
# ------------------------------------------------------------

@dataclass
class AppConfig:
    """
    アプリ設定クラス。

    - APIキーの読み取り
    - Gemini モデル名とリクエストのタイムアウト
    - ハイスコア保存先
    - ログレベル
    """

    # ---------- API ----------
    gemini_api_key: str = ""
    model_name: str = DEFAULT_MODEL_NAME
    # None のときはタイムアウトしない
    request_timeout: Optional[float] = None

    # ---------- ファイルパス ----------
    storage_path: Path = DATA_DIR / "storage.json"

    # ---------- ログ ----------
    log_level: str = "INFO"

    # ============================================================
    # 読み込み
    # ============================================================

    @classmethod
    def load(
        cls,
        path: Union[str, Path] = ROOT_DIR / "config.toml",
        env_path: Union[str, Path] = ROOT_DIR / ".env",
    ) -> "AppConfig":
        """
        config.toml と環境変数から設定を組み立てる。
        config.toml が無い・壊れている場合は既定値のまま。
        """
        cfg = cls()
        cfg.apply_toml(read_toml(Path(path)))
        cfg.gemini_api_key = load_api_key(Path(env_path))
        return cfg

    def apply_toml(self, data: Dict[str, Any]) -> None:
        gem_cfg = data.get("gemini")
        if isinstance(gem_cfg, dict):
            model = gem_cfg.get("model")
            if isinstance(model, str) and model:
                self.model_name = model
            timeout = gem_cfg.get("request_timeout")
            if isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
                self.request_timeout = float(timeout) if timeout > 0 else None

        storage_cfg = data.get("storage")
        if isinstance(storage_cfg, dict):
            p = storage_cfg.get("path")
            if isinstance(p, str) and p:
                sp = Path(p)
                self.storage_path = sp if sp.is_absolute() else ROOT_DIR / sp

        log_cfg = data.get("logging")
        if isinstance(log_cfg, dict):
            level = log_cfg.get("level")
            if isinstance(level, str) and level:
                self.log_level = level.upper()

    @property
    def has_api_key(self) -> bool:
        return bool(self.gemini_api_key)


# ============================================================
# 内部関数
# ============================================================

def read_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        return toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logging.getLogger(__name__).warning("Ignoring unreadable %s: %s", path, e)
        return {}


def load_api_key(env_path: Path) -> str:
    """
    環境変数 GEMINI_API_KEY（なければ API_KEY）を使う。
    ローカル開発などで .env を使いたい場合にも対応。
    """
    for name in API_KEY_ENV_NAMES:
        key = os.environ.get(name)
        if key:
            return key

    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            for name in API_KEY_ENV_NAMES:
                if line.startswith(f"{name}="):
                    return line.split("=", 1)[1].strip()

    return ""  # キーなし → クイズは開始できない


def setup_logging(config: AppConfig) -> None:
    """設定に従ってルートロガーを初期化する。"""
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
