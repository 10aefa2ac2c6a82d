"""
app.py
======================

数学クイズアプリ MATHION（Streamlit）エントリーポイント。

特徴:
- カテゴリ（4 種）と難易度（3 種）を選ぶと Gemini が 5 問を生成
- 1 問ずつ解答し、その場で正誤を表示
- 1 回のクイズで 3 回までヒントを使える（1 問につき 1 回）
- 上位 10 件のハイスコアをローカルに保存

前提:
- 環境変数 GEMINI_API_KEY（または .env）が設定されていること
- config.toml は任意（モデル名・タイムアウト・保存先・ログレベル）
"""

from __future__ import annotations

import asyncio

import streamlit as st

from mathion.config import AppConfig, setup_logging
from mathion.controller import QuizController
from mathion.high_scores import HighScoreStore
from mathion.models import QUIZ_LENGTH
from mathion.provider import GeminiQuestionProvider
from mathion.storage import JsonFileStorage
from mathion.ui import (
    inject_css,
    render_category_page,
    render_difficulty_page,
    render_quiz_page,
    render_results_page,
    render_theme_selector,
)


# ----------------------------------------------------------------------
#  設定 / コントローラーのセッション保持
# ----------------------------------------------------------------------
def get_app_config() -> AppConfig:
    """AppConfig をセッションに保持して返す。"""
    if "app_config" not in st.session_state:
        cfg = AppConfig.load()
        setup_logging(cfg)
        st.session_state["app_config"] = cfg
    return st.session_state["app_config"]  # type: ignore[return-value]


def run_async(coro):
    """
    セッション専用のイベントループで coroutine を実行する。
    gRPC の非同期チャネルはループに紐づくので、実行ごとに作り直さない。
    """
    loop = st.session_state.get("event_loop")
    if loop is None or loop.is_closed():
        loop = asyncio.new_event_loop()
        st.session_state["event_loop"] = loop
    return loop.run_until_complete(coro)


def get_controller(cfg: AppConfig) -> QuizController:
    """QuizController をセッションに保持して返す。ハイスコアはここで 1 回だけ読む。"""
    if "controller" not in st.session_state:
        provider = GeminiQuestionProvider(
            api_key=cfg.gemini_api_key,
            model_name=cfg.model_name,
        )
        store = HighScoreStore(JsonFileStorage(cfg.storage_path))
        st.session_state["controller"] = QuizController(
            provider,
            store,
            request_timeout=cfg.request_timeout,
        )
    return st.session_state["controller"]  # type: ignore[return-value]


# ----------------------------------------------------------------------
#  ページ: カテゴリ・難易度選択（idle）
# ----------------------------------------------------------------------
def render_idle(controller: QuizController, cfg: AppConfig) -> None:
    session = controller.session

    if session.category is None:
        if not cfg.has_api_key:
            st.warning("Please set GEMINI_API_KEY to use the application.")

        result = render_category_page(
            controller.high_scores,
            total=QUIZ_LENGTH,
            notice=session.error_notice,
            disabled=not cfg.has_api_key,
        )
        if result["clear_scores"]:
            controller.clear_scores()
            st.rerun()
        if result["category"] is not None:
            controller.select_category(result["category"])
            st.rerun()
        return

    result = render_difficulty_page(session.category)
    if result["back"]:
        controller.back_to_categories()
        st.rerun()
    if result["difficulty"] is not None:
        with st.spinner(f"Generating your {result['difficulty']} {session.category} quiz..."):
            run_async(controller.choose_difficulty(result["difficulty"]))
        st.rerun()


# ----------------------------------------------------------------------
#  ページ: 出題中（active / feedback）
# ----------------------------------------------------------------------
def render_playing(controller: QuizController) -> None:
    result = render_quiz_page(controller.session)

    if result["hint"]:
        with st.spinner("Getting hint..."):
            run_async(controller.request_hint())
        st.rerun()
    if result["answer"] is not None:
        controller.submit_answer(result["answer"])
        st.rerun()
    if result["next"]:
        controller.next_question()
        st.rerun()


# ----------------------------------------------------------------------
#  ページ: 結果（finished）
# ----------------------------------------------------------------------
def render_finished(controller: QuizController) -> None:
    result = render_results_page(controller.session)

    if result["save"]:
        controller.save_score()
        st.rerun()
    if result["play_again"]:
        controller.play_again()
        st.rerun()


# ----------------------------------------------------------------------
#  メイン
# ----------------------------------------------------------------------
def main() -> None:
    st.set_page_config(
        page_title="MATHION",
        page_icon="🧮",
        layout="centered",
    )

    cfg = get_app_config()
    controller = get_controller(cfg)

    inject_css()
    with st.sidebar:
        render_theme_selector()
        if controller.session.state in ("active", "feedback"):
            if st.button("Start Over", key="mq_start_over"):
                controller.play_again()
                st.rerun()

    state = controller.session.state
    if state in ("active", "feedback"):
        render_playing(controller)
    elif state == "finished":
        render_finished(controller)
    elif state == "loading":
        # 通常は難易度選択と同じ実行内で完了する。途中で再実行された場合はやり直し
        st.info("The previous quiz request was interrupted.")
        if st.button("Back to Categories"):
            controller.play_again()
            st.rerun()
    else:
        render_idle(controller, cfg)


if __name__ == "__main__":
    main()
