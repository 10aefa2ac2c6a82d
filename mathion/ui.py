"""
ui.py
======================

Streamlit ベースの UI コンポーネントをまとめたモジュール。

責務:
- テーマと CSS
- 各画面の描画（カテゴリ選択 / 難易度選択 / 生成中 / 出題 / 結果）
- ハイスコア表の表示（pandas DataFrame）

ここでは「見た目」と「ユーザー操作の入力」だけを扱い、
状態遷移は controller.py / session.py 側に任せる。

各 render_* 関数は「何が押されたか」を dict で返す。
"""

from __future__ import annotations

import html
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from .models import CATEGORIES, DIFFICULTIES, Feedback, HighScoreEntry
from .session import QuizSession

APP_TITLE = "MATHION"

# ----------------------------------------------------------------------
#  テーマ定義
# ----------------------------------------------------------------------


THEMES: Dict[str, Dict[str, str]] = {
    "light": {
        "bg": "#ffffff",
        "text": "#1c1c1e",
        "surface": "#f2f2f7",
        "border": "#d1d1d6",
        "primary": "#5e5ce6",
        "correct": "#34c759",
        "incorrect": "#ff3b30",
        "hint": "#ff9f0a",
    },
    "dark": {
        "bg": "#000000",
        "text": "#f5f5f7",
        "surface": "#1c1c1e",
        "border": "#3a3a3c",
        "primary": "#7d7aff",
        "correct": "#30d158",
        "incorrect": "#ff453a",
        "hint": "#ffd60a",
    },
}


# ----------------------------------------------------------------------
#  CSS 生成
# ----------------------------------------------------------------------
def _generate_css(theme: Dict[str, str]) -> str:
    """テーマに応じたグローバル CSS を生成する。"""

    return f"""
    <style>
    .mq-score-header {{
        display: flex;
        justify-content: space-between;
        align-items: center;
        font-size: 0.9rem;
        margin-bottom: 0.5rem;
    }}

    .mq-stats {{
        display: flex;
        gap: 0.75rem;
    }}

    .mq-question-card {{
        background: {theme['surface']};
        color: {theme['text']};
        padding: 1.25rem;
        border-radius: 12px;
        border: 1px solid {theme['border']};
        font-size: 1.2rem;
        line-height: 1.6;
        margin-bottom: 0.75rem;
    }}

    .mq-hint {{
        border-left: 4px solid {theme['hint']};
        padding: 0.5rem 0.75rem;
        margin-bottom: 0.75rem;
        font-size: 0.95rem;
    }}

    .mq-feedback {{
        padding: 0.75rem;
        border-radius: 10px;
        font-weight: 600;
        margin-bottom: 0.75rem;
    }}

    .mq-correct {{
        background: {theme['correct']}22;
        border: 1px solid {theme['correct']};
    }}

    .mq-incorrect {{
        background: {theme['incorrect']}22;
        border: 1px solid {theme['incorrect']};
    }}

    .mq-final-score {{
        font-size: 2rem;
        font-weight: 700;
        color: {theme['primary']};
        text-align: center;
    }}
    </style>
    """


# ----------------------------------------------------------------------
#  テーマ関連
# ----------------------------------------------------------------------
def _ensure_theme() -> str:
    """セッションに theme キーを用意し、現在のテーマキーを返す。"""
    theme_key = st.session_state.get("theme", "light")
    if theme_key not in THEMES:
        theme_key = "light"
    st.session_state["theme"] = theme_key
    return theme_key


def inject_css() -> None:
    st.markdown(_generate_css(THEMES[_ensure_theme()]), unsafe_allow_html=True)


def render_theme_selector() -> str:
    options = list(THEMES.keys())
    current = _ensure_theme()
    selected = st.radio(
        "Theme",
        options,
        index=options.index(current),
        horizontal=True,
        label_visibility="collapsed",
        format_func=lambda k: k.capitalize(),
    )
    st.session_state["theme"] = selected
    return selected


# ----------------------------------------------------------------------
#  ハイスコア表
# ----------------------------------------------------------------------
def high_scores_dataframe(entries: List[HighScoreEntry], total: int) -> pd.DataFrame:
    """表示用のハイスコア表。順位は 1 始まり。"""
    rows = [
        {
            "Rank": rank,
            "Quiz": f"{e.category} ({e.difficulty})",
            "Score": f"{e.score}/{total}",
            "Date": pd.to_datetime(e.timestamp, unit="ms", utc=True).strftime("%Y-%m-%d %H:%M"),
        }
        for rank, e in enumerate(entries, start=1)
    ]
    return pd.DataFrame(rows, columns=["Rank", "Quiz", "Score", "Date"])


# ----------------------------------------------------------------------
#  画面: カテゴリ選択
# ----------------------------------------------------------------------
def render_category_page(
    high_scores: List[HighScoreEntry],
    *,
    total: int,
    notice: Optional[str] = None,
    disabled: bool = False,
) -> Dict[str, Any]:
    """
    戻り値:
        {
          "category": Optional[str],   # 押されたカテゴリ
          "clear_scores": bool,
        }
    """
    category: Optional[str] = None
    clear_scores = False

    st.title(APP_TITLE)

    if notice:
        st.error(notice)

    if high_scores:
        st.subheader("High Scores")
        st.dataframe(
            high_scores_dataframe(high_scores, total),
            hide_index=True,
            use_container_width=True,
        )
        if st.button("Clear Scores", key="mq_clear_scores"):
            clear_scores = True

    st.subheader("Choose a category to start!")
    cols = st.columns(2)
    for idx, name in enumerate(CATEGORIES):
        with cols[idx % 2]:
            if st.button(name, key=f"mq_cat_{name}", use_container_width=True, disabled=disabled):
                category = name

    return {"category": category, "clear_scores": clear_scores}


# ----------------------------------------------------------------------
#  画面: 難易度選択
# ----------------------------------------------------------------------
def render_difficulty_page(category: str) -> Dict[str, Any]:
    difficulty: Optional[str] = None
    back = False

    st.title(category)
    st.subheader("Select a difficulty level")

    cols = st.columns(len(DIFFICULTIES))
    for col, name in zip(cols, DIFFICULTIES):
        with col:
            if st.button(name, key=f"mq_diff_{name}", use_container_width=True):
                difficulty = name

    if st.button("Back to Categories", key="mq_back"):
        back = True

    return {"difficulty": difficulty, "back": back}


# ----------------------------------------------------------------------
#  AI 生成テキストの HTML 化
# ----------------------------------------------------------------------
# 問題文・ヒント・解答は "x<y" のような不等号を含むので必ずエスケープする
def question_card_html(text: str) -> str:
    return f"<div class='mq-question-card'>{html.escape(text)}</div>"


def hint_html(text: str) -> str:
    return f"<div class='mq-hint' role='status'>{html.escape(text)}</div>"


def feedback_html(feedback: Feedback) -> str:
    css = "mq-correct" if feedback.correct else "mq-incorrect"
    return (
        f"<div class='mq-feedback {css}' role='alert'>"
        f"{html.escape(feedback.message)}</div>"
    )


# ----------------------------------------------------------------------
#  画面: 出題中 / 正誤表示
# ----------------------------------------------------------------------
def render_quiz_page(session: QuizSession) -> Dict[str, Any]:
    """
    active / feedback の両方をこの関数で描画する。

    戻り値:
        {
          "answer": Optional[str],  # Submit された解答（active のみ）
          "hint": bool,             # Get Hint が押された
          "next": bool,             # Next Question / Finish Quiz が押された
        }
    """
    answer: Optional[str] = None
    hint = False
    clicked_next = False

    q = session.current_question
    if q is None:
        st.error("No question is loaded.")
        return {"answer": None, "hint": False, "next": False}

    # ヘッダー
    st.markdown(
        "<div class='mq-score-header'>"
        f"<span>{session.category} ({session.difficulty}) · "
        f"Question {session.current_index + 1} of {session.total_questions}</span>"
        "<span class='mq-stats'>"
        f"<span aria-label='{session.hint_budget} hints remaining'>💡 {session.hint_budget}</span>"
        f"<span>Score: {session.score} / {session.total_questions}</span>"
        "</span></div>",
        unsafe_allow_html=True,
    )

    st.markdown(question_card_html(q.text), unsafe_allow_html=True)

    if session.last_hint_text:
        st.markdown(hint_html(session.last_hint_text), unsafe_allow_html=True)

    if session.state == "active":
        # 問題ごとに key を変えて入力欄を空に戻す
        form_key = f"mq_answer_{session.generation}_{session.current_index}"
        with st.form(form_key, clear_on_submit=False):
            text = st.text_input(
                "Your answer",
                value=session.user_answer,
                placeholder="Type your answer here",
            )
            submitted = st.form_submit_button("Submit")
        if submitted:
            answer = text

        if st.button(
            "Get Hint",
            key=f"mq_hint_{session.generation}_{session.current_index}",
            disabled=not session.can_request_hint,
        ):
            hint = True

    elif session.state == "feedback" and session.feedback is not None:
        st.markdown(feedback_html(session.feedback), unsafe_allow_html=True)
        label = "Finish Quiz" if session.is_last_question else "Next Question"
        if st.button(label, key=f"mq_next_{session.generation}_{session.current_index}"):
            clicked_next = True

    return {"answer": answer, "hint": hint, "next": clicked_next}


# ----------------------------------------------------------------------
#  画面: 結果
# ----------------------------------------------------------------------
def render_results_page(session: QuizSession) -> Dict[str, Any]:
    save = False
    play_again = False

    st.header("Quiz Complete!")
    st.write("Your final score is")
    st.markdown(
        f"<div class='mq-final-score'>{session.score} out of {session.total_questions}</div>",
        unsafe_allow_html=True,
    )

    col_save, col_again = st.columns(2)
    with col_save:
        label = "Score Saved!" if session.score_saved else "Save Score"
        if st.button(label, key="mq_save", disabled=session.score_saved, use_container_width=True):
            save = True
    with col_again:
        if st.button("Play Again", key="mq_again", use_container_width=True):
            play_again = True

    return {"save": save, "play_again": play_again}
