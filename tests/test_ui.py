from mathion.models import Feedback, HighScoreEntry
from mathion.ui import (
    THEMES,
    _generate_css,
    feedback_html,
    high_scores_dataframe,
    hint_html,
    question_card_html,
)


def test_high_scores_dataframe_rows():
    entries = [
        HighScoreEntry(score=5, category="Algebra", difficulty="Hard", timestamp=0),
        HighScoreEntry(score=3, category="Mixed", difficulty="Easy", timestamp=86_400_000),
    ]
    df = high_scores_dataframe(entries, total=5)
    assert list(df.columns) == ["Rank", "Quiz", "Score", "Date"]
    assert df["Rank"].tolist() == [1, 2]
    assert df["Quiz"].tolist() == ["Algebra (Hard)", "Mixed (Easy)"]
    assert df["Score"].tolist() == ["5/5", "3/5"]
    assert df["Date"].tolist() == ["1970-01-01 00:00", "1970-01-02 00:00"]


def test_high_scores_dataframe_empty():
    df = high_scores_dataframe([], total=5)
    assert df.empty
    assert list(df.columns) == ["Rank", "Quiz", "Score", "Date"]


def test_css_uses_theme_colours():
    css = _generate_css(THEMES["dark"])
    assert THEMES["dark"]["correct"] in css
    assert ".mq-question-card" in css


def test_question_card_escapes_model_text():
    markup = question_card_html("If x<y and y>3, is x<3? <script>")
    assert "x&lt;y and y&gt;3" in markup
    assert "<script>" not in markup
    assert markup.startswith("<div class='mq-question-card'>")


def test_hint_and_feedback_escape_model_text():
    assert "a &amp; b &lt; c" in hint_html("a & b < c")
    markup = feedback_html(Feedback(correct=False, message="Incorrect. The answer was x<2"))
    assert "mq-incorrect" in markup
    assert "x&lt;2" in markup
