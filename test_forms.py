"""
Tests for form specs, the quiz-file and Canvas builders, and the ledger.
"""

import csv
from datetime import datetime, timezone
from unittest.mock import MagicMock

import frontmatter
import pytest

from quizcart.canvas_client import CanvasCredentials, load_canvas_credentials
from quizcart.canvas_forms import CanvasFormBuilder, canvas_question_payload
from quizcart.config import Settings, load_settings
from quizcart.errors import ConfigurationError
from quizcart.forms import (
    FormChoice,
    WIDGET_BY_KIND,
    FormRecord,
    WidgetKind,
    build_form_item,
    build_form_spec,
    create_forms,
    widget_for,
)
from quizcart.html_text import html_to_markdown, html_to_plain_text
from quizcart.ledger import LEDGER_HEADERS, FormLedger
from quizcart.models import Choice, Question, QuestionKind, Quiz
from quizcart.quiz_files import QuizFileFormBuilder, render_quiz_text, sanitize_filename

ABC = (Choice("A", "3"), Choice("B", "4"), Choice("C", "5"))


def make_quiz(*questions, title="Week 1", identifier="res1", description=""):
    return Quiz(identifier=identifier, title=title, description=description, questions=tuple(questions))


# ============================================================================
# Widget mapping / specs
# ============================================================================

@pytest.mark.parametrize("kind,widget", [
    (QuestionKind.MULTIPLE_CHOICE, WidgetKind.SINGLE_SELECT),
    (QuestionKind.MULTIPLE_ANSWERS, WidgetKind.MULTI_SELECT),
    (QuestionKind.ESSAY, WidgetKind.LONG_TEXT),
    (QuestionKind.SHORT_ANSWER, WidgetKind.SHORT_TEXT),
    (QuestionKind.TRUE_FALSE, WidgetKind.SINGLE_SELECT),
    (QuestionKind.UNKNOWN, WidgetKind.LONG_TEXT),
])
def test_widget_for_every_kind(kind, widget):
    assert widget_for(kind) is widget


def test_widget_mapping_covers_every_kind():
    assert set(WIDGET_BY_KIND) == set(QuestionKind)


def test_single_select_marks_correct_choice():
    q = Question("q1", "multiple_choice_question", text="2 + 2?", choices=ABC, correct_answer="B")
    item = build_form_item(q, graded=True)

    assert item.widget is WidgetKind.SINGLE_SELECT
    assert item.title == "2 + 2?"
    assert item.choices == (FormChoice("3"), FormChoice("4", True), FormChoice("5"))
    assert item.points == 1


def test_multi_select_marks_every_correct_choice():
    q = Question("q1", "multiple_answers_question", choices=ABC, correct_answer=frozenset({"A", "C"}))
    item = build_form_item(q, graded=True)
    assert [c.correct for c in item.choices] == [True, False, True]


def test_single_select_with_several_correct_values_marks_nothing():
    q = Question("q1", "multiple_choice_question", choices=ABC, correct_answer=("A", "B"))
    item = build_form_item(q, graded=True)
    assert item.widget is WidgetKind.SINGLE_SELECT
    assert not any(c.correct for c in item.choices)


def test_unmatched_correct_id_marks_nothing():
    q = Question("q1", "multiple_choice_question", choices=ABC, correct_answer="Z")
    assert not any(c.correct for c in build_form_item(q, graded=True).choices)


def test_true_false_gets_fixed_choices():
    q = Question("q1", "true_false_question", text="Sky is blue", correct_answer="true")
    item = build_form_item(q, graded=True)
    assert item.choices == (FormChoice("True", True), FormChoice("False", False))


def test_choice_question_without_choices_gets_placeholder_options():
    q = Question("q1", "multiple_choice_question")
    item = build_form_item(q, graded=False)
    assert [c.text for c in item.choices] == ["Option 1", "Option 2"]
    assert item.points is None


def test_text_widgets_have_no_choices():
    essay = build_form_item(Question("q1", "essay_question", choices=ABC), graded=False)
    short = build_form_item(Question("q2", "short_answer_question", correct_answer="Paris"), graded=True)
    unknown = build_form_item(Question("q3", "matching_question", choices=ABC), graded=False)

    assert essay.choices == () and essay.widget is WidgetKind.LONG_TEXT
    assert short.accepted_answers == ("Paris",)
    assert unknown.widget is WidgetKind.LONG_TEXT and unknown.choices == ()


def test_item_title_fallbacks():
    assert build_form_item(Question("q1", title="Named"), False).title == "Named"
    assert build_form_item(Question("q9", text="   "), False).title == "Question q9"


def test_graded_iff_any_correct_answer():
    ungraded = build_form_spec(make_quiz(Question("q1", "essay_question")))
    graded = build_form_spec(make_quiz(
        Question("q1", "essay_question"),
        Question("q2", "multiple_choice_question", choices=ABC, correct_answer="A"),
    ))

    assert ungraded.graded is False
    assert [i.points for i in ungraded.items] == [None]
    assert graded.graded is True
    assert [i.points for i in graded.items] == [1, 1]


def test_spec_title_falls_back_to_identifier():
    assert build_form_spec(make_quiz(title="")).title == "Quiz res1"


# ============================================================================
# create_forms
# ============================================================================

class FlakyBuilder:
    def __init__(self):
        self.seen = []

    def create_form(self, spec):
        self.seen.append(spec.quiz_identifier)
        if spec.quiz_identifier == "bad":
            raise RuntimeError("service unavailable")
        return FormRecord(spec.quiz_identifier, spec.title, "v", "e", len(spec.items),
                          datetime(2026, 1, 1, tzinfo=timezone.utc))


def test_create_forms_continues_after_builder_failure():
    builder = FlakyBuilder()
    quizzes = [make_quiz(identifier="one"), make_quiz(identifier="bad"), make_quiz(identifier="two")]

    report = create_forms(quizzes, builder)

    assert builder.seen == ["one", "bad", "two"]
    assert [r.form_id for r in report.records] == ["one", "two"]
    assert report.failures == [("bad", "service unavailable")]


# ============================================================================
# Quiz text files
# ============================================================================

def test_render_quiz_text():
    spec = build_form_spec(make_quiz(
        Question("q1", "multiple_choice_question", text="2 + 2?", choices=ABC, correct_answer="B"),
        Question("q2", "multiple_answers_question", text="Primes", choices=ABC, correct_answer=frozenset({"A", "C"})),
        Question("q3", "essay_question", text="Explain"),
        Question("q4", "short_answer_question", text="Capital of France", correct_answer="Paris"),
        description="<p>Read <b>chapter 1</b></p>",
    ))

    post = frontmatter.loads(render_quiz_text(spec))

    assert post["name"] == "Week 1"
    assert post["quiz_id"] == "res1"
    assert post["graded"] is True
    assert post["points_per_question"] == 1
    lines = post.content.splitlines()
    assert lines[0] == "Read **chapter 1**"
    assert "1. 2 + 2?" in lines
    assert ["a) 3", "*b) 4", "c) 5"] == lines[lines.index("1. 2 + 2?") + 2:lines.index("1. 2 + 2?") + 5]
    assert "[*] 3" in lines and "[ ] 4" in lines and "[*] 5" in lines
    assert "####" in lines
    assert "* Paris" in lines


def test_ungraded_quiz_has_no_points_setting():
    post = frontmatter.loads(render_quiz_text(build_form_spec(make_quiz(Question("q1", "essay_question")))))
    assert post["graded"] is False
    assert "points_per_question" not in post.metadata


def test_quiz_file_builder_writes_unique_files(tmp_path):
    builder = QuizFileFormBuilder(tmp_path / "out")
    spec = build_form_spec(make_quiz(Question("q1", "essay_question"), title="Week 1: Intro?"))

    first = builder.create_form(spec)
    second = builder.create_form(spec)

    assert first.form_id == "Week-1-Intro"
    assert second.form_id == "Week-1-Intro-2"
    assert (tmp_path / "out" / "Week-1-Intro.quiz.txt").is_file()
    assert (tmp_path / "out" / "Week-1-Intro-2.quiz.txt").is_file()
    assert first.viewer_url.startswith("file://")
    assert first.editor_url == first.viewer_url
    assert first.question_count == 1


def test_sanitize_filename():
    assert sanitize_filename('a/b:c  d') == "abc-d"
    assert sanitize_filename("???") == "untitled"


def test_html_helpers():
    assert html_to_markdown("plain  text ") == "plain  text"
    assert html_to_markdown("<p>Hello <em>there</em></p>") == "Hello *there*"
    assert html_to_plain_text("<p>Hello\n <b>world</b></p>") == "Hello world"


# ============================================================================
# Ledger
# ============================================================================

def record(form_id):
    return FormRecord(form_id, "T", f"https://forms/{form_id}", f"https://forms/{form_id}/edit", 3,
                      datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc))


def test_ledger_writes_header_once(tmp_path):
    ledger = FormLedger(tmp_path / "sub" / "forms.csv")

    assert ledger.append([record("f1")]) == 1
    assert ledger.append([record("f2"), record("f3")]) == 2
    assert ledger.append([]) == 0

    with (tmp_path / "sub" / "forms.csv").open(newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))

    assert rows[0] == LEDGER_HEADERS
    assert [r[0] for r in rows[1:]] == ["f1", "f2", "f3"]
    assert rows[1] == ["f1", "https://forms/f1", "https://forms/f1/edit", "3", "2026-10-17T12:00:00+00:00"]


def test_ledger_header_written_into_empty_file(tmp_path):
    path = tmp_path / "forms.csv"
    path.write_text("")
    FormLedger(path).append([record("f1")])
    assert path.read_text().splitlines()[0] == ",".join(LEDGER_HEADERS)


# ============================================================================
# Canvas
# ============================================================================

def test_canvas_payload_weights():
    q = Question("q1", "multiple_choice_question", text="2 + 2?", choices=ABC, correct_answer="B")
    payload = canvas_question_payload(build_form_item(q, graded=True), 1)

    assert payload["question_type"] == "multiple_choice_question"
    assert payload["points_possible"] == 1
    assert [a["answer_weight"] for a in payload["answers"]] == [0, 100, 0]


def test_canvas_builder_creates_unpublished_quiz():
    course = MagicMock()
    quiz = course.create_quiz.return_value
    quiz.id = 42
    quiz.html_url = "https://canvas.example/courses/1/quizzes/42"

    spec = build_form_spec(make_quiz(
        Question("q1", "multiple_choice_question", choices=ABC, correct_answer="A"),
        Question("q2", "essay_question"),
    ))
    result = CanvasFormBuilder(course).create_form(spec)

    (args, _), = course.create_quiz.call_args_list
    assert args[0]["quiz_type"] == "assignment"
    assert args[0]["published"] is False
    assert quiz.create_question.call_count == 2
    assert result.form_id == "42"
    assert result.editor_url == "https://canvas.example/courses/1/quizzes/42/edit"
    assert result.question_count == 2


def test_canvas_quiz_title_is_plain_text():
    course = MagicMock()
    course.create_quiz.return_value.id = 7
    spec = build_form_spec(make_quiz(title="<b>Week</b> 2"))

    CanvasFormBuilder(course).create_form(spec)

    assert course.create_quiz.call_args[0][0]["title"] == "Week 2"


def test_canvas_credentials_from_environment(monkeypatch):
    monkeypatch.setenv("CANVAS_API_KEY", "token")
    monkeypatch.setenv("CANVAS_API_URL", "https://canvas.example/")
    assert load_canvas_credentials() == CanvasCredentials("https://canvas.example", "token")


def test_canvas_credentials_file_comes_from_settings(tmp_path, monkeypatch):
    monkeypatch.delenv("CANVAS_API_KEY", raising=False)
    monkeypatch.delenv("CANVAS_API_URL", raising=False)
    cred = tmp_path / "canvas.yaml"
    cred.write_text("api_url: https://canvas.example/\napi_key: abc\n")

    config = tmp_path / "quizcart.yaml"
    config.write_text(f"canvas_credentials: {cred}\n")
    settings = load_settings(config)

    assert settings.canvas_credentials == cred
    assert load_canvas_credentials(settings) == CanvasCredentials("https://canvas.example", "abc")


def test_canvas_credentials_missing_file(tmp_path, monkeypatch):
    monkeypatch.delenv("CANVAS_API_KEY", raising=False)
    settings = Settings(canvas_credentials=tmp_path / "none.yaml")
    with pytest.raises(ConfigurationError, match="credentials file not found"):
        load_canvas_credentials(settings)


def test_canvas_credentials_file_needs_both_keys(tmp_path, monkeypatch):
    monkeypatch.delenv("CANVAS_API_KEY", raising=False)
    cred = tmp_path / "canvas.yaml"
    cred.write_text("api_url: https://canvas.example\n")
    with pytest.raises(ConfigurationError, match="api_url and api_key"):
        load_canvas_credentials(Settings(canvas_credentials=cred))
