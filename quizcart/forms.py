"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

forms.py - Turn normalized quizzes into form specifications and hand them
to a FormBuilder.

Widget mapping (every QuestionKind is handled):

    multiple_choice   -> SINGLE_SELECT
    multiple_answers  -> MULTI_SELECT
    essay             -> LONG_TEXT
    short_answer      -> SHORT_TEXT
    true_false        -> SINGLE_SELECT seeded with "True"/"False"
    unknown           -> LONG_TEXT

A form is graded iff at least one question declares a correct answer.
Correct-answer ids that do not match any choice are simply never marked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from quizcart.icons import SUCCESS, WARNING
from quizcart.models import Question, QuestionKind, Quiz

DEFAULT_CHOICES = ("Option 1", "Option 2")
TRUE_FALSE_CHOICES = (("True", "true"), ("False", "false"))


class WidgetKind(Enum):
    SINGLE_SELECT = "single_select"
    MULTI_SELECT = "multi_select"
    LONG_TEXT = "long_text"
    SHORT_TEXT = "short_text"


WIDGET_BY_KIND: Dict[QuestionKind, WidgetKind] = {
    QuestionKind.MULTIPLE_CHOICE: WidgetKind.SINGLE_SELECT,
    QuestionKind.MULTIPLE_ANSWERS: WidgetKind.MULTI_SELECT,
    QuestionKind.ESSAY: WidgetKind.LONG_TEXT,
    QuestionKind.SHORT_ANSWER: WidgetKind.SHORT_TEXT,
    QuestionKind.TRUE_FALSE: WidgetKind.SINGLE_SELECT,
    QuestionKind.UNKNOWN: WidgetKind.LONG_TEXT,
}


def widget_for(kind: QuestionKind) -> WidgetKind:
    return WIDGET_BY_KIND[kind]


# ============================================================================
# Form Specification
# ============================================================================

@dataclass(frozen=True)
class FormChoice:
    text: str
    correct: bool = False


@dataclass(frozen=True)
class FormItem:
    question_id: str
    kind: QuestionKind
    widget: WidgetKind
    title: str
    choices: Tuple[FormChoice, ...] = ()
    accepted_answers: Tuple[str, ...] = ()
    points: Optional[int] = None


@dataclass(frozen=True)
class FormSpec:
    quiz_identifier: str
    title: str
    description: str
    graded: bool
    items: Tuple[FormItem, ...] = ()


@dataclass(frozen=True)
class FormRecord:
    """What a builder reports back for one created form."""
    form_id: str
    title: str
    viewer_url: str
    editor_url: str
    question_count: int
    created_at: datetime


class FormBuilder(Protocol):
    def create_form(self, spec: FormSpec) -> FormRecord:
        ...


def is_graded(quiz: Quiz) -> bool:
    return quiz.has_correct_answers


def item_title(question: Question) -> str:
    """Question text, falling back to its title, then 'Question <id>'."""
    if question.text and question.text.strip():
        return question.text
    return question.title or f"Question {question.id}"


def _select_choices(question: Question, widget: WidgetKind) -> Tuple[FormChoice, ...]:
    if question.kind is QuestionKind.TRUE_FALSE:
        return tuple(
            FormChoice(text=label, correct=question.correct_answer == value)
            for label, value in TRUE_FALSE_CHOICES
        )

    if not question.choices:
        return tuple(FormChoice(text=label) for label in DEFAULT_CHOICES)

    if widget is WidgetKind.MULTI_SELECT:
        correct_ids = question.correct_ids()
        return tuple(FormChoice(text=c.text, correct=c.id in correct_ids) for c in question.choices)

    if question.correct_answer is not None and not isinstance(question.correct_answer, str):
        # Several correct values on a single-select question: grading is
        # undefined, so no choice is marked.
        print(
            f"[forms:warn] {WARNING} Question {question.id} is single-select but declares "
            f"{len(question.correct_ids())} correct values; leaving it ungraded"
        )
    return tuple(
        FormChoice(text=c.text, correct=c.id == question.correct_answer)
        for c in question.choices
    )


def _accepted_answers(question: Question) -> Tuple[str, ...]:
    """Free-text answers keyed as correct (textEntryInteraction correctResponse)."""
    answer = question.correct_answer
    if answer is None:
        return ()
    if isinstance(answer, str):
        return (answer,)
    if isinstance(answer, tuple):
        return answer
    return tuple(sorted(answer))


def build_form_item(question: Question, graded: bool) -> FormItem:
    kind = question.kind
    widget = widget_for(kind)

    choices: Tuple[FormChoice, ...] = ()
    if widget in (WidgetKind.SINGLE_SELECT, WidgetKind.MULTI_SELECT):
        choices = _select_choices(question, widget)

    accepted: Tuple[str, ...] = ()
    if widget is WidgetKind.SHORT_TEXT:
        accepted = _accepted_answers(question)

    if kind is QuestionKind.UNKNOWN:
        print(f"[forms] Unknown question type '{question.type}' for {question.id}; using long text")

    return FormItem(
        question_id=question.id,
        kind=kind,
        widget=widget,
        title=item_title(question),
        choices=choices,
        accepted_answers=accepted,
        points=question.points if graded and question.points > 0 else None,
    )


def build_form_spec(quiz: Quiz) -> FormSpec:
    graded = is_graded(quiz)
    return FormSpec(
        quiz_identifier=quiz.identifier,
        title=quiz.title or f"Quiz {quiz.identifier}",
        description=quiz.description,
        graded=graded,
        items=tuple(build_form_item(q, graded) for q in quiz.questions),
    )


# ============================================================================
# Form Creation
# ============================================================================

@dataclass
class FormCreationReport:
    records: List[FormRecord] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)  # (quiz id, message)


def create_forms(quizzes: Sequence[Quiz], builder: FormBuilder) -> FormCreationReport:
    """
    Build one form per quiz, in order. A builder failure is logged and that
    quiz is skipped; the remaining quizzes are still built.

    Args:
        quizzes: Quizzes to turn into forms, in extraction order
        builder: FormBuilder that creates each form

    Returns:
        FormCreationReport with one record per created form and one
        (identifier, message) failure per quiz the builder rejected
    """
    report = FormCreationReport()
    print(f"[forms] Creating forms for {len(quizzes)} quizzes...")

    for quiz in quizzes:
        spec = build_form_spec(quiz)
        if not spec.items:
            print(f"[forms] {spec.title} has no parsed questions; creating an empty form")

        try:
            record = builder.create_form(spec)
        except Exception as e:
            print(f"[forms:warn] {WARNING} Error creating form for quiz '{spec.title}': {e}")
            report.failures.append((quiz.identifier, str(e)))
            continue

        report.records.append(record)
        graded = "graded" if spec.graded else "ungraded"
        print(f"[forms] {SUCCESS} Created form: {record.title} ({record.question_count} questions, {graded})")

    print(f"[forms] Created {len(report.records)} forms")
    return report
