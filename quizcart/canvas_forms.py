"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

canvas_forms.py - FormBuilder that creates hosted Canvas quizzes.

Graded forms become "assignment" quizzes; ungraded ones become ungraded
surveys. Quizzes are created unpublished so an instructor can review them.

    viewer_url = quiz.html_url
    editor_url = quiz.html_url + "/edit"
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from quizcart.canvas_client import make_canvas_api_obj
from quizcart.config import Settings
from quizcart.forms import FormItem, FormRecord, FormSpec, WidgetKind
from quizcart.html_text import html_to_plain_text
from quizcart.models import QuestionKind

if TYPE_CHECKING:
    from canvasapi.course import Course

CORRECT_WEIGHT = 100


def canvas_question_type(item: FormItem) -> str:
    if item.kind is QuestionKind.TRUE_FALSE:
        return "true_false_question"
    if item.widget is WidgetKind.SINGLE_SELECT:
        return "multiple_choice_question"
    if item.widget is WidgetKind.MULTI_SELECT:
        return "multiple_answers_question"
    if item.widget is WidgetKind.SHORT_TEXT:
        return "short_answer_question"
    return "essay_question"


def canvas_question_payload(item: FormItem, position: int) -> Dict[str, Any]:
    answers: List[Dict[str, Any]] = [
        {"answer_text": choice.text, "answer_weight": CORRECT_WEIGHT if choice.correct else 0}
        for choice in item.choices
    ]
    answers.extend(
        {"answer_text": text, "answer_weight": CORRECT_WEIGHT}
        for text in item.accepted_answers
    )

    return {
        "question_name": f"Question {position}",
        "question_text": item.title,
        "question_type": canvas_question_type(item),
        "points_possible": item.points or 0,
        "position": position,
        "answers": answers,
    }


class CanvasFormBuilder:
    def __init__(self, course: "Course"):
        self.course = course

    @classmethod
    def for_course_id(cls, course_id: int, settings: Optional[Settings] = None) -> "CanvasFormBuilder":
        canvas = make_canvas_api_obj(settings)
        return cls(canvas.get_course(course_id))

    def create_form(self, spec: FormSpec) -> FormRecord:
        quiz = self.course.create_quiz({
            "title": html_to_plain_text(spec.title),
            "description": spec.description,
            "quiz_type": "assignment" if spec.graded else "survey",
            "published": False,
        })
        print(f"[canvas] Created quiz {quiz.id}: {spec.title}")

        for position, item in enumerate(spec.items, 1):
            quiz.create_question(question=canvas_question_payload(item, position))

        html_url = getattr(quiz, "html_url", "")
        return FormRecord(
            form_id=str(quiz.id),
            title=spec.title,
            viewer_url=html_url,
            editor_url=f"{html_url}/edit" if html_url else "",
            question_count=len(spec.items),
            created_at=datetime.now(timezone.utc),
        )
