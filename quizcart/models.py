"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

models.py - Normalized quiz model shared by both QTI pathways.

A Question keeps the raw schema type string exactly as found in the body
document ("multiple_choice_question", "essay_question", "" ...). Consumers
never branch on that string directly; they use Question.kind, which folds it
into the closed QuestionKind set.

Correct answers are one of:
    None               - no correct answer declared
    str                - a single choice id
    frozenset[str]     - legacy multiple-answers set
    tuple[str, ...]    - modern correctResponse with several values

Correct answer ids are NOT checked against the question's choices.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple, Union

CorrectAnswer = Union[None, str, FrozenSet[str], Tuple[str, ...]]


class QuestionKind(Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    MULTIPLE_ANSWERS = "multiple_answers"
    ESSAY = "essay"
    SHORT_ANSWER = "short_answer"
    TRUE_FALSE = "true_false"
    UNKNOWN = "unknown"


_KIND_BY_TYPE = {
    "multiple_choice_question": QuestionKind.MULTIPLE_CHOICE,
    "multiple_answers_question": QuestionKind.MULTIPLE_ANSWERS,
    "essay_question": QuestionKind.ESSAY,
    "short_answer_question": QuestionKind.SHORT_ANSWER,
    "true_false_question": QuestionKind.TRUE_FALSE,
}


def kind_for_type(question_type: Optional[str]) -> QuestionKind:
    """Map a raw schema type string onto the closed kind set."""
    return _KIND_BY_TYPE.get(question_type or "", QuestionKind.UNKNOWN)


# ============================================================================
# Manifest
# ============================================================================

@dataclass(frozen=True)
class ManifestResource:
    """A quiz-like resource declared in imsmanifest.xml."""
    identifier: str
    resource_type: str
    href: str = ""
    files: Tuple[str, ...] = ()
    title: str = ""


# ============================================================================
# Quiz
# ============================================================================

@dataclass(frozen=True)
class Choice:
    id: str
    text: str


@dataclass(frozen=True)
class Question:
    id: str
    type: str = ""
    title: str = ""
    text: str = ""
    choices: Tuple[Choice, ...] = ()
    correct_answer: CorrectAnswer = None
    points: int = 1

    @property
    def kind(self) -> QuestionKind:
        return kind_for_type(self.type)

    def correct_ids(self) -> FrozenSet[str]:
        """Correct answer as a set of ids, whatever its declared shape."""
        if self.correct_answer is None:
            return frozenset()
        if isinstance(self.correct_answer, str):
            return frozenset([self.correct_answer])
        return frozenset(self.correct_answer)


@dataclass(frozen=True)
class ItemSkipped:
    """An item the normalizer declined to turn into a Question."""
    position: int
    identifier: Optional[str]
    reason: str


@dataclass(frozen=True)
class Quiz:
    identifier: str
    title: str
    description: str = ""
    questions: Tuple[Question, ...] = ()
    skipped: Tuple[ItemSkipped, ...] = field(default=(), compare=False)
    placeholder: bool = False

    @property
    def has_correct_answers(self) -> bool:
        return any(q.correct_answer is not None for q in self.questions)


def placeholder_quiz(resource: ManifestResource) -> Quiz:
    """Stand-in for a resource whose body could not be found or parsed."""
    return Quiz(
        identifier=resource.identifier,
        title=resource.title or resource.identifier,
        description="",
        questions=(),
        placeholder=True,
    )
