"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

qti.py - Parse QTI quiz bodies into the normalized Quiz model.

Two unrelated schemas are supported, chosen once per document from the root
element's local name:

    questestinterop  -> QuizFormat.LEGACY  (QTI 1.2, Canvas/Moodle exports)
    assessment       -> QuizFormat.MODERN  (QTI 2.x style)
    anything else    -> QuizFormat.UNSUPPORTED

Element lookups match local names and ignore namespaces, so both bare and
namespaced (ims_qtiasiv1p2, imsqti_v2p1) documents are read the same way.

Legacy correct answers come from resprocessing/respcondition/conditionvar/
varequal. For multiple_choice_question the LAST varequal wins; for
multiple_answers_question every value is collected into a set; other types
get no correct answer.

Modern correct answers come from responseDeclaration/correctResponse/value:
one value is a scalar, several are a tuple. A choiceInteraction item is
always typed multiple_choice_question, even with several correct values.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Callable, List, Optional, Set, Tuple, Union
from xml.etree import ElementTree as ET

from quizcart.errors import ContentParseError, UnsupportedFormat
from quizcart.models import (
    Choice,
    CorrectAnswer,
    ItemSkipped,
    ManifestResource,
    Question,
    Quiz,
)
from quizcart.xml_utils import (
    XML_ERRORS,
    child,
    child_path,
    children,
    get_all_text,
    get_text,
    local_name,
    parse_xml,
)

ItemOutcome = Union[Question, ItemSkipped]

MULTIPLE_CHOICE = "multiple_choice_question"
MULTIPLE_ANSWERS = "multiple_answers_question"
ESSAY = "essay_question"
SHORT_ANSWER = "short_answer_question"

# itemBody interaction element -> question type
INTERACTION_TYPES = (
    ("choiceInteraction", MULTIPLE_CHOICE),
    ("extendedTextInteraction", ESSAY),
    ("textEntryInteraction", SHORT_ANSWER),
)


class QuizFormat(Enum):
    LEGACY = "questestinterop"
    MODERN = "assessment"
    UNSUPPORTED = "unsupported"


def detect_format(root: ET.Element) -> QuizFormat:
    name = local_name(root)
    if name == QuizFormat.LEGACY.value:
        return QuizFormat.LEGACY
    if name == QuizFormat.MODERN.value:
        return QuizFormat.MODERN
    return QuizFormat.UNSUPPORTED


def new_identifier() -> str:
    return uuid.uuid4().hex


# ============================================================================
# Entry Point
# ============================================================================

def parse_quiz_document(data: Union[bytes, str], resource: ManifestResource) -> Quiz:
    """
    Parse a quiz body for `resource`.

    Args:
        data: Raw bytes or text of the resolved quiz document
        resource: Manifest resource the body belongs to; supplies the
            identifier and the fallback title

    Returns:
        Quiz with one outcome per item, in document order

    Raises:
        ContentParseError: not XML, or a legacy body without <assessment>
        UnsupportedFormat: root is neither questestinterop nor assessment
    """
    try:
        root = parse_xml(data)
    except XML_ERRORS as e:
        raise ContentParseError(f"Error parsing quiz XML: {e}", resource.identifier) from e

    quiz_format = detect_format(root)
    print(f"[qti] Quiz XML root element: {local_name(root)} ({quiz_format.name.lower()})")

    if quiz_format is QuizFormat.LEGACY:
        return parse_legacy_quiz(root, resource)
    elif quiz_format is QuizFormat.MODERN:
        return parse_modern_quiz(root, resource)
    elif quiz_format is QuizFormat.UNSUPPORTED:
        raise UnsupportedFormat(
            f"Unknown quiz format with root element: {local_name(root)}",
            resource.identifier,
        )
    raise AssertionError(f"Unhandled quiz format: {quiz_format}")


def _collect_outcomes(
    items: List[ET.Element],
    normalize: Callable[[ET.Element], Question],
    explicit_id_attr: str,
    body_tag: str,
) -> List[ItemOutcome]:
    """
    Normalize items in document order.

    Args:
        items: Item elements, in the order they appear in the quiz
        normalize: Item normalizer for the document's schema
        explicit_id_attr: Attribute holding the item id (ident / identifier)
        body_tag: Element that holds the question body (presentation / itemBody)

    Returns:
        One outcome per item: a Question, or ItemSkipped for an item with no
        question body at all. An item whose identifier repeats an earlier
        one is still kept; the repeat is only logged.
    """
    outcomes: List[ItemOutcome] = []
    seen: Set[str] = set()

    for position, item in enumerate(items, 1):
        explicit_id = item.get(explicit_id_attr)

        if child(item, body_tag) is None:
            outcomes.append(ItemSkipped(
                position=position,
                identifier=explicit_id,
                reason=f"item has no <{body_tag}> element",
            ))
            continue

        if explicit_id:
            if explicit_id in seen:
                print(f"[qti:warn] Item {position} repeats identifier '{explicit_id}'")
            seen.add(explicit_id)

        outcomes.append(normalize(item))

    return outcomes


def _build_quiz(
    identifier: str,
    title: str,
    description: str,
    outcomes: List[ItemOutcome],
) -> Quiz:
    questions = tuple(o for o in outcomes if isinstance(o, Question))
    skipped = tuple(o for o in outcomes if isinstance(o, ItemSkipped))

    for skip in skipped:
        print(f"[qti:warn] Skipped item {skip.position} in {identifier}: {skip.reason}")

    return Quiz(
        identifier=identifier,
        title=title,
        description=description,
        questions=questions,
        skipped=skipped,
    )


# ============================================================================
# Legacy (questestinterop)
# ============================================================================

def _metadata_entry(qtimetadata: Optional[ET.Element], label: str) -> Optional[str]:
    """fieldentry of the first qtimetadatafield whose fieldlabel is `label`."""
    for field in children(qtimetadata, "qtimetadatafield"):
        if get_text(child(field, "fieldlabel")) == label:
            return get_text(child(field, "fieldentry"))
    return None


def parse_legacy_quiz(root: ET.Element, resource: ManifestResource) -> Quiz:
    assessment = child(root, "assessment")
    if assessment is None:
        raise ContentParseError("No assessment element found", resource.identifier)

    title = assessment.get("title") or resource.title
    description = _metadata_entry(child(assessment, "qtimetadata"), "qmd_description") or ""

    print(f"[qti] Processing legacy QTI quiz: {title}")

    items = children(assessment, "item")
    for section in children(assessment, "section"):
        items.extend(children(section, "item"))

    outcomes = _collect_outcomes(items, normalize_legacy_item, "ident", "presentation")
    quiz = _build_quiz(resource.identifier, title, description, outcomes)

    print(f"[qti] Parsed {len(quiz.questions)} questions from legacy QTI quiz")
    return quiz


def _legacy_correct_answer(item: ET.Element, question_type: str) -> CorrectAnswer:
    values: List[str] = []
    for respcondition in children(child(item, "resprocessing"), "respcondition"):
        for varequal in children(child(respcondition, "conditionvar"), "varequal"):
            value = get_text(varequal)
            if value:
                values.append(value)

    if not values:
        return None
    if question_type == MULTIPLE_CHOICE:
        return values[-1]
    if question_type == MULTIPLE_ANSWERS:
        return frozenset(values)
    return None


def _unique_choices(choices: List[Choice], item_id: str) -> Tuple[Choice, ...]:
    seen: Set[str] = set()
    unique = []
    for choice in choices:
        if choice.id in seen:
            print(f"[qti:warn] Dropping duplicate choice '{choice.id}' in item {item_id}")
            continue
        seen.add(choice.id)
        unique.append(choice)
    return tuple(unique)


def normalize_legacy_item(item: ET.Element) -> Question:
    """
    Convert a QTI 1.2 <item> into a Question.

    Args:
        item: <item> element from a questestinterop document

    Returns:
        Question with the raw question_type from itemmetadata, the first
        presentation/material/mattext as text, and choices from
        render_choice/response_label. points is always 1.
    """
    item_id = item.get("ident") or new_identifier()

    qtimetadata = child_path(item, "itemmetadata", "qtimetadata")
    question_type = _metadata_entry(qtimetadata, "question_type") or ""

    presentation = child(item, "presentation")
    text = get_text(child_path(presentation, "material", "mattext"))

    choices = []
    for label in children(child(presentation, "render_choice"), "response_label"):
        ident = label.get("ident")
        if not ident:
            continue
        mattext = child_path(label, "material", "mattext")
        if mattext is None:
            continue
        choices.append(Choice(id=ident, text=get_text(mattext)))

    return Question(
        id=item_id,
        type=question_type,
        title=item.get("title", ""),
        text=text,
        choices=_unique_choices(choices, item_id),
        correct_answer=_legacy_correct_answer(item, question_type),
        points=1,
    )


# ============================================================================
# Modern (assessment)
# ============================================================================

def parse_modern_quiz(root: ET.Element, resource: ManifestResource) -> Quiz:
    title = root.get("title") or resource.title

    print(f"[qti] Processing modern QTI quiz: {title}")

    outcomes = _collect_outcomes(children(root, "item"), normalize_modern_item, "identifier", "itemBody")
    quiz = _build_quiz(resource.identifier, title, "", outcomes)

    print(f"[qti] Parsed {len(quiz.questions)} questions from modern QTI quiz")
    return quiz


def _modern_correct_answer(item: ET.Element) -> CorrectAnswer:
    correct_response = child_path(item, "responseDeclaration", "correctResponse")
    values = [get_all_text(value) for value in children(correct_response, "value")]

    if len(values) == 1:
        return values[0]
    if len(values) > 1:
        return tuple(values)
    return None


def normalize_modern_item(item: ET.Element) -> Question:
    """
    Convert a QTI 2.x <item> into a Question.

    Args:
        item: <item> element from an assessment document

    Returns:
        Question typed by the first interaction found in itemBody (empty
        when there is none), with choices from choiceInteraction/simpleChoice.
        points is always 1.
    """
    item_id = item.get("identifier") or new_identifier()
    item_body = child(item, "itemBody")

    question_type = ""
    for interaction, mapped_type in INTERACTION_TYPES:
        if child(item_body, interaction) is not None:
            question_type = mapped_type
            break

    choices = []
    choice_interaction = child(item_body, "choiceInteraction")
    for simple_choice in children(choice_interaction, "simpleChoice"):
        identifier = simple_choice.get("identifier")
        if not identifier:
            continue
        choices.append(Choice(id=identifier, text=get_all_text(simple_choice)))

    return Question(
        id=item_id,
        type=question_type,
        title=item.get("title", ""),
        text=get_all_text(child(item_body, "prompt")),
        choices=_unique_choices(choices, item_id),
        correct_answer=_modern_correct_answer(item),
        points=1,
    )
