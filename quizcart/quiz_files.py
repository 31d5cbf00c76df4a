"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

quiz_files.py - FormBuilder that writes each form as a .quiz.txt file.

Output format (YAML front matter + Zaphod quiz text):

    ---
    name: Week 1 Quiz
    quiz_id: res_quiz1
    graded: true
    points_per_question: 1
    ---

    Description paragraph

    1. What is 2 + 2?

    a) 3
    *b) 4

    2. Pick all primes

    [*] 2
    [ ] 4

    3. Explain your answer

    ####

The form's viewer and editor URLs are the file:// URI of the written file.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Set

import frontmatter

from quizcart.forms import FormItem, FormRecord, FormSpec, WidgetKind
from quizcart.html_text import html_to_markdown

QUIZ_FILE_SUFFIX = ".quiz.txt"


def sanitize_filename(name: str) -> str:
    """Sanitize a filename for file system use."""
    name = re.sub(r'[<>:"/\\|?*]', '', name)
    name = re.sub(r'\s+', '-', name)
    name = re.sub(r'-+', '-', name)
    name = name.strip('-')
    if len(name) > 100:
        name = name[:100]
    return name or "untitled"


def render_item(number: int, item: FormItem) -> List[str]:
    lines = [f"{number}. {html_to_markdown(item.title)}", ""]

    if item.widget is WidgetKind.SINGLE_SELECT:
        for i, choice in enumerate(item.choices):
            letter = chr(ord('a') + i)
            prefix = f"*{letter})" if choice.correct else f"{letter})"
            lines.append(f"{prefix} {html_to_markdown(choice.text)}")
        lines.append("")

    elif item.widget is WidgetKind.MULTI_SELECT:
        for choice in item.choices:
            checkbox = "[*]" if choice.correct else "[ ]"
            lines.append(f"{checkbox} {html_to_markdown(choice.text)}")
        lines.append("")

    elif item.widget is WidgetKind.SHORT_TEXT:
        for answer in item.accepted_answers:
            lines.append(f"* {answer}")
        if item.accepted_answers:
            lines.append("")

    elif item.widget is WidgetKind.LONG_TEXT:
        lines.append("####")
        lines.append("")

    return lines


def render_quiz_text(spec: FormSpec) -> str:
    metadata = {
        "name": spec.title,
        "quiz_id": spec.quiz_identifier,
        "graded": spec.graded,
    }
    if spec.graded:
        metadata["points_per_question"] = 1

    body: List[str] = []
    if spec.description:
        body.append(html_to_markdown(spec.description))
        body.append("")

    for number, item in enumerate(spec.items, 1):
        body.extend(render_item(number, item))

    post = frontmatter.Post("\n".join(body).rstrip() + "\n", **metadata)
    return frontmatter.dumps(post) + "\n"


class QuizFileFormBuilder:
    """Write one .quiz.txt per form into `output_dir`."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self._used_names: Set[str] = set()

    def _target_path(self, spec: FormSpec) -> Path:
        base = sanitize_filename(spec.title)
        name = base
        counter = 2
        while name in self._used_names:
            name = f"{base}-{counter}"
            counter += 1
        self._used_names.add(name)
        return self.output_dir / f"{name}{QUIZ_FILE_SUFFIX}"

    def create_form(self, spec: FormSpec) -> FormRecord:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        quiz_path = self._target_path(spec)
        quiz_path.write_text(render_quiz_text(spec), encoding="utf-8")

        uri = quiz_path.resolve().as_uri()
        print(f"[forms] Wrote {quiz_path.name} ({len(spec.items)} questions)")

        return FormRecord(
            form_id=quiz_path.name[: -len(QUIZ_FILE_SUFFIX)],
            title=spec.title,
            viewer_url=uri,
            editor_url=uri,
            question_count=len(spec.items),
            created_at=datetime.now(timezone.utc),
        )
