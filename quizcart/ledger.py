"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

ledger.py - Append created forms to a CSV ledger, one row per form.

The header row is written only when the file is missing or empty, so the
same ledger accumulates rows across runs.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, List

from quizcart.forms import FormRecord

LEDGER_HEADERS = ["Form ID", "Form URL", "Edit URL", "Number of Questions", "Creation Date"]


def record_row(record: FormRecord) -> List[str]:
    return [
        record.form_id,
        record.viewer_url,
        record.editor_url,
        str(record.question_count),
        record.created_at.isoformat(),
    ]


class FormLedger:
    def __init__(self, path: Path):
        self.path = Path(path)

    def needs_header(self) -> bool:
        return not self.path.exists() or self.path.stat().st_size == 0

    def append(self, records: Iterable[FormRecord]) -> int:
        records = list(records)
        if not records:
            return 0

        self.path.parent.mkdir(parents=True, exist_ok=True)
        write_header = self.needs_header()

        with self.path.open("a", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            if write_header:
                writer.writerow(LEDGER_HEADERS)
            for record in records:
                writer.writerow(record_row(record))

        print(f"[ledger] Added {len(records)} forms to {self.path}")
        return len(records)
