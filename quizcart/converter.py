#!/usr/bin/env python3
"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

converter.py

Convert the quizzes in an IMS Common Cartridge (.imscc) into forms.

Pipeline for one archive:
    bytes -> file tree -> manifest -> quiz resources
          -> body file per resource -> Quiz per resource
          -> one form per Quiz -> one ledger row per form

Failures that make the whole archive unusable (unreadable zip, missing or
broken manifest) abort the run. A resource whose body cannot be found or
parsed is replaced with an empty, titled placeholder quiz and recorded, and
the remaining resources are still converted.

Usage:
    quizcart <cartridge.imscc> [--output DIR] [--ledger CSV]
             [--builder files|canvas] [--course-id ID] [--config PATH] [--dry-run]
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from quizcart.archive import extract_archive
from quizcart.canvas_forms import CanvasFormBuilder
from quizcart.config import Settings, load_settings
from quizcart.errors import (
    ConfigurationError,
    ContentNotFound,
    ConversionError,
    ResourceError,
)
from quizcart.file_tree import FileNode, count_files
from quizcart.forms import FormBuilder, FormRecord, create_forms
from quizcart.icons import ERROR, SUCCESS, WARNING
from quizcart.ledger import FormLedger
from quizcart.manifest import parse_manifest, select_quiz_resources
from quizcart.models import ManifestResource, Quiz, placeholder_quiz
from quizcart.qti import parse_quiz_document
from quizcart.quiz_files import QuizFileFormBuilder
from quizcart.resolver import resolve_quiz_content
from quizcart.workspace import Workspace


@dataclass(frozen=True)
class ResourceFailure:
    identifier: str
    kind: str
    message: str


@dataclass
class ExtractionResult:
    manifest_path: str
    quizzes: List[Quiz] = field(default_factory=list)
    failures: List[ResourceFailure] = field(default_factory=list)


@dataclass
class ConversionResult:
    success: bool
    message: str
    quizzes: List[Quiz] = field(default_factory=list)
    failures: List[ResourceFailure] = field(default_factory=list)
    forms: List[FormRecord] = field(default_factory=list)


# ============================================================================
# Per-resource conversion
# ============================================================================

def convert_resource(resource: ManifestResource, tree: FileNode) -> Quiz:
    """
    Resolve and parse one quiz resource.

    Raises:
        ContentNotFound, ContentParseError, UnsupportedFormat
    """
    resolved = resolve_quiz_content(resource, tree)
    if resolved is None:
        raise ContentNotFound(f"Could not find content for quiz {resource.identifier}", resource.identifier)
    return parse_quiz_document(resolved.node.data or b"", resource)


def quiz_for_resource(
    resource: ManifestResource,
    tree: FileNode,
    failures: List[ResourceFailure],
) -> Quiz:
    """convert_resource, degrading to a placeholder quiz on resource errors."""
    try:
        return convert_resource(resource, tree)
    except ResourceError as e:
        kind = type(e).__name__
        print(f"[convert:warn] {WARNING} {kind} for {resource.identifier}: {e}")
        failures.append(ResourceFailure(identifier=resource.identifier, kind=kind, message=str(e)))
        return placeholder_quiz(resource)


def extract_quizzes(
    blob: bytes,
    workspace: Optional[Workspace] = None,
    settings: Optional[Settings] = None,
) -> ExtractionResult:
    """
    Archive bytes -> quizzes.

    Raises:
        ExtractionError, ManifestNotFound, ManifestParseError
    """
    print("[convert] Extracting archive...")
    tree = extract_archive(blob, workspace, settings)
    print(f"[convert] Extraction complete. Got {count_files(tree)} files.")

    print("[convert] Finding and parsing manifest...")
    manifest = parse_manifest(tree)

    resources = select_quiz_resources(manifest)
    result = ExtractionResult(manifest_path=manifest.path)

    for resource in resources:
        print(f"[convert] Parsing quiz content for: {resource.title}")
        result.quizzes.append(quiz_for_resource(resource, tree, result.failures))

    return result


# ============================================================================
# Import Orchestration
# ============================================================================

def convert_archive(
    blob: bytes,
    builder: Optional[FormBuilder] = None,
    ledger: Optional[FormLedger] = None,
    settings: Optional[Settings] = None,
) -> ConversionResult:
    """
    Run a whole conversion inside the scoped workspace.

    Never raises ConversionError: a fatal error is reported as a single
    failed ConversionResult. Without a builder, quizzes are parsed only.

    Args:
        blob: Raw .imscc bytes
        builder: FormBuilder for the extracted quizzes, or None to parse only
        ledger: FormLedger that receives one row per created form
        settings: Quizcart settings; defaults apply when omitted

    Returns:
        ConversionResult with the quizzes, created forms and any error
    """
    settings = settings or Settings()
    workspace = Workspace(settings.workspace_root, settings.workspace_name)

    try:
        with workspace:
            extraction = extract_quizzes(blob, workspace, settings)

            forms: List[FormRecord] = []
            if builder is not None:
                forms = create_forms(extraction.quizzes, builder).records

            if ledger is not None and forms:
                try:
                    ledger.append(forms)
                except OSError as e:
                    print(f"[ledger:warn] {WARNING} Error updating ledger: {e}")

    except ConversionError as e:
        print(f"[convert] {ERROR} Error converting archive: {e}")
        return ConversionResult(success=False, message=f"Error: {e}")

    if builder is not None:
        message = f"Successfully converted {len(forms)} quizzes to forms."
    else:
        message = f"Parsed {len(extraction.quizzes)} quizzes."

    return ConversionResult(
        success=True,
        message=message,
        quizzes=extraction.quizzes,
        failures=extraction.failures,
        forms=forms,
    )


def convert_file(
    archive_path: Path,
    builder: Optional[FormBuilder] = None,
    ledger: Optional[FormLedger] = None,
    settings: Optional[Settings] = None,
) -> ConversionResult:
    print(f"[convert] Converting cartridge: {archive_path}")
    if archive_path.suffix.lower() != ".imscc":
        print(f"[convert:warn] {WARNING} File does not have .imscc extension")
    return convert_archive(archive_path.read_bytes(), builder, ledger, settings)


# ============================================================================
# Main Entry Point
# ============================================================================

def make_builder(settings: Settings) -> FormBuilder:
    if settings.builder == "canvas":
        if settings.canvas_course_id is None:
            raise ConfigurationError("Canvas builder needs a course id (--course-id or canvas_course_id)")
        return CanvasFormBuilder.for_course_id(settings.canvas_course_id, settings)
    return QuizFileFormBuilder(settings.output_dir)


def print_summary(result: ConversionResult) -> None:
    for quiz in result.quizzes:
        marker = " (placeholder)" if quiz.placeholder else ""
        print(f"[convert]   {quiz.title}: {len(quiz.questions)} questions{marker}")
    for failure in result.failures:
        print(f"[convert]   {WARNING} {failure.identifier}: {failure.kind}: {failure.message}")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert IMS Common Cartridge quizzes to forms"
    )
    parser.add_argument(
        "cartridge",
        type=Path,
        help="Path to .imscc cartridge file"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Directory for quiz files (default: ./forms)"
    )
    parser.add_argument(
        "--ledger",
        type=Path,
        help="CSV ledger of created forms (default: <output>/forms.csv)"
    )
    parser.add_argument(
        "--builder",
        choices=["files", "canvas"],
        help="Where forms are created (default: files)"
    )
    parser.add_argument(
        "--course-id",
        type=int,
        help="Canvas course id for --builder canvas"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Settings file (default: ./quizcart.yaml)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and report quizzes without creating forms"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if not args.cartridge.is_file():
        print(f"{ERROR} Cartridge file not found: {args.cartridge}")
        return 1

    try:
        settings = load_settings(args.config)
        if args.output is not None:
            settings.output_dir = args.output
        if args.ledger is not None:
            settings.ledger_path = args.ledger
        if args.builder is not None:
            settings.builder = args.builder
        if args.course_id is not None:
            settings.canvas_course_id = args.course_id

        builder = None
        ledger = None
        if not args.dry_run:
            builder = make_builder(settings)
            ledger = FormLedger(settings.ledger_path or settings.output_dir / "forms.csv")

    except ConfigurationError as e:
        print(f"{ERROR} Configuration error: {e}")
        return 1

    result = convert_file(args.cartridge, builder, ledger, settings)
    if not result.success:
        print(f"\n{ERROR} {result.message}")
        return 1

    print_summary(result)
    print(f"\n[convert] {SUCCESS} {result.message}")
    return 0


if __name__ == "__main__":
    exit(main())
