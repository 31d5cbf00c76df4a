"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

resolver.py - Find the file that holds a quiz resource's body.

Strategies, first success wins:
1. the resource href
2. the first declared file ending in .xml that exists
3. any .xml file in the archive whose text looks like a quiz body
   (depth-first, files before subdirectories)

Returns None when nothing matches; the caller decides what that means.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from quizcart.file_tree import FileNode, iter_files, resolve_path
from quizcart.models import ManifestResource

QUIZ_MARKERS = ("questestinterop", "assessment", "qti")


@dataclass(frozen=True)
class ResolvedContent:
    path: str
    node: FileNode
    strategy: str  # href, files, scan


def looks_like_quiz_document(text: str, identifier: str = "") -> bool:
    """
    Content sniffing for the whole-archive fallback scan.

    True when the text contains a QTI marker (questestinterop, assessment,
    qti) or the resource identifier.
    """
    if any(marker in text for marker in QUIZ_MARKERS):
        return True
    return bool(identifier) and identifier in text


def _from_href(resource: ManifestResource, tree: FileNode) -> Optional[ResolvedContent]:
    if not resource.href:
        return None
    node = resolve_path(tree, resource.href)
    if node is None:
        return None
    return ResolvedContent(path=resource.href, node=node, strategy="href")


def _from_declared_files(resource: ManifestResource, tree: FileNode) -> Optional[ResolvedContent]:
    for file_path in resource.files:
        if not file_path.endswith(".xml"):
            continue
        node = resolve_path(tree, file_path)
        if node is not None:
            return ResolvedContent(path=file_path, node=node, strategy="files")
    return None


def _from_archive_scan(resource: ManifestResource, tree: FileNode) -> Optional[ResolvedContent]:
    for path, node in iter_files(tree):
        if not node.name.endswith(".xml"):
            continue
        if looks_like_quiz_document(node.text(), resource.identifier):
            return ResolvedContent(path=path, node=node, strategy="scan")
    return None


def resolve_quiz_content(resource: ManifestResource, tree: FileNode) -> Optional[ResolvedContent]:
    """
    Locate the body file for a quiz resource.

    Args:
        resource: Quiz resource selected from the manifest
        tree: Extracted archive tree

    Returns:
        ResolvedContent naming the file and the strategy that found it,
        or None when no strategy matched
    """
    resolved = _from_href(resource, tree) or _from_declared_files(resource, tree)

    if resolved is None:
        print(f"[resolve] No href/file match for {resource.identifier}; scanning all XML files...")
        resolved = _from_archive_scan(resource, tree)

    if resolved is None:
        print(f"[resolve] Could not find content for quiz {resource.identifier}")
        return None

    print(f"[resolve] {resource.identifier} -> {resolved.path} (via {resolved.strategy})")
    return resolved
