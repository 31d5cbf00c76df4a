"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

file_tree.py - In-memory file hierarchy rebuilt from a flat archive listing.

The tree is built in a single pass over (path, bytes) pairs using an explicit
path -> node mapping, so directory creation is get-or-create by construction.

Traversal order used everywhere in Quizcart (iter_files):
    leaf files of a directory first, in archive order,
    then its subdirectories, in archive order (depth-first).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from urllib.parse import unquote

from quizcart.icons import WARNING

SEPARATOR = "/"


@dataclass
class FileNode:
    """
    A directory (data is None) or a leaf file (data holds its bytes).

    An archive that stores both "a" and "a/b.xml" yields one node that is
    a file and also has children; both stay reachable.
    """
    name: str
    children: Dict[str, "FileNode"] = field(default_factory=dict)
    data: Optional[bytes] = None

    @property
    def is_file(self) -> bool:
        return self.data is not None

    def text(self) -> str:
        """Decode file bytes as UTF-8, replacing undecodable bytes."""
        if self.data is None:
            return ""
        return self.data.decode("utf-8", errors="replace")


def split_path(path: str) -> List[str]:
    """Split a slash path, dropping empty and '.' segments."""
    return [part for part in path.split(SEPARATOR) if part and part != "."]


# ============================================================================
# Construction
# ============================================================================

def _warn_file_and_directory(path: str) -> None:
    print(f"[tree:warn] {WARNING} {path} is both a file and a directory; keeping both")


def build_file_tree(entries: Iterable[Tuple[str, bytes]]) -> FileNode:
    """
    Build a tree from (path, bytes) pairs.

    Paths ending in the separator are directory markers and produce no node.
    Empty intermediate segments are ignored; an empty final segment means
    there is no file name and the entry is skipped.
    """
    root = FileNode(name="")
    nodes: Dict[str, FileNode] = {"": root}

    for path, data in entries:
        if not path or path.endswith(SEPARATOR):
            continue

        raw_parts = path.split(SEPARATOR)
        file_name = raw_parts[-1]
        if not file_name:
            continue
        dir_parts = [p for p in raw_parts[:-1] if p and p != "."]

        parent_key = ""
        for part in dir_parts:
            key = f"{parent_key}{SEPARATOR}{part}" if parent_key else part
            node = nodes.get(key)
            if node is None:
                node = FileNode(name=part)
                nodes[key] = node
                nodes[parent_key].children[part] = node
            elif node.is_file and not node.children:
                _warn_file_and_directory(key)
            parent_key = key

        file_key = f"{parent_key}{SEPARATOR}{file_name}" if parent_key else file_name
        existing = nodes.get(file_key)
        if existing is not None:
            if existing.children and existing.data is None:
                _warn_file_and_directory(file_key)
            # Duplicate member: the later entry's bytes win
            existing.data = data
        else:
            leaf = FileNode(name=file_name, data=data)
            nodes[file_key] = leaf
            nodes[parent_key].children[file_name] = leaf

    return root


# ============================================================================
# Lookup
# ============================================================================

def _lookup(root: FileNode, parts: List[str]) -> Optional[FileNode]:
    node = root
    for part in parts:
        child = node.children.get(part)
        if child is None:
            return None
        node = child
    return node


def resolve_path(root: FileNode, path: str) -> Optional[FileNode]:
    """
    Return the leaf file at `path`, or None.

    Manifest hrefs are frequently percent-encoded, so a literal lookup that
    fails is retried with the decoded path.
    """
    if not path:
        return None

    parts = split_path(path)
    if not parts:
        return None

    node = _lookup(root, parts)
    if node is None:
        decoded = split_path(unquote(path))
        if decoded != parts:
            node = _lookup(root, decoded)

    if node is None or not node.is_file:
        return None
    return node


def iter_files(root: FileNode, prefix: str = "") -> Iterator[Tuple[str, FileNode]]:
    """Yield (path, node) for every leaf, depth-first, files before subdirectories."""
    directories = []
    for name, child in root.children.items():
        path = f"{prefix}{SEPARATOR}{name}" if prefix else name
        if child.is_file:
            yield path, child
        if child.children:
            directories.append((path, child))

    for path, child in directories:
        yield from iter_files(child, path)


def find_files_named(root: FileNode, name: str) -> List[Tuple[str, FileNode]]:
    """All leaves whose file name is exactly `name`, in iter_files order."""
    return [(path, node) for path, node in iter_files(root) if node.name == name]


def count_files(root: FileNode) -> int:
    return sum(1 for _ in iter_files(root))
