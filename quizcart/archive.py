"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

archive.py - Unpack a cartridge (zip) blob into an in-memory FileNode tree.

Nothing is written to disk except on the single retry path: when the
in-memory blob cannot be decompressed, the blob is persisted into the run's
workspace and the persisted copy is opened instead. A second failure raises
ExtractionError.

SECURITY:
- Skips member names that try to escape the archive root, with a warning
- Enforces file count and size limits (zip bombs); a breach fails the
  whole archive rather than dropping members
"""

from __future__ import annotations

import io
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional, Union

from quizcart.config import Settings
from quizcart.errors import ExtractionError
from quizcart.file_tree import SEPARATOR, FileNode, build_file_tree
from quizcart.icons import WARNING
from quizcart.workspace import Workspace

PERSISTED_ARCHIVE_NAME = "archive.imscc"

# Failures that mean "this is not a readable zip", as opposed to a limit breach
_ZIP_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    EOFError,
    OSError,
    NotImplementedError,
    RuntimeError,
)


@dataclass(frozen=True)
class ArchiveEntry:
    path: str
    data: bytes
    is_dir: bool


def escapes_root(member: str) -> bool:
    """
    Check whether a zip member name points outside the archive root.

    Args:
        member: Zip member name, as stored in the archive

    Returns:
        True for absolute paths (/x, \\x, C:x) and names with a '..' segment

    Any other name is kept, whatever characters it contains: members are
    only held in memory, never written out under their own names.
    """
    if member.startswith('/') or member.startswith('\\'):
        return True

    if len(member) >= 2 and member[1] == ':':
        return True

    return '..' in member.replace('\\', '/').split('/')


def _read_members(source: Union[IO[bytes], Path], settings: Settings) -> List[ArchiveEntry]:
    entries: List[ArchiveEntry] = []

    with zipfile.ZipFile(source, 'r') as zf:
        infos = zf.infolist()

        if not infos:
            raise ExtractionError("Extraction produced no entries; the archive may be invalid or empty")

        if len(infos) > settings.max_files:
            raise ExtractionError(f"Archive contains too many files: {len(infos)}")

        total_size = sum(info.file_size for info in infos)
        if total_size > settings.max_total_size:
            raise ExtractionError(
                f"Archive too large: {total_size / (1024*1024):.1f} MB "
                f"(max {settings.max_total_size / (1024*1024):.0f} MB)"
            )

        oversized = [info.filename for info in infos if info.file_size > settings.max_file_size]
        if oversized:
            raise ExtractionError(
                f"Archive member too large: {oversized[0]} "
                f"(max {settings.max_file_size / (1024*1024):.0f} MB per file)"
            )

        for info in infos:
            member = info.filename

            if escapes_root(member):
                print(f"[extract:warn] {WARNING} Skipping member outside the archive root: {member}")
                continue

            if member.endswith(SEPARATOR):
                entries.append(ArchiveEntry(path=member, data=b"", is_dir=True))
                continue

            entries.append(ArchiveEntry(path=member, data=zf.read(info), is_dir=False))

    return entries


def read_archive_entries(
    blob: bytes,
    workspace: Optional[Workspace] = None,
    settings: Optional[Settings] = None,
) -> List[ArchiveEntry]:
    """
    Decompress `blob` into a flat entry list.

    Retries once through a copy persisted in `workspace` when the in-memory
    blob cannot be read. Without a workspace there is no retry.

    Args:
        blob: Raw archive bytes
        workspace: Open workspace for the persisted retry copy, or None
        settings: Extraction limits (defaults apply when None)

    Returns:
        Entries in archive order, directory markers included

    Raises:
        ExtractionError: unreadable archive, no entries, or a limit breach
    """
    settings = settings or Settings()

    try:
        return _read_members(io.BytesIO(blob), settings)
    except _ZIP_ERRORS as e:
        if workspace is None:
            raise ExtractionError(f"Failed to extract archive: {e}") from e
        print(f"[extract:warn] {WARNING} In-memory extraction failed: {e}")
        first_error = e

    print("[extract] Retrying from a persisted copy...")
    try:
        persisted = workspace.write_bytes(PERSISTED_ARCHIVE_NAME, blob)
        return _read_members(persisted, settings)
    except _ZIP_ERRORS as e:
        raise ExtractionError(
            f"Failed to extract archive: {e} (in-memory attempt: {first_error})"
        ) from e


def extract_archive(
    blob: bytes,
    workspace: Optional[Workspace] = None,
    settings: Optional[Settings] = None,
) -> FileNode:
    """
    Unpack `blob` into a FileNode tree.

    Every file entry becomes a leaf; directory markers create no node.

    Raises:
        ExtractionError: see read_archive_entries
    """
    entries = read_archive_entries(blob, workspace, settings)
    files = [(entry.path, entry.data) for entry in entries if not entry.is_dir]

    root = build_file_tree(files)
    print(f"[extract] Unpacked {len(files)} files ({len(entries) - len(files)} directory entries)")
    return root
