"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

workspace.py - Scoped, named scratch directory for one conversion run.

The workspace always lives at <root>/<name>. Entering it destroys whatever a
previous run left there; leaving it removes the directory on every exit
path, including exceptions raised inside the block.

    with Workspace(root, "quizcart_work") as ws:
        copy = ws.write_bytes("archive.imscc", blob)
"""

from __future__ import annotations

import shutil
from pathlib import Path

from quizcart.icons import WARNING


class Workspace:
    def __init__(self, root: Path, name: str = "quizcart_work"):
        self.root = Path(root)
        self.name = name
        self.path = self.root / name
        self._active = False

    def __enter__(self) -> "Workspace":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def open(self) -> None:
        if self.path.exists():
            print(f"[workspace] Clearing previous workspace: {self.path}")
            shutil.rmtree(self.path)
        self.path.mkdir(parents=True)
        self._active = True

    def release(self) -> None:
        if not self._active:
            return
        self._active = False
        if self.path.exists():
            try:
                shutil.rmtree(self.path)
            except OSError as e:
                print(f"[workspace:warn] {WARNING} Could not remove workspace {self.path}: {e}")

    @property
    def active(self) -> bool:
        return self._active

    def write_bytes(self, name: str, data: bytes) -> Path:
        """Persist `data` as a file directly inside the workspace."""
        if not self._active:
            raise RuntimeError("Workspace is not open")
        target = self.path / Path(name).name
        target.write_bytes(data)
        return target

