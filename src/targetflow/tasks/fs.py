# tasks/fs.py
# Idempotent artifact cleanup. Every helper can run any number of times and
# leaves the same state behind.
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, List


def delete_directory(path: str | Path) -> None:
    """Remove a directory tree. Absent paths are fine."""
    p = Path(path)
    if p.is_symlink():
        p.unlink()
    elif p.is_dir():
        shutil.rmtree(p)
    elif p.exists():
        raise NotADirectoryError(f"Not a directory: {p}")


def ensure_clean_directory(path: str | Path) -> Path:
    """Create `path` if missing, otherwise delete everything inside it."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    for child in p.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
    return p


def glob_directories(root: str | Path, *patterns: str) -> List[Path]:
    """Directories under `root` matching any pattern, e.g. ("**/bin", "**/obj")."""
    base = Path(root)
    if not base.is_dir():
        return []
    found = {p for pattern in patterns for p in base.glob(pattern) if p.is_dir()}
    return sorted(found)


def glob_files(root: str | Path, *patterns: str) -> List[Path]:
    """Files under `root` matching any pattern, e.g. ("*.nupkg",)."""
    base = Path(root)
    if not base.is_dir():
        return []
    found = {p for pattern in patterns for p in base.glob(pattern) if p.is_file()}
    return sorted(found)


def delete_directories(paths: Iterable[str | Path]) -> None:
    # nested matches: a parent may already have taken its children with it
    for p in sorted((Path(x) for x in paths), key=lambda x: len(x.parts)):
        delete_directory(p)
