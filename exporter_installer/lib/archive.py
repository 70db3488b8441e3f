from __future__ import annotations

import logging
import shutil
import stat
from pathlib import Path
from typing import Iterable, List, Optional

from .command import run_cmd

logger = logging.getLogger(__name__)


def extract_tarball(archive: Path, dest_dir: Path, *, dry_run: bool = False) -> None:
    run_cmd(["tar", "-xzf", str(archive), "-C", str(dest_dir)], dry_run=dry_run)


def find_extracted_dir(parent: Path, prefix: str) -> Optional[Path]:
    """Return the first (lexical) direct subdirectory of parent starting with prefix."""

    matches: List[Path] = sorted(
        p for p in parent.iterdir() if p.is_dir() and p.name.startswith(prefix)
    )
    if len(matches) > 1:
        logger.debug("Several extracted directories match %s*: %s", prefix, [m.name for m in matches])
    return matches[0] if matches else None


def move_contents(src_dir: Path, dest_dir: Path, *, skip: Iterable[str] = ()) -> List[str]:
    """Move every entry of src_dir into dest_dir, replacing same-named entries.

    Entries named in skip stay where they are.
    """

    skipped = set(skip)
    moved: List[str] = []
    for item in sorted(src_dir.iterdir()):
        if item.name in skipped:
            continue
        target = dest_dir / item.name
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        elif target.exists() or target.is_symlink():
            target.unlink()
        shutil.move(str(item), str(target))
        moved.append(item.name)
    return moved


def make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
