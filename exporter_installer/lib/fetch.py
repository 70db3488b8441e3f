from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def download(url: str, dest: Path, *, dry_run: bool = False) -> None:
    """Download url to dest with curl, following redirects.

    curl exits non-zero on transport errors; HTTP error pages are caught by
    --fail so they are not saved as the archive.
    """

    run_cmd(["curl", "-L", "--fail", "--silent", "--show-error", url, "-o", str(dest)], dry_run=dry_run)


def is_nonempty_file(path: Path) -> bool:
    return path.is_file() and path.stat().st_size > 0
