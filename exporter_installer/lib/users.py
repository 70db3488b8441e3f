from __future__ import annotations

import logging
import pwd

from .command import run_cmd

logger = logging.getLogger(__name__)

NOLOGIN_SHELL = "/usr/sbin/nologin"


def user_exists(username: str) -> bool:
    try:
        pwd.getpwnam(username)
    except KeyError:
        return False
    return True


def create_system_user(username: str, *, shell: str = NOLOGIN_SHELL, dry_run: bool = False) -> None:
    """Create a user with a home directory and login disabled."""

    run_cmd(["useradd", "-m", "-s", shell, username], dry_run=dry_run)


def chown_recursive(path: str, owner: str, group: str, *, dry_run: bool = False) -> None:
    run_cmd(["chown", "-R", f"{owner}:{group}", path], dry_run=dry_run)
