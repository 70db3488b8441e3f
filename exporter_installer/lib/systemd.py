from __future__ import annotations

import enum
import logging
import shlex
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .command import CmdResult, run_cmd
from .templates import render_template

logger = logging.getLogger(__name__)

UNIT_TEMPLATE = "exporter.service.j2"
RESTART_SEC = 5


def systemctl(*args: str, check: bool = True, dry_run: bool = False) -> CmdResult:
    return run_cmd(["systemctl", *args], check=check, dry_run=dry_run)


def is_active(unit: str, *, dry_run: bool = False) -> bool:
    return systemctl("is-active", "--quiet", unit, check=False, dry_run=dry_run).ok


def show_status(unit: str, *, dry_run: bool = False) -> CmdResult:
    return systemctl("status", unit, "--no-pager", check=False, dry_run=dry_run)


def render_unit(*, description: str, user: str, group: str, exec_start: Sequence[str]) -> str:
    return render_template(
        UNIT_TEMPLATE,
        description=description,
        user=user,
        group=group,
        exec_start=" ".join(shlex.quote(a) for a in exec_start),
        restart_sec=RESTART_SEC,
    )


def wait_until_active(
    unit: str,
    *,
    settle_seconds: float,
    timeout: float,
    interval: float,
    dry_run: bool = False,
    sleep: Optional[Callable[[float], None]] = None,
) -> bool:
    """Sleep settle_seconds, then poll is-active until it succeeds or timeout elapses.

    timeout=0 means a single check after the settle delay.
    """

    if dry_run:
        return True

    sleep = sleep or time.sleep
    sleep(settle_seconds)
    waited = 0.0
    while True:
        if is_active(unit):
            return True
        if waited >= timeout:
            return False
        step = min(interval, timeout - waited) if interval > 0 else timeout - waited
        sleep(step)
        waited += step


class RegistrationState(enum.IntEnum):
    UNREGISTERED = 0
    UNIT_WRITTEN = 1
    DAEMON_RELOADED = 2
    ENABLED = 3
    STARTED = 4
    VERIFIED_ACTIVE = 5


class TransitionError(RuntimeError):
    pass


class ServiceRegistrar:
    """Drives one unit through write -> reload -> enable -> start -> verify.

    Transitions only move forward, one state at a time. Any failure raises
    and leaves the registrar in the last state it reached; nothing is undone.
    """

    def __init__(
        self,
        *,
        unit_name: str,
        unit_path: Path,
        unit_text: str,
        dry_run: bool = False,
    ) -> None:
        self.unit_name = unit_name
        self.unit_path = Path(unit_path)
        self.unit_text = unit_text
        self.dry_run = dry_run
        self.state = RegistrationState.UNREGISTERED
        self.history: List[RegistrationState] = [self.state]

    def _advance(self, new: RegistrationState) -> None:
        self.state = new
        self.history.append(new)
        logger.debug("%s -> %s", self.unit_name, new.name)

    def write_unit(self) -> None:
        self._require(RegistrationState.UNREGISTERED)
        if self.dry_run:
            logger.info("Would write %s", self.unit_path)
        else:
            self.unit_path.parent.mkdir(parents=True, exist_ok=True)
            self.unit_path.write_text(self.unit_text, encoding="utf-8")
        self._advance(RegistrationState.UNIT_WRITTEN)

    def daemon_reload(self) -> None:
        self._require(RegistrationState.UNIT_WRITTEN)
        systemctl("daemon-reload", dry_run=self.dry_run)
        self._advance(RegistrationState.DAEMON_RELOADED)

    def enable(self) -> None:
        self._require(RegistrationState.DAEMON_RELOADED)
        systemctl("enable", self.unit_name, dry_run=self.dry_run)
        self._advance(RegistrationState.ENABLED)

    def start(self) -> None:
        self._require(RegistrationState.ENABLED)
        systemctl("start", self.unit_name, dry_run=self.dry_run)
        self._advance(RegistrationState.STARTED)

    def verify_active(self, *, settle_seconds: float, timeout: float, interval: float) -> bool:
        self._require(RegistrationState.STARTED)
        active = wait_until_active(
            self.unit_name,
            settle_seconds=settle_seconds,
            timeout=timeout,
            interval=interval,
            dry_run=self.dry_run,
        )
        if active:
            self._advance(RegistrationState.VERIFIED_ACTIVE)
        return active

    def _require(self, expected: RegistrationState) -> None:
        if self.state != expected:
            raise TransitionError(
                f"{self.unit_name}: step requires state {expected.name}, current state is {self.state.name}"
            )
