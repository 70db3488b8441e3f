from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..lib.ports import DEFAULT_OBSERVERS, PortObserver, observe_port
from ..lib.systemd import show_status
from ..pipeline import InstallContext, StepResult

logger = logging.getLogger(__name__)


class VerifyPortStep:
    step_id = "80_verify_port"

    def __init__(self, observers: Optional[Sequence[PortObserver]] = None) -> None:
        self.observers = DEFAULT_OBSERVERS if observers is None else observers

    def run(self, ctx: InstallContext) -> StepResult:
        exp = ctx.exporter
        if ctx.dry_run:
            return StepResult.skipped(self.step_id)

        status = show_status(exp.unit_name)
        if status.ok:
            logger.info("Service status:\n%s", status.stdout.rstrip())
        else:
            logger.warning("Warning: Could not display service status, but service appears to be running")

        logger.info("Checking listening ports...")
        observation = observe_port(exp.port, self.observers)
        tools = ", ".join(o.tool for o in self.observers)
        if observation is None:
            return StepResult.warning(self.step_id, f"No port checking tools available ({tools})")
        if not observation.listening:
            return StepResult.warning(
                self.step_id,
                f"Port {exp.port} doesn't appear to be in use yet "
                f"(checked with {observation.tool}; service may still be starting)",
            )
        if observation.detail:
            logger.debug("%s output:\n%s", observation.tool, observation.detail)
        return StepResult.ok(self.step_id, f"{exp.display_name} is listening on port {exp.port}")
