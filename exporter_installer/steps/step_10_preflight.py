from __future__ import annotations

import logging
import os

from ..errors import PreflightError
from ..lib.command import have_command
from ..pipeline import InstallContext, StepResult

logger = logging.getLogger(__name__)


class PreflightStep:
    step_id = "10_preflight"

    def run(self, ctx: InstallContext) -> StepResult:
        logger.info("Checking root privileges...")
        if os.geteuid() != 0:
            if not ctx.dry_run:
                raise PreflightError(
                    "This installer must be run as root. Please run with sudo or as root user"
                )
            logger.warning("Warning: not running as root (ignored for --dry-run)")
        else:
            logger.info("✓ Root privileges confirmed")

        logger.info("Checking required commands...")
        for cmd in ctx.exporter.required_commands():
            if not have_command(cmd):
                raise PreflightError(f"Required command '{cmd}' not found. Please install it first")

        return StepResult.ok(self.step_id, "All required commands are available")
