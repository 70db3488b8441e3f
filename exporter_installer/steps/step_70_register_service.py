from __future__ import annotations

import logging

from ..errors import ServiceError
from ..exporters import ExporterDescriptor
from ..lib.command import CommandError
from ..lib.systemd import ServiceRegistrar, render_unit
from ..pipeline import InstallContext, StepResult

logger = logging.getLogger(__name__)


def unit_text_for(exp: ExporterDescriptor) -> str:
    return render_unit(
        description=exp.display_name,
        user=exp.username,
        group=exp.group,
        exec_start=exp.exec_start(),
    )


class RegisterServiceStep:
    step_id = "70_register_service"

    def run(self, ctx: InstallContext) -> StepResult:
        exp = ctx.exporter
        unit = exp.unit_name
        logs_hint = f"Check logs with: journalctl -u {unit}"

        registrar = ServiceRegistrar(
            unit_name=unit,
            unit_path=exp.unit_path,
            unit_text=unit_text_for(exp),
            dry_run=ctx.dry_run,
        )

        logger.info("Creating systemd service file...")
        try:
            registrar.write_unit()
        except OSError as e:
            raise ServiceError(f"Failed to create systemd service file: {exp.unit_path}") from e
        logger.info("✓ Systemd service file created")

        transitions = (
            ("Reloading systemd daemon...", registrar.daemon_reload,
             "Failed to reload systemd daemon. Check systemctl permissions", "Systemd daemon reloaded"),
            (f"Enabling {unit}...", registrar.enable,
             f"Failed to enable {unit}", f"{unit} enabled"),
            (f"Starting {unit}...", registrar.start,
             f"Failed to start {unit}. Check service configuration and logs with: journalctl -u {unit}",
             f"{unit} started"),
        )
        for progress, action, failure, done in transitions:
            logger.info(progress)
            try:
                action()
            except CommandError as e:
                raise ServiceError(failure) from e
            logger.info("✓ %s", done)

        logger.info("Checking service status...")
        settings = ctx.settings
        if not registrar.verify_active(
            settle_seconds=settings.settle_seconds,
            timeout=settings.activation_timeout,
            interval=settings.poll_interval,
        ):
            raise ServiceError(f"{unit} is not running. {logs_hint}")

        return StepResult.ok(self.step_id, f"{unit} is running")
