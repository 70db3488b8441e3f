from __future__ import annotations

import logging

from ..errors import ProvisioningError
from ..lib.command import CommandError
from ..lib.users import create_system_user, user_exists
from ..pipeline import InstallContext, StepResult

logger = logging.getLogger(__name__)


class ProvisionUserStep:
    step_id = "20_provision_user"

    def run(self, ctx: InstallContext) -> StepResult:
        username = ctx.exporter.username
        logger.info("Checking/creating %s user...", username)

        if user_exists(username):
            return StepResult.skipped(self.step_id, f"User {username} already exists")

        try:
            create_system_user(username, dry_run=ctx.dry_run)
        except CommandError as e:
            raise ProvisioningError(
                f"Failed to create user '{username}'. Check if useradd command has proper permissions"
            ) from e

        return StepResult.ok(self.step_id, f"User {username} created with disabled login")
