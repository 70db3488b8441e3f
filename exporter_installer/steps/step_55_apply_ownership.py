from __future__ import annotations

import logging

from ..errors import ProvisioningError
from ..lib.command import CommandError
from ..lib.users import chown_recursive
from ..pipeline import InstallContext, StepResult

logger = logging.getLogger(__name__)


class ApplyOwnershipStep:
    step_id = "55_apply_ownership"

    def run(self, ctx: InstallContext) -> StepResult:
        exp = ctx.exporter
        logger.info("Setting file ownership...")
        try:
            chown_recursive(str(exp.install_dir), exp.username, exp.group, dry_run=ctx.dry_run)
        except CommandError as e:
            raise ProvisioningError(
                f"Failed to change ownership of {exp.install_dir} to {exp.username} user"
            ) from e
        return StepResult.ok(self.step_id, f"File ownership set to {exp.username} user")
