from __future__ import annotations

import logging

from ..errors import ProvisioningError
from ..lib.templates import dump_yaml_config
from ..pipeline import InstallContext, StepResult

logger = logging.getLogger(__name__)


class MaterializeConfigStep:
    step_id = "50_materialize_config"

    def run(self, ctx: InstallContext) -> StepResult:
        exp = ctx.exporter
        path = exp.config_path
        if path is None or exp.default_config is None:
            return StepResult.skipped(self.step_id)

        # Existing config is user-owned; never overwrite it.
        if path.exists():
            return StepResult.skipped(self.step_id, f"Configuration file already exists: {path}")

        logger.info("Configuration file not found at %s, creating basic configuration file...", path)
        contents = dump_yaml_config(exp.default_config)
        if ctx.dry_run:
            logger.info("Would write %s", path)
            return StepResult.ok(self.step_id)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(contents, encoding="utf-8")
        except OSError as e:
            raise ProvisioningError(f"Failed to create basic configuration file: {path}") from e

        return StepResult.ok(self.step_id, "Basic configuration file created")
