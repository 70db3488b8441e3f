from __future__ import annotations

import logging
import shutil

from ..pipeline import InstallContext, StepResult

logger = logging.getLogger(__name__)


class CleanupScratchStep:
    step_id = "60_cleanup_scratch"

    def run(self, ctx: InstallContext) -> StepResult:
        scratch = ctx.exporter.scratch_dir
        logger.info("Cleaning up temporary files...")
        if ctx.dry_run:
            logger.info("Would remove %s", scratch)
            return StepResult.ok(self.step_id)

        try:
            shutil.rmtree(scratch)
        except FileNotFoundError:
            pass
        except OSError as e:
            return StepResult.warning(self.step_id, f"Failed to remove temporary directory: {scratch} ({e})")

        logger.info("✓ Temporary files cleaned up")
        return StepResult.ok(self.step_id, f"{ctx.exporter.display_name} installed to {ctx.exporter.install_dir}")
