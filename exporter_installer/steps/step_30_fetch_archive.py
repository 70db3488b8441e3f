from __future__ import annotations

import logging

from ..errors import EmptyDownloadError, ProvisioningError, TransportError
from ..lib.command import CommandError
from ..lib.fetch import download, is_nonempty_file
from ..pipeline import InstallContext, StepResult

logger = logging.getLogger(__name__)


class FetchArchiveStep:
    step_id = "30_fetch_archive"

    def run(self, ctx: InstallContext) -> StepResult:
        exp = ctx.exporter
        scratch = exp.scratch_dir

        logger.info("Creating temporary directory...")
        if ctx.dry_run:
            logger.info("Would create %s", scratch)
        else:
            try:
                scratch.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ProvisioningError(f"Failed to create temporary directory: {scratch}") from e

        logger.info("Downloading %s %s...", exp.display_name, exp.version)
        try:
            download(exp.download_url, exp.archive_path, dry_run=ctx.dry_run)
        except CommandError as e:
            raise TransportError(
                f"Failed to download {exp.display_name} from: {exp.download_url}. "
                "Check internet connection and URL validity"
            ) from e

        if not ctx.dry_run and not is_nonempty_file(exp.archive_path):
            raise EmptyDownloadError(f"Downloaded file is missing or empty: {exp.archive_path}")

        return StepResult.ok(self.step_id, f"{exp.display_name} downloaded successfully")
