from __future__ import annotations

import logging

from ..errors import ExtractionError, LayoutError, ProvisioningError
from ..lib.archive import extract_tarball, find_extracted_dir, make_executable, move_contents
from ..lib.command import CommandError
from ..pipeline import InstallContext, StepResult

logger = logging.getLogger(__name__)


class InstallFilesStep:
    step_id = "40_install_files"

    def run(self, ctx: InstallContext) -> StepResult:
        exp = ctx.exporter
        install_dir = exp.install_dir

        if ctx.dry_run:
            logger.info("Would extract %s and move %s* into %s", exp.archive_path, exp.extracted_prefix, install_dir)
            return StepResult.ok(self.step_id, f"{exp.display_name} files would be installed to {install_dir}")

        logger.info("Creating destination directory...")
        try:
            install_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProvisioningError(f"Failed to create destination directory: {install_dir}") from e

        logger.info("Extracting %s...", exp.display_name)
        try:
            extract_tarball(exp.archive_path, exp.scratch_dir)
        except CommandError as e:
            raise ExtractionError(
                f"Failed to extract tarball: {exp.archive_path}. File may be corrupted"
            ) from e

        extracted = find_extracted_dir(exp.scratch_dir, exp.extracted_prefix)
        if extracted is None:
            raise LayoutError(
                f"Could not find extracted {exp.display_name} directory "
                f"({exp.extracted_prefix}*) in {exp.scratch_dir}"
            )
        logger.info("✓ Found extracted directory: %s", extracted)

        logger.info("Moving %s files...", exp.display_name)
        try:
            # The sample config shipped in the release never replaces ours.
            moved = move_contents(extracted, install_dir, skip=[exp.config_name] if exp.config_name else [])
        except OSError as e:
            raise ProvisioningError(f"Failed to move files from {extracted} to {install_dir}") from e
        logger.debug("Moved %s", moved)

        binary = exp.binary_path
        if not binary.is_file():
            raise LayoutError(f"{exp.display_name} binary not found at: {binary}")

        try:
            make_executable(binary)
        except OSError as e:
            raise ProvisioningError(f"Failed to make {exp.binary_name} binary executable") from e

        return StepResult.ok(self.step_id, f"{exp.display_name} files moved and made executable")
