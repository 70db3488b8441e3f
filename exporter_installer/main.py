from __future__ import annotations

import argparse
import logging
import os
import sys
import traceback
from typing import List, Optional

from .config import InstallerConfig, load_config
from .errors import ConfigError, InstallError
from .exporters import ExporterDescriptor
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import InstallContext, PipelineResult, run_pipeline
from .steps import (
    ApplyOwnershipStep,
    CleanupScratchStep,
    FetchArchiveStep,
    InstallFilesStep,
    MaterializeConfigStep,
    PreflightStep,
    ProvisionUserStep,
    RegisterServiceStep,
    VerifyPortStep,
)
from .steps.step_70_register_service import unit_text_for

logger = logging.getLogger(__name__)


def build_steps():
    return [
        PreflightStep(),
        ProvisionUserStep(),
        FetchArchiveStep(),
        InstallFilesStep(),
        MaterializeConfigStep(),
        ApplyOwnershipStep(),
        CleanupScratchStep(),
        RegisterServiceStep(),
        VerifyPortStep(),
    ]


def install_exporter(
    exporter: ExporterDescriptor,
    cfg: InstallerConfig,
    *,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run the full install pipeline for one exporter."""

    logger.info("Starting %s installation...", exporter.display_name)
    ctx = InstallContext(exporter=exporter, settings=cfg.settings)
    result = run_pipeline(ctx=ctx, steps=build_steps(), start_at=start_at, stop_after=stop_after)
    log_summary(exporter, result)
    return result


def log_summary(exp: ExporterDescriptor, result: PipelineResult) -> None:
    base = f"http://localhost:{exp.port}"
    lines = [
        "",
        f"{exp.display_name} installation completed successfully!",
        f"   - Service: {exp.unit_name}",
        f"   - Status: systemctl status {exp.unit_name}",
        f"   - Logs: journalctl -u {exp.unit_name}",
        f"   - Port: {exp.port}",
        f"   - Test URL: {base}",
        f"   - Metrics: {base}{exp.metrics_path}",
    ]
    if exp.config_path is not None:
        lines.append(f"   - Configuration: {exp.config_path}")
    if result.warnings:
        lines.append(f"   - Warnings: {len(result.warnings)}")
    lines.append("")
    lines.extend(exp.notes)
    for line in lines:
        logger.info(line)


def format_error(e: InstallError) -> str:
    """Uniform fatal diagnostic: message, failing step and raise site."""

    where = "unknown"
    tb = traceback.extract_tb(e.__traceback__)
    if tb:
        frame = tb[-1]
        where = f"{os.path.basename(frame.filename)}:{frame.lineno}"
    step = e.step_id or "-"
    return f"ERROR: {e.message} (step: {step}, at {where})"


def _cmd_list(cfg: InstallerConfig, args: argparse.Namespace) -> int:
    for name in sorted(cfg.exporters):
        exp = cfg.exporters[name]
        print(f"{name:<15} {exp.display_name:<20} v{exp.version:<8} port {exp.port:<6} {exp.install_dir}")
    return 0


def _cmd_render_unit(cfg: InstallerConfig, args: argparse.Namespace) -> int:
    exp = cfg.exporter(args.exporter)
    sys.stdout.write(unit_text_for(exp))
    return 0


def _cmd_install(cfg: InstallerConfig, args: argparse.Namespace) -> int:
    if args.all:
        names: List[str] = sorted(cfg.exporters)
    elif args.exporters:
        names = list(args.exporters)
    else:
        raise InstallError("Name at least one exporter to install, or pass --all")

    exporters = [cfg.exporter(n) for n in names]
    for exp in exporters:
        install_exporter(exp, cfg, start_at=args.start_at, stop_after=args.stop_after)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="exporter-installer",
        description="Install Prometheus exporters as systemd services.",
    )
    p.add_argument("--config", default=None, help="YAML file with settings/exporter overrides")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("-v", "--verbose", action="store_true", help="Show command output on the console")

    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("install", help="Install and start one or more exporters")
    sp.add_argument("exporters", nargs="*", help="Exporter names (see 'list')")
    sp.add_argument("--all", action="store_true", help="Install every known exporter")
    sp.add_argument("--dry-run", action="store_true", help="Log commands without changing the host")
    sp.add_argument("--settle-seconds", type=float, default=None,
                    help="Delay before the first activation check")
    sp.add_argument("--activation-timeout", type=float, default=None,
                    help="Keep polling for an active unit this long after the settle delay (0 = one check)")
    sp.add_argument("--start-at", default=None, help="Start at step_id (e.g. 70_register_service)")
    sp.add_argument("--stop-after", default=None, help="Stop after step_id")
    sp.set_defaults(func=_cmd_install)

    sp = sub.add_parser("list", help="List known exporters")
    sp.set_defaults(func=_cmd_list)

    sp = sub.add_parser("render-unit", help="Print the systemd unit for an exporter")
    sp.add_argument("exporter")
    sp.set_defaults(func=_cmd_render_unit)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.command == "install":
            configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)
        cfg = load_config(args.config)
        if args.command == "install":
            for flag, value in (
                ("--settle-seconds", args.settle_seconds),
                ("--activation-timeout", args.activation_timeout),
            ):
                if value is not None and value < 0:
                    raise ConfigError(f"{flag} must not be negative, got {value}")
            settings = cfg.settings.with_overrides(
                settle_seconds=args.settle_seconds,
                activation_timeout=args.activation_timeout,
                dry_run=bool(args.dry_run),
            )
            cfg = InstallerConfig(settings=settings, exporters=cfg.exporters)
        return args.func(cfg, args)
    except InstallError as e:
        logger.debug("Installer failed", exc_info=True)
        print(format_error(e), file=sys.stderr)
        if args.command == "install":
            print("Installation stopped due to error.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
