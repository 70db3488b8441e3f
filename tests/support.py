"""Fake host used by the pipeline tests.

FakeHost stands in for subprocess.run: curl copies a prepared tarball,
tar really extracts (via tarfile), useradd/chown/systemctl are recorded.
"""

import io
import shutil
import subprocess
import tarfile
from contextlib import ExitStack
from pathlib import Path
from unittest.mock import patch

from exporter_installer.config import Settings
from exporter_installer.exporters import ExporterDescriptor

ALL_TOOLS = {"curl", "tar", "systemctl", "useradd", "chown", "lsof", "netstat", "ss"}


def make_release_tarball(path: Path, top_dir: str, binary_name: str, extra=None) -> Path:
    """Write a release-like tar.gz with <top_dir>/<binary_name> and a few extras."""

    files = {
        f"{top_dir}/{binary_name}": b"#!/bin/sh\necho fake exporter\n",
        f"{top_dir}/LICENSE": b"Apache License 2.0\n",
        f"{top_dir}/NOTICE": b"notice\n",
    }
    files.update(extra or {})
    with tarfile.open(path, "w:gz") as tar:
        dir_info = tarfile.TarInfo(top_dir)
        dir_info.type = tarfile.DIRTYPE
        dir_info.mode = 0o755
        tar.addfile(dir_info)
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return path


def sandboxed(exp: ExporterDescriptor, root: Path) -> ExporterDescriptor:
    """Point every host path of a descriptor into root."""

    return exp.with_overrides(
        {
            "home_root": str(root / "home"),
            "scratch_root": str(root / "tmp"),
            "unit_dir": str(root / "etc" / "systemd" / "system"),
        }
    )


def fast_settings(**kw) -> Settings:
    values = dict(settle_seconds=0.0, activation_timeout=0.0, poll_interval=0.0)
    values.update(kw)
    return Settings(**values)


class FakeHost:
    def __init__(self, tarball=None, *, users=(), tools=ALL_TOOLS, active=True,
                 download="ok", listening_port=None):
        self.tarball = tarball
        self.users = set(users)
        self.tools = set(tools)
        self.active = active
        self.download = download
        self.listening_port = listening_port
        self.calls = []

    # --- helpers ---------------------------------------------------------

    def commands(self, name):
        return [c for c in self.calls if c[0] == name]

    def which(self, name):
        return f"/usr/bin/{name}" if name in self.tools else None

    def user_exists(self, name):
        return name in self.users

    def patches(self):
        stack = ExitStack()
        stack.enter_context(patch("exporter_installer.lib.command.subprocess.run", side_effect=self.run))
        stack.enter_context(patch("exporter_installer.lib.command.shutil.which", side_effect=self.which))
        stack.enter_context(
            patch("exporter_installer.steps.step_20_provision_user.user_exists", side_effect=self.user_exists)
        )
        stack.enter_context(patch("os.geteuid", return_value=0))
        stack.enter_context(patch("exporter_installer.lib.systemd.time.sleep"))
        return stack

    # --- subprocess.run stand-in -------------------------------------------

    def run(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append(argv)
        handler = getattr(self, "_" + argv[0].replace("-", "_"), None)
        rc, out = handler(argv) if handler else (0, "")
        return subprocess.CompletedProcess(argv, rc, stdout=out, stderr="" if rc == 0 else f"{argv[0]} failed")

    def _curl(self, argv):
        dest = Path(argv[argv.index("-o") + 1])
        if self.download == "fail":
            return 6, ""
        if self.download == "empty":
            dest.write_bytes(b"")
        elif self.download == "ok":
            shutil.copyfile(self.tarball, dest)
        return 0, ""

    def _tar(self, argv):
        archive = Path(argv[argv.index("-xzf") + 1])
        dest = Path(argv[argv.index("-C") + 1])
        try:
            with tarfile.open(archive, "r:gz") as tar:
                if hasattr(tarfile, "data_filter"):
                    tar.extractall(dest, filter="data")
                else:
                    tar.extractall(dest)
        except tarfile.TarError:
            return 2, ""
        return 0, ""

    def _useradd(self, argv):
        self.users.add(argv[-1])
        return 0, ""

    def _systemctl(self, argv):
        if argv[1] == "is-active":
            return (0 if self.active else 3), ""
        if argv[1] == "status":
            return 0, f"● {argv[2]}\n   Active: active (running)\n"
        return 0, ""

    def _lsof(self, argv):
        port = argv[-1].lstrip(":")
        if self.listening_port is not None and str(self.listening_port) == port:
            return 0, f"COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME\nexporter 42 u 3u IPv6 1 0t0 TCP *:{port} (LISTEN)\n"
        return 1, ""

    def _ss(self, argv):
        out = "State Recv-Q Send-Q Local Address:Port Peer Address:Port\n"
        if self.listening_port is not None:
            out += f"LISTEN 0 4096 *:{self.listening_port} *:*\n"
        return 0, out

    _netstat = _ss
