from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

REQUIRED_COMMANDS: Tuple[str, ...] = ("curl", "tar", "systemctl", "useradd", "chown")

SYSTEMD_UNIT_DIR = "/etc/systemd/system"


@dataclass(frozen=True)
class ExporterDescriptor:
    """Everything needed to install one exporter. Immutable; built-ins live in EXPORTERS."""

    name: str
    display_name: str
    version: str
    repo: str
    binary_name: str
    username: str
    install_subdir: str
    port: int
    config_name: Optional[str] = None
    default_config: Optional[Mapping[str, Any]] = None
    extra_commands: Tuple[str, ...] = ()
    arch: str = "linux-amd64"
    home_root: str = "/home"
    scratch_root: str = "/tmp"
    unit_dir: str = SYSTEMD_UNIT_DIR
    download_url_override: Optional[str] = None
    install_dir_override: Optional[str] = None
    scratch_dir_override: Optional[str] = None
    metrics_path: str = "/metrics"
    notes: Tuple[str, ...] = ()
    listen_flag: bool = False

    # --- release artifact -------------------------------------------------

    @property
    def extracted_prefix(self) -> str:
        return f"{self.binary_name}-"

    @property
    def release_dir_name(self) -> str:
        return f"{self.binary_name}-{self.version}.{self.arch}"

    @property
    def download_url(self) -> str:
        if self.download_url_override:
            return self.download_url_override
        return (
            f"https://github.com/{self.repo}/releases/download/"
            f"v{self.version}/{self.release_dir_name}.tar.gz"
        )

    @property
    def archive_name(self) -> str:
        return f"{self.binary_name}.tar.gz"

    # --- filesystem layout ------------------------------------------------

    @property
    def home_dir(self) -> Path:
        return Path(self.home_root) / self.username

    @property
    def install_dir(self) -> Path:
        if self.install_dir_override:
            return Path(self.install_dir_override)
        return self.home_dir / self.install_subdir

    @property
    def scratch_dir(self) -> Path:
        if self.scratch_dir_override:
            return Path(self.scratch_dir_override)
        return Path(self.scratch_root) / f"{self.name}_tmp"

    @property
    def archive_path(self) -> Path:
        return self.scratch_dir / self.archive_name

    @property
    def binary_path(self) -> Path:
        return self.install_dir / self.binary_name

    @property
    def config_path(self) -> Optional[Path]:
        if not self.config_name:
            return None
        return self.install_dir / self.config_name

    # --- systemd ------------------------------------------------------------

    @property
    def unit_name(self) -> str:
        return f"{self.name}.service"

    @property
    def unit_path(self) -> Path:
        return Path(self.unit_dir) / self.unit_name

    @property
    def group(self) -> str:
        return self.username

    def exec_start(self) -> List[str]:
        argv = [str(self.binary_path)]
        config_path = self.config_path
        if config_path is not None:
            argv.append(f"--config.file={config_path}")
        if self.listen_flag:
            argv.append(f"--web.listen-address=:{self.port}")
        return argv

    def required_commands(self) -> List[str]:
        cmds = list(REQUIRED_COMMANDS)
        for c in self.extra_commands:
            if c not in cmds:
                cmds.append(c)
        return cmds

    # --- overrides ------------------------------------------------------------

    def with_overrides(self, overrides: Mapping[str, Any]) -> "ExporterDescriptor":
        """Return a copy with user-facing fields replaced.

        Changing ``version`` re-derives the download URL unless ``download_url``
        is given too.
        """

        mapping = dict(OVERRIDE_FIELDS)
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in mapping:
                raise KeyError(key)
            attr = mapping[key]
            if attr == "port":
                value = int(value)
                # node_exporter listens on 9100 unless told otherwise
                changes["listen_flag"] = True
            elif attr == "extra_commands":
                value = tuple(str(v) for v in value)
            elif value is not None and attr != "default_config":
                value = str(value)
            changes[attr] = value
        return replace(self, **changes)


OVERRIDE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("version", "version"),
    ("arch", "arch"),
    ("port", "port"),
    ("username", "username"),
    ("home_root", "home_root"),
    ("scratch_root", "scratch_root"),
    ("unit_dir", "unit_dir"),
    ("download_url", "download_url_override"),
    ("install_dir", "install_dir_override"),
    ("scratch_dir", "scratch_dir_override"),
    ("default_config", "default_config"),
    ("extra_commands", "extra_commands"),
)


BLACKBOX_DEFAULT_CONFIG: Mapping[str, Any] = {
    "modules": {
        "http_2xx": {
            "prober": "http",
            "http": {
                "valid_http_versions": ["HTTP/1.1", "HTTP/2.0"],
                "valid_status_codes": [],
                "method": "GET",
                "follow_redirects": True,
            },
        },
        "http_post_2xx": {
            "prober": "http",
            "http": {"method": "POST"},
        },
        "tcp_connect": {"prober": "tcp"},
        "ping": {"prober": "icmp"},
    }
}


BLACKBOX = ExporterDescriptor(
    name="blackbox",
    display_name="Blackbox Exporter",
    version="0.27.0",
    repo="prometheus/blackbox_exporter",
    binary_name="blackbox_exporter",
    username="blackbox",
    install_subdir="blackbox",
    port=9115,
    config_name="blackbox.yml",
    default_config=BLACKBOX_DEFAULT_CONFIG,
    listen_flag=True,
    notes=(
        "Example probe URL:",
        "   http://localhost:9115/probe?module=http_2xx&target=https://yahoo.com",
    ),
)

NODE_EXPORTER = ExporterDescriptor(
    name="node-exporter",
    display_name="Node Exporter",
    version="1.9.1",
    repo="prometheus/node_exporter",
    binary_name="node_exporter",
    username="node-exporter",
    install_subdir="node-exporter",
    port=9100,
    extra_commands=("lsof",),
)

EXPORTERS: Dict[str, ExporterDescriptor] = {d.name: d for d in (BLACKBOX, NODE_EXPORTER)}
