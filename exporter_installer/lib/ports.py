from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .command import have_command, run_cmd

logger = logging.getLogger(__name__)


class PortObserver(Protocol):
    """Something that can tell whether a local TCP port is being listened on."""

    tool: str

    def available(self) -> bool:
        ...

    def observe(self, port: int) -> "PortObservation":
        ...


@dataclass(frozen=True)
class PortObservation:
    tool: str
    port: int
    listening: bool
    detail: str = ""


def _port_lines(output: str, port: int) -> List[str]:
    needle = f":{port}"
    return [
        line for line in output.splitlines()
        if any(tok == needle or tok.endswith(needle) for tok in line.split())
    ]


class _CommandObserver:
    tool = ""

    def available(self) -> bool:
        return have_command(self.tool)


class LsofObserver(_CommandObserver):
    tool = "lsof"

    def observe(self, port: int) -> PortObservation:
        r = run_cmd(["lsof", "-nP", "-i", f":{port}"], check=False)
        # lsof exits 1 when nothing matches
        out = r.stdout.strip()
        return PortObservation(tool=self.tool, port=port, listening=r.ok and bool(out), detail=out)


class NetstatObserver(_CommandObserver):
    tool = "netstat"

    def observe(self, port: int) -> PortObservation:
        r = run_cmd(["netstat", "-tlnp"], check=False)
        lines = _port_lines(r.stdout, port)
        return PortObservation(tool=self.tool, port=port, listening=bool(lines), detail="\n".join(lines))


class SsObserver(_CommandObserver):
    tool = "ss"

    def observe(self, port: int) -> PortObservation:
        r = run_cmd(["ss", "-tlnp"], check=False)
        lines = _port_lines(r.stdout, port)
        return PortObservation(tool=self.tool, port=port, listening=bool(lines), detail="\n".join(lines))


DEFAULT_OBSERVERS: Sequence[PortObserver] = (LsofObserver(), NetstatObserver(), SsObserver())


def pick_observer(observers: Sequence[PortObserver] = DEFAULT_OBSERVERS) -> Optional[PortObserver]:
    for obs in observers:
        if obs.available():
            return obs
    return None


def observe_port(
    port: int,
    observers: Sequence[PortObserver] = DEFAULT_OBSERVERS,
) -> Optional[PortObservation]:
    """Check port with the first available tool. None when no tool is installed."""

    obs = pick_observer(observers)
    if obs is None:
        return None
    logger.debug("Checking port %s with %s", port, obs.tool)
    return obs.observe(port)
