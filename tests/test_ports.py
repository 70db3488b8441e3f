import unittest
from unittest.mock import patch

from exporter_installer.lib.command import CmdResult
from exporter_installer.lib.ports import (
    LsofObserver,
    NetstatObserver,
    PortObservation,
    SsObserver,
    observe_port,
    pick_observer,
)


class FakeObserver:
    def __init__(self, tool, available, listening=True):
        self.tool = tool
        self._available = available
        self._listening = listening
        self.observed = []

    def available(self):
        return self._available

    def observe(self, port):
        self.observed.append(port)
        return PortObservation(tool=self.tool, port=port, listening=self._listening)


def _result(argv, rc=0, out=""):
    return CmdResult(argv=list(argv), returncode=rc, stdout=out, stderr="")


class TestObserverFallback(unittest.TestCase):

    def test_first_available_observer_wins(self):
        first = FakeObserver("lsof", available=False)
        second = FakeObserver("netstat", available=True)
        third = FakeObserver("ss", available=True)

        obs = observe_port(9115, [first, second, third])

        self.assertEqual(obs.tool, "netstat")
        self.assertEqual(first.observed, [])
        self.assertEqual(second.observed, [9115])
        self.assertEqual(third.observed, [])

    def test_none_available(self):
        observers = [FakeObserver("lsof", False), FakeObserver("ss", False)]
        self.assertIsNone(pick_observer(observers))
        self.assertIsNone(observe_port(9100, observers))

    def test_default_order(self):
        with patch("exporter_installer.lib.command.shutil.which", side_effect=lambda n: "/bin/" + n):
            self.assertIsInstance(pick_observer(), LsofObserver)
        with patch("exporter_installer.lib.command.shutil.which",
                   side_effect=lambda n: None if n == "lsof" else "/bin/" + n):
            self.assertIsInstance(pick_observer(), NetstatObserver)
        with patch("exporter_installer.lib.command.shutil.which",
                   side_effect=lambda n: "/bin/ss" if n == "ss" else None):
            self.assertIsInstance(pick_observer(), SsObserver)


class TestObserverParsing(unittest.TestCase):

    def test_ss_matches_exact_port(self):
        out = (
            "State  Recv-Q Send-Q Local Address:Port Peer Address:Port\n"
            "LISTEN 0      4096   *:91150           *:*\n"
            "LISTEN 0      4096   0.0.0.0:22        0.0.0.0:*\n"
        )
        with patch("exporter_installer.lib.ports.run_cmd", return_value=_result(["ss"], out=out)):
            self.assertFalse(SsObserver().observe(9115).listening)

        out += "LISTEN 0      4096   *:9115            *:*\n"
        with patch("exporter_installer.lib.ports.run_cmd", return_value=_result(["ss"], out=out)):
            obs = SsObserver().observe(9115)
        self.assertTrue(obs.listening)
        self.assertIn("*:9115", obs.detail)

    def test_netstat_ipv6(self):
        out = "tcp6       0      0 :::9100                 :::*                    LISTEN      812/node_exporter\n"
        with patch("exporter_installer.lib.ports.run_cmd", return_value=_result(["netstat"], out=out)):
            self.assertTrue(NetstatObserver().observe(9100).listening)

    def test_lsof_no_match_exit_code(self):
        with patch("exporter_installer.lib.ports.run_cmd", return_value=_result(["lsof"], rc=1)) as run:
            self.assertFalse(LsofObserver().observe(9115).listening)
        run.assert_called_once_with(["lsof", "-nP", "-i", ":9115"], check=False)


if __name__ == "__main__":
    unittest.main()
