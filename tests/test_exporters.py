import unittest

from exporter_installer.exporters import BLACKBOX, EXPORTERS, NODE_EXPORTER


class TestDescriptors(unittest.TestCase):

    def test_blackbox_release_and_paths(self):
        self.assertEqual(
            BLACKBOX.download_url,
            "https://github.com/prometheus/blackbox_exporter/releases/download/v0.27.0/"
            "blackbox_exporter-0.27.0.linux-amd64.tar.gz",
        )
        self.assertEqual(str(BLACKBOX.install_dir), "/home/blackbox/blackbox")
        self.assertEqual(str(BLACKBOX.config_path), "/home/blackbox/blackbox/blackbox.yml")
        self.assertEqual(str(BLACKBOX.scratch_dir), "/tmp/blackbox_tmp")
        self.assertEqual(str(BLACKBOX.archive_path), "/tmp/blackbox_tmp/blackbox_exporter.tar.gz")
        self.assertEqual(str(BLACKBOX.unit_path), "/etc/systemd/system/blackbox.service")
        self.assertEqual(BLACKBOX.extracted_prefix, "blackbox_exporter-")

    def test_node_exporter_release_and_paths(self):
        self.assertEqual(
            NODE_EXPORTER.download_url,
            "https://github.com/prometheus/node_exporter/releases/download/v1.9.1/"
            "node_exporter-1.9.1.linux-amd64.tar.gz",
        )
        self.assertEqual(str(NODE_EXPORTER.install_dir), "/home/node-exporter/node-exporter")
        self.assertEqual(str(NODE_EXPORTER.scratch_dir), "/tmp/node-exporter_tmp")
        self.assertEqual(str(NODE_EXPORTER.unit_path), "/etc/systemd/system/node-exporter.service")
        self.assertIsNone(NODE_EXPORTER.config_path)

    def test_exec_start(self):
        self.assertEqual(
            BLACKBOX.exec_start(),
            [
                "/home/blackbox/blackbox/blackbox_exporter",
                "--config.file=/home/blackbox/blackbox/blackbox.yml",
                "--web.listen-address=:9115",
            ],
        )
        self.assertEqual(NODE_EXPORTER.exec_start(), ["/home/node-exporter/node-exporter/node_exporter"])

    def test_required_commands(self):
        base = ["curl", "tar", "systemctl", "useradd", "chown"]
        self.assertEqual(BLACKBOX.required_commands(), base)
        self.assertEqual(NODE_EXPORTER.required_commands(), base + ["lsof"])

    def test_version_override_rederives_url(self):
        exp = BLACKBOX.with_overrides({"version": "0.28.0"})
        self.assertIn("/v0.28.0/blackbox_exporter-0.28.0.linux-amd64.tar.gz", exp.download_url)
        self.assertEqual(BLACKBOX.version, "0.27.0")

    def test_explicit_url_wins(self):
        exp = NODE_EXPORTER.with_overrides({"version": "1.10.0", "download_url": "https://mirror.local/ne.tgz"})
        self.assertEqual(exp.download_url, "https://mirror.local/ne.tgz")

    def test_port_override_adds_listen_flag(self):
        exp = NODE_EXPORTER.with_overrides({"port": "9200"})
        self.assertEqual(exp.port, 9200)
        self.assertEqual(exp.exec_start()[-1], "--web.listen-address=:9200")

    def test_unknown_override(self):
        with self.assertRaises(KeyError):
            BLACKBOX.with_overrides({"colour": "blue"})

    def test_registry(self):
        self.assertEqual(sorted(EXPORTERS), ["blackbox", "node-exporter"])
        self.assertIs(EXPORTERS["blackbox"], BLACKBOX)
        self.assertIs(EXPORTERS["node-exporter"], NODE_EXPORTER)


if __name__ == "__main__":
    unittest.main()
