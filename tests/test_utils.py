import os
import json
import shutil
import tempfile
import unittest

import helpers  # noqa: F401  (sets up sys.path)

from application import TrackerPrefs
from constants import DEFAULT_PORT, MAX_WORKERS, TIMEOUT
from server import Endpoint
from utils import fmt_hms_from_seconds, load_prefs, load_servers, parse_address, parse_endpoint


class TestParseAddress(unittest.TestCase):
    def test_host_and_port(self):
        self.assertEqual(parse_address(" 10.0.0.1:27016 "), ("10.0.0.1", 27016))

    def test_default_port(self):
        self.assertEqual(parse_address("play.example.org"), ("play.example.org", DEFAULT_PORT))

    def test_invalid(self):
        for bad in ("", ":27015", "host:abc", "host:0", "host:65536"):
            with self.assertRaises(ValueError, msg=bad):
                parse_address(bad)

    def test_parse_endpoint(self):
        self.assertEqual(parse_endpoint("10.0.0.1:27016"), Endpoint("10.0.0.1", 27016))


class TestEndpoint(unittest.TestCase):
    def test_identity_is_host_and_port(self):
        self.assertEqual(Endpoint("a", 1), Endpoint("a", 1))
        self.assertNotEqual(Endpoint("a", 1), Endpoint("a", 2))
        self.assertEqual(len({Endpoint("a", 1), Endpoint("a", 1)}), 1)

    def test_port_range(self):
        for port in (0, 65536, -1):
            with self.assertRaises(ValueError):
                Endpoint("a", port)
        with self.assertRaises(ValueError):
            Endpoint("", 27015)

    def test_dict_round_trip(self):
        ep = Endpoint("10.0.0.1", 27015)
        self.assertEqual(Endpoint.from_dict(ep.to_dict()), ep)
        self.assertEqual(Endpoint.from_dict({"host": "x"}).port, DEFAULT_PORT)

    def test_from_dict_rejects_non_integer_ports(self):
        for port in (True, False, 27015.9, 27015.0, None, "abc"):
            with self.assertRaises(ValueError, msg=repr(port)):
                Endpoint.from_dict({"host": "10.0.0.1", "port": port})
        self.assertEqual(Endpoint.from_dict({"host": "10.0.0.1", "port": "27016"}).port, 27016)


class TestFmtDuration(unittest.TestCase):
    def test_formats(self):
        self.assertEqual(fmt_hms_from_seconds(5.9), "5s")
        self.assertEqual(fmt_hms_from_seconds(61), "1m 01s")
        self.assertEqual(fmt_hms_from_seconds(7260), "2h 01m")
        self.assertEqual(fmt_hms_from_seconds(-4), "0s")


class TestLoadFiles(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def write(self, name, payload):
        path = os.path.join(self.tmp, name)
        with open(path, "w", encoding="utf-8") as f:
            if isinstance(payload, str):
                f.write(payload)
            else:
                json.dump(payload, f)
        return path

    def test_load_servers(self):
        path = self.write("servers.json", [
            {"host": "10.0.0.1", "port": 27015},
            {"host": "10.0.0.2", "port": "27016"},
            {"host": "10.0.0.1", "port": 27015},
            {"host": "", "port": 1},
            {"host": "10.0.0.3", "port": 70000},
            {"host": "10.0.0.4", "port": True},
            "junk",
        ])
        self.assertEqual(load_servers(path), [Endpoint("10.0.0.1", 27015), Endpoint("10.0.0.2", 27016)])

    def test_load_servers_missing_or_broken(self):
        self.assertEqual(load_servers(os.path.join(self.tmp, "none.json")), [])
        self.assertEqual(load_servers(self.write("bad.json", "{not json")), [])
        self.assertEqual(load_servers(self.write("obj.json", {"host": "a"})), [])

    def test_load_prefs(self):
        path = self.write("prefs.json", {"timeout": 1.5, "max_workers": 0})
        prefs = load_prefs(path)
        self.assertEqual(prefs.timeout, 1.5)
        self.assertEqual(prefs.max_workers, 1)

    def test_load_prefs_defaults(self):
        self.assertEqual(load_prefs(os.path.join(self.tmp, "none.json")), TrackerPrefs())
        self.assertEqual(load_prefs(self.write("bad.json", "[")), TrackerPrefs())
        prefs = TrackerPrefs()
        self.assertEqual((prefs.timeout, prefs.max_workers), (TIMEOUT, MAX_WORKERS))
        self.assertEqual(TrackerPrefs.from_dict(prefs.to_dict()), prefs)


if __name__ == '__main__':
    unittest.main()
