import gzip
import json
import tempfile
import unittest
from pathlib import Path

from src.tensorfold.infrastructure.encoding._b64 import floats_to_payload, payload_to_floats
from src.tensorfold.infrastructure.models import NetworkParams


def _awkward_params():
    return NetworkParams(
        [
            [[0.1, 1 / 3, -2.5e-300], [1e308, -0.0, 5e-324]],
            [[3.141592653589793], [2.718281828459045]],
        ]
    )


class TestPayload(unittest.TestCase):
    def test_round_trip_is_exact(self):
        values = [0.1, 1 / 3, -1e-310, 1e300]
        self.assertEqual(payload_to_floats(floats_to_payload(values)), values)

    def test_length_mismatch_raises(self):
        payload = floats_to_payload([1.0, 2.0])
        payload["length"] = 3
        with self.assertRaises(ValueError):
            payload_to_floats(payload)

    def test_missing_field_raises(self):
        with self.assertRaises(ValueError):
            payload_to_floats({"b64": ""})


class TestNetworkParamsPersistence(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_json_file_round_trip(self):
        params = _awkward_params()
        path = self.dir / "params.json"
        params.to_json_file(path)
        self.assertEqual(NetworkParams.from_json_file(path), params)
        self.assertEqual(json.loads(path.read_text())["format"], "tensorfold.params")

    def test_compressed_file_round_trip(self):
        params = _awkward_params()
        path = self.dir / "params.json.gz"
        params.to_compressed_file(path)
        with gzip.open(path, "rt") as f:
            self.assertIn("tensorfold.params", f.read())
        self.assertEqual(NetworkParams.from_compressed_file(path), params)

    def test_plain_and_compressed_agree(self):
        params = _awkward_params()
        params.to_json_file(self.dir / "a.json")
        params.to_compressed_file(self.dir / "a.json.gz")
        self.assertEqual(
            NetworkParams.from_json_file(self.dir / "a.json"),
            NetworkParams.from_compressed_file(self.dir / "a.json.gz"),
        )

    def test_unknown_format_rejected(self):
        with self.assertRaises(ValueError):
            NetworkParams.from_dict({"format": "other", "version": 1, "layers": []})
        with self.assertRaises(ValueError):
            NetworkParams.from_dict({"format": "tensorfold.params", "version": 99, "layers": []})

    def test_container_protocol(self):
        params = _awkward_params()
        self.assertEqual(len(params), 2)
        self.assertEqual(params.count(), 8)
        self.assertEqual([len(rows) for rows in params], [2, 2])


if __name__ == "__main__":
    unittest.main()
