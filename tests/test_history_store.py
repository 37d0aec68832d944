# tests/test_history_store.py

"""Tests for the append-only price history store."""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from helpers import snapshot, write_json

from subtrend.exceptions import HistoryFileError
from subtrend.storage.history_store import (
    HistoryStore,
    parse_history_payload,
)


class TestParseHistoryPayload(unittest.TestCase):
    """Decoding history files."""

    def test_sorts_by_date(self) -> None:
        snaps = parse_history_payload({
            "snapshots": [
                {"date": "2024-03-01", "prices": []},
                {"date": "2024-01-01", "prices": []},
                {"date": "2024-02-01", "prices": []},
            ]
        })
        self.assertEqual(
            [s.date for s in snaps],
            ["2024-01-01", "2024-02-01", "2024-03-01"],
        )

    def test_filters_malformed_snapshots(self) -> None:
        snaps = parse_history_payload({
            "snapshots": [
                {"date": 20240101, "prices": []},
                {"date": "2024-01-01"},
                {"date": "2024-02-01", "prices": {"KR": 1}},
                None,
                "junk",
                {"date": "2024-03-01", "prices": [{"countryCode": "KR", "krw": 1}]},
            ]
        })
        self.assertEqual([s.date for s in snaps], ["2024-03-01"])

    def test_keeps_raw_entry_values(self) -> None:
        snaps = parse_history_payload({
            "snapshots": [
                {
                    "date": "2024-01-01",
                    "prices": [
                        {"countryCode": "kr", "krw": "14900"},
                        "not-a-row",
                        {"krw": 1},
                    ],
                },
            ]
        })
        entries = snaps[0].entries
        self.assertEqual(len(entries), 2)
        self.assertEqual(entries[0].country_code, "kr")
        self.assertEqual(entries[0].krw, "14900")
        self.assertIsNone(entries[1].country_code)

    def test_unusable_payloads(self) -> None:
        for payload in (None, [], {"snapshots": "x"}, {}):
            with self.subTest(payload=payload):
                self.assertEqual(parse_history_payload(payload), [])


class TestHistoryStore(unittest.TestCase):
    """Loading and recording snapshots on disk."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.history_dir = Path(self._tmp.name) / "history"
        self.store = HistoryStore(history_dir=self.history_dir)

    def _read(self, slug: str) -> dict[str, list[dict[str, object]]]:
        with open(self.history_dir / f"{slug}.json", encoding="utf-8") as f:
            data: dict[str, list[dict[str, object]]] = json.load(f)
        return data

    def test_missing_file_is_empty(self) -> None:
        self.assertEqual(self.store.load("netflix"), [])

    def test_broken_file_is_empty(self) -> None:
        self.history_dir.mkdir(parents=True)
        (self.history_dir / "netflix.json").write_text("[", encoding="utf-8")
        self.assertEqual(self.store.load("netflix"), [])

    def test_record_creates_file(self) -> None:
        recorded = self.store.record_snapshot(
            "netflix", snapshot({"KR": 17000, "UA": None, "TR": 3000}),
        )
        self.assertTrue(recorded)
        data = self._read("netflix")
        self.assertEqual(len(data["snapshots"]), 1)
        self.assertEqual(data["snapshots"][0]["date"], "2024-03-01")
        self.assertEqual(
            data["snapshots"][0]["prices"],
            [
                {"countryCode": "KR", "krw": 17000},
                {"countryCode": "TR", "krw": 3000},
            ],
        )

    def test_record_appends_and_loads_back(self) -> None:
        write_json(self.history_dir / "netflix.json", {
            "snapshots": [
                {"date": "2024-01-01", "prices": [{"countryCode": "KR", "krw": 1}]},
            ]
        })
        self.store.record_snapshot("netflix", snapshot({"KR": 2}))
        snaps = self.store.load("netflix")
        self.assertEqual(
            [s.date for s in snaps], ["2024-01-01", "2024-03-01"]
        )

    def test_record_same_date_is_skipped(self) -> None:
        self.store.record_snapshot("netflix", snapshot({"KR": 1}))
        again = self.store.record_snapshot("netflix", snapshot({"KR": 2}))
        self.assertFalse(again)
        self.assertEqual(len(self._read("netflix")["snapshots"]), 1)

    def test_record_explicit_date(self) -> None:
        self.store.record_snapshot(
            "netflix", snapshot({"KR": 1}), recorded_on="2024-04-15",
        )
        self.assertEqual(
            self._read("netflix")["snapshots"][0]["date"], "2024-04-15"
        )

    def test_record_refuses_corrupt_file(self) -> None:
        """A truncated history file is left as-is, not overwritten."""
        write_json(self.history_dir / "netflix.json", {
            "snapshots": [
                {"date": f"2024-0{m}-01", "prices": [{"countryCode": "KR", "krw": m}]}
                for m in range(1, 6)
            ]
        })
        path = self.history_dir / "netflix.json"
        truncated = path.read_text(encoding="utf-8")[:-5]
        path.write_text(truncated, encoding="utf-8")

        with self.assertRaises(HistoryFileError):
            self.store.record_snapshot(
                "netflix", snapshot({"KR": 9}, date="2024-06-01"),
            )
        self.assertEqual(path.read_text(encoding="utf-8"), truncated)
        self.assertEqual(
            [p.name for p in self.history_dir.iterdir()], ["netflix.json"]
        )

    def test_record_refuses_payload_without_snapshots(self) -> None:
        write_json(self.history_dir / "netflix.json", {"items": []})
        with self.assertRaises(HistoryFileError):
            self.store.record_snapshot("netflix", snapshot({"KR": 1}))
        self.assertEqual(
            json.loads((self.history_dir / "netflix.json").read_text(encoding="utf-8")),
            {"items": []},
        )

    def test_failed_write_keeps_previous_file(self) -> None:
        write_json(self.history_dir / "netflix.json", {"snapshots": []})
        before = (self.history_dir / "netflix.json").read_text(encoding="utf-8")
        with patch(
            "subtrend.storage.history_store.json.dump",
            side_effect=OSError("disk full"),
        ):
            with self.assertRaises(OSError):
                self.store.record_snapshot("netflix", snapshot({"KR": 1}))
        self.assertEqual(
            (self.history_dir / "netflix.json").read_text(encoding="utf-8"),
            before,
        )
        self.assertEqual(
            [p.name for p in self.history_dir.iterdir()], ["netflix.json"]
        )

    def test_record_keeps_other_top_level_keys(self) -> None:
        write_json(self.history_dir / "netflix.json", {
            "service": "netflix", "snapshots": [],
        })
        self.store.record_snapshot("netflix", snapshot({"KR": 1}))
        data = self._read("netflix")
        self.assertEqual(data["service"], "netflix")
        self.assertEqual(len(data["snapshots"]), 1)

    def test_record_without_date_uses_today(self) -> None:
        self.store.record_snapshot("netflix", snapshot({"KR": 1}, date=None))
        date = self._read("netflix")["snapshots"][0]["date"]
        assert isinstance(date, str)
        self.assertRegex(date, r"^\d{4}-\d{2}-\d{2}$")


if __name__ == "__main__":
    unittest.main()
