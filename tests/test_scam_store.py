"""
Tests for the tracked contract record and JSON persistence.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from shared.scam_store import (
    TrackedContract,
    derive_status,
    find_tracked,
    format_timestamp,
    is_tracked,
    load_tracked_contracts,
    save_tracked_contracts,
)

ADDR = "0xAbCdEf0000000000000000000000000000000001"


class TestStatus:
    @pytest.mark.parametrize(
        "balance,expected",
        [(0.0, "DRAINED"), (0.01, "DRAINED"), (0.0100001, "ACTIVE"), (5.0, "ACTIVE")],
    )
    def test_threshold(self, balance, expected):
        assert derive_status(balance) == expected

    def test_custom_threshold(self):
        assert derive_status(0.5, threshold=1.0) == "DRAINED"


class TestTrackedContract:
    def test_create_sets_both_timestamps(self, now):
        contract = TrackedContract.create(ADDR, "QUIZ", 0.05, now)

        assert contract.first_seen == contract.last_updated == "2025-03-01T12:30:45.123Z"
        assert contract.status == "ACTIVE"
        assert contract.chain == "ethereum"

    def test_create_without_name(self, now):
        assert TrackedContract.create(ADDR, None, 0.0, now).name == "Unknown"

    def test_refresh_never_touches_first_seen(self, now):
        contract = TrackedContract.create(ADDR, "QUIZ", 1.0, now)
        later = now + timedelta(hours=6)

        contract.refresh(0.0, later)

        assert contract.first_seen == "2025-03-01T12:30:45.123Z"
        assert contract.last_updated == "2025-03-01T18:30:45.123Z"
        assert contract.status == "DRAINED"

    def test_timestamp_is_normalized_to_utc(self):
        moment = datetime(2025, 1, 1, 3, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(moment) == "2025-01-01T01:00:00.000Z"


class TestLoadSave:
    def test_missing_file_is_empty(self, tmp_path):
        assert load_tracked_contracts(tmp_path / "nope.json") == []

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "scams.json"
        path.write_text("[{not json")
        assert load_tracked_contracts(path) == []

    def test_non_list_document_is_empty(self, tmp_path):
        path = tmp_path / "scams.json"
        path.write_text(json.dumps({"address": ADDR}))
        assert load_tracked_contracts(path) == []

    def test_malformed_entries_are_skipped(self, tmp_path):
        path = tmp_path / "scams.json"
        path.write_text(json.dumps([{"balance": 1}, "junk", {"address": ADDR, "balance": 2}]))

        contracts = load_tracked_contracts(path)

        assert [c.address for c in contracts] == [ADDR]

    def test_stored_status_is_rederived_from_balance(self, tmp_path):
        path = tmp_path / "scams.json"
        path.write_text(
            json.dumps(
                [
                    {"address": ADDR, "balance": 0.0, "status": "ACTIVE"},
                    {"address": ADDR.replace("1", "2"), "balance": 4.0, "status": "DRAINED"},
                ]
            )
        )

        contracts = load_tracked_contracts(path)

        assert [c.status for c in contracts] == ["DRAINED", "ACTIVE"]
        assert load_tracked_contracts(path, threshold=5.0)[1].status == "DRAINED"

    def test_case_duplicates_keep_first(self, tmp_path):
        path = tmp_path / "scams.json"
        path.write_text(
            json.dumps(
                [
                    {"address": ADDR, "balance": 1, "name": "first"},
                    {"address": ADDR.lower(), "balance": 2, "name": "second"},
                ]
            )
        )

        contracts = load_tracked_contracts(path)

        assert len(contracts) == 1
        assert contracts[0].name == "first"

    def test_save_writes_pretty_array_with_original_keys(self, tmp_path, now):
        path = tmp_path / "nested" / "scams.json"
        save_tracked_contracts(path, [TrackedContract.create(ADDR, "QUIZ", 0.2, now)])

        text = path.read_text()
        assert text.startswith("[\n  {")
        assert json.loads(text) == [
            {
                "address": ADDR,
                "chain": "ethereum",
                "balance": 0.2,
                "name": "QUIZ",
                "first_seen": "2025-03-01T12:30:45.123Z",
                "last_updated": "2025-03-01T12:30:45.123Z",
                "status": "ACTIVE",
            }
        ]

    def test_saved_store_loads_back(self, tmp_path, now):
        path = tmp_path / "scams.json"
        original = [TrackedContract.create(ADDR, "QUIZ", 0.2, now)]
        save_tracked_contracts(path, original)
        assert load_tracked_contracts(path) == original


class TestLookup:
    def test_lookup_ignores_case(self, now):
        contracts = [TrackedContract.create(ADDR, "QUIZ", 0.2, now)]

        assert is_tracked(contracts, ADDR.lower())
        assert is_tracked(contracts, ADDR.upper().replace("0X", "0x"))
        assert find_tracked(contracts, ADDR.lower()) is contracts[0]
        assert not is_tracked(contracts, "0x" + "0" * 40)
