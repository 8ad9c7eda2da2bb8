"""Tests for the command-line entry point."""

import json
from datetime import datetime, time, timedelta, timezone

import pytest

from painter_booking.cli import main


def _tomorrow_at(hour: int) -> str:
    day = (datetime.now(timezone.utc) + timedelta(days=1)).date()
    return datetime.combine(day, time(hour, 0), tzinfo=timezone.utc).isoformat()


def _run(capsys, *argv):
    code = main(list(argv))
    return code, json.loads(capsys.readouterr().out)


class TestMemoryBackend:
    def test_seed(self, capsys):
        code, output = _run(capsys, "--backend", "memory", "seed")
        assert code == 0
        assert output["success"] is True
        assert output["data"]["painters"] == ["painter-jane", "painter-bob"]
        assert len(output["data"]["slots"]) == 2

    def test_declare_in_past_fails(self, capsys):
        code, output = _run(
            capsys, "--backend", "memory", "declare", "--painter", "painter-jane",
            "--start", "2020-01-01T09:00:00Z", "--end", "2020-01-01T17:00:00Z",
        )
        assert code == 1
        assert output["error"] == "PAST_TIME"

    def test_invalid_payload_exit_code(self, capsys):
        code = main([
            "--backend", "memory", "book", "--user", "u", "--start", _tomorrow_at(10),
            "--end", _tomorrow_at(14), "--address", "   ",
        ])
        assert code == 2


class TestSqlBackend:
    @pytest.fixture
    def db_args(self, tmp_path):
        return ["--backend", "sql", "--database-url", f"sqlite:///{tmp_path / 'cli.db'}"]

    def test_seed_book_and_list(self, capsys, db_args):
        assert _run(capsys, *db_args, "init-db")[0] == 0
        assert _run(capsys, *db_args, "seed")[0] == 0

        code, booked = _run(
            capsys, *db_args, "book", "--user", "customer-1",
            "--start", _tomorrow_at(10), "--end", _tomorrow_at(14),
            "--address", "123 Main St", "--hours", "4",
        )
        assert code == 0
        assert booked["data"]["status"] == "CONFIRMED"
        assert booked["data"]["painter"]["id"] == "painter-bob"

        code, listed = _run(capsys, *db_args, "bookings", "--user", "customer-1")
        assert code == 0
        assert [b["id"] for b in listed["data"]] == [booked["data"]["id"]]

        code, appointments = _run(capsys, *db_args, "appointments", "--painter", "painter-bob")
        assert appointments["data"][0]["customerId"] == "customer-1"

        code, cancelled = _run(
            capsys, *db_args, "status", "--booking", booked["data"]["bookingId"], "--to", "CANCELLED",
        )
        assert code == 0
        assert cancelled["data"]["status"] == "CANCELLED"

    def test_no_match_exits_zero(self, capsys, db_args):
        code, output = _run(
            capsys, *db_args, "book", "--user", "customer-1",
            "--start", _tomorrow_at(10), "--end", _tomorrow_at(14), "--address", "1 Side St",
        )
        assert code == 0
        assert output["error"] == "NO_MATCH"
        assert output["data"]["bookingRequest"]["status"] == "PENDING"
