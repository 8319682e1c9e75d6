"""Tests for the command-line interface."""

import json

import pytest

from cafe_checkin import cli
from cafe_checkin.core import create_app_context


@pytest.fixture
def seeded_cli(mocker, monkeypatch, store):
    """Point the CLI at the seeded in-memory store."""
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("CAFE_CHECKIN_PREFS_PATH", raising=False)
    mocker.patch(
        "cafe_checkin.cli.create_app_context",
        side_effect=lambda settings, **kwargs: create_app_context(settings, store=store, **kwargs),
    )
    return store


def test_cafes_text_output(seeded_cli, capsys):
    assert cli.main(["cafes"]) == 0

    out = capsys.readouterr().out
    assert "Artisan Coffee Lab" in out
    assert "37.77490, -122.41940" in out
    assert "closed" in out


def test_beans_json_output(seeded_cli, capsys):
    assert cli.main(["--json", "beans"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert [bean["id"] for bean in payload] == ["bean-1", "bean-2", "bean-3", "bean-9"]
    assert payload[0]["flavor_notes"] == ["Floral", "Citrus", "Blueberry"]


def test_order_command_records_brew(seeded_cli, capsys):
    assert cli.main(["order", "cafe-1", "bean-2", "espresso", "--rating", "4", "--note", "syrupy"]) == 0

    captured = capsys.readouterr()
    assert "Colombian Supremo @ Artisan Coffee Lab" in captured.out
    assert seeded_cli.calls[-1][:2] == ("insert", "orders")


def test_order_command_rejects_unknown_bean(seeded_cli, capsys):
    assert cli.main(["order", "cafe-1", "bean-404", "espresso"]) == 1

    assert "Error:" in capsys.readouterr().err
    assert seeded_cli.calls == []


def test_order_command_reports_remote_failure(seeded_cli, capsys):
    seeded_cli.failing.add(("insert", "orders"))

    assert cli.main(["order", "cafe-1", "bean-2", "espresso"]) == 1

    assert "Could not save your order" in capsys.readouterr().err


def test_favorite_command_toggles(seeded_cli, capsys):
    assert cli.main(["favorite", "cafe", "cafe-1"]) == 0

    assert "cafe cafe-1: added to favorites" in capsys.readouterr().out
    assert seeded_cli.calls == [("insert", "favorites", {"cafe_id": "cafe-1"})]


def test_history_and_profile(seeded_cli, capsys):
    assert cli.main(["history"]) == 0
    history = capsys.readouterr().out
    assert "Ethiopian Yirgacheffe @ Artisan Coffee Lab" in history
    assert "Bright" in history

    assert cli.main(["profile"]) == 0
    profile = capsys.readouterr().out
    assert "Orders:" in profile
    assert "Brew & Co." in profile


def test_load_failure_exits_nonzero(seeded_cli, capsys):
    seeded_cli.failing.add(("list", "cafes"))

    assert cli.main(["cafes"]) == 1
    assert "Could not load cafés" in capsys.readouterr().err


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])

    assert excinfo.value.code == 0
    assert "cafe-checkin" in capsys.readouterr().out
