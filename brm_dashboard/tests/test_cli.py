"""CLI tests — verify exact output and exit codes of brm-dashboard sub-commands."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from brm_dashboard.cli import main

_VALID_SUBMISSION = {
    "offer_type": "coaching",
    "core_promise": "We help coaches scale",
    "avg_txn_value": 250,
    "revenue_band": "lt_250k",
    "traffic_source": None,
    "retention_model": None,
    "has_upsells": False,
    "notes": "",
    "offers": [
        {"slot": 1, "name": "Flagship", "price_point": None,
         "fulfillment_type": None, "primary_outcome": None},
        {"slot": 2, "name": None, "price_point": None,
         "fulfillment_type": None, "primary_outcome": None},
        {"slot": 3, "name": None, "price_point": None,
         "fulfillment_type": None, "primary_outcome": None},
    ],
}

_VALID_FORM = {
    "offer_type": "coaching",
    "core_promise": "We help coaches scale",
    "avg_txn_value": "250",
    "revenue_band": "lt_250k",
    "offers": [
        {"slot": 1, "name": "Flagship"},
        {"slot": 2},
        {"slot": 3},
    ],
}


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _run(capsys, *args: str):
    with pytest.raises(SystemExit) as exc_info:
        main(list(args))
    return exc_info.value.code, capsys.readouterr().out


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch):
    monkeypatch.delenv("BRM_DASHBOARD_CONFIG", raising=False)


class TestValidateBusinessInfo:

    def test_valid_exits_0(self, tmp_path: Path, capsys):
        p = _write(tmp_path / "sub.json", _VALID_SUBMISSION)
        code, out = _run(capsys, "validate-business-info", "--input", str(p))
        assert code == 0
        assert out.strip() == "OK: business info is valid"

    def test_invalid_exits_1_with_field_errors(self, tmp_path: Path, capsys):
        p = _write(tmp_path / "sub.json", {**_VALID_SUBMISSION, "avg_txn_value": -5})
        code, out = _run(capsys, "validate-business-info", "--input", str(p))
        assert code == 1
        assert out.splitlines() == [
            "ERROR: invalid business info",
            "avg_txn_value: Use a positive number for average transaction value",
        ]

    def test_missing_file_exits_1(self, tmp_path: Path, capsys):
        code, out = _run(capsys, "validate-business-info", "--input", str(tmp_path / "ghost.json"))
        assert code == 1
        assert out.startswith("ERROR: File not found")

    def test_invalid_json_exits_1(self, tmp_path: Path, capsys):
        p = tmp_path / "bad.json"
        p.write_text("{not json}", encoding="utf-8")
        code, out = _run(capsys, "validate-business-info", "--input", str(p))
        assert code == 1
        assert out.startswith("ERROR: Invalid JSON")


class TestSubmitBusinessInfo:

    def test_saves_into_store_dir(self, tmp_path: Path, capsys):
        form = _write(tmp_path / "form.json", _VALID_FORM)
        store_dir = tmp_path / "store"
        code, out = _run(
            capsys, "submit-business-info", "--form", str(form),
            "--user-id", "u1", "--brm-level", "level_1", "--store-dir", str(store_dir),
        )
        assert code == 0
        assert out.strip() == "OK: business info saved"
        rows = json.loads((store_dir / "business_context.json").read_text(encoding="utf-8"))
        assert rows[0]["user_id"] == "u1"

    def test_invalid_form_reports_field_errors(self, tmp_path: Path, capsys):
        form = _write(tmp_path / "form.json", {**_VALID_FORM, "core_promise": " "})
        code, out = _run(
            capsys, "submit-business-info", "--form", str(form),
            "--user-id", "u1", "--brm-level", "level_1", "--store-dir", str(tmp_path / "s"),
        )
        assert code == 1
        assert "core_promise: Enter your core promise" in out.splitlines()
        assert not (tmp_path / "s").exists()

    def test_unknown_level(self, tmp_path: Path, capsys):
        form = _write(tmp_path / "form.json", _VALID_FORM)
        code, out = _run(
            capsys, "submit-business-info", "--form", str(form),
            "--user-id", "u1", "--brm-level", "level_9",
        )
        assert code == 1
        assert out.strip() == "ERROR: unknown BRM level 'level_9'"

    def test_malformed_form_state(self, tmp_path: Path, capsys):
        form = _write(tmp_path / "form.json", {"offers": [{"slot": 7}]})
        code, out = _run(
            capsys, "submit-business-info", "--form", str(form),
            "--user-id", "u1", "--brm-level", "level_1",
        )
        assert code == 1
        assert out.strip() == "ERROR: invalid form state"

    def test_corrupt_store_table_is_reported(self, tmp_path: Path, capsys):
        form = _write(tmp_path / "form.json", _VALID_FORM)
        store_dir = tmp_path / "store"
        store_dir.mkdir()
        (store_dir / "business_context.json").write_bytes(b"[\xff]")
        code, out = _run(
            capsys, "submit-business-info", "--form", str(form),
            "--user-id", "u1", "--brm-level", "level_1", "--store-dir", str(store_dir),
        )
        assert code == 1
        assert out.startswith("ERROR: Corrupt table file")


class TestResolveRole:

    def test_metadata_role(self, tmp_path: Path, capsys):
        session = _write(tmp_path / "s.json", {"user": {"id": "u1", "app_metadata": {"role": "mentor"}}})
        code, out = _run(capsys, "resolve-role", "--session", str(session), "--store-dir", str(tmp_path))
        assert code == 0
        assert out.strip() == "/mentor/home"

    def test_profile_role_from_store(self, tmp_path: Path, capsys):
        _write(tmp_path / "profiles.json", [{"id": "u1", "role": "client"}])
        session = _write(tmp_path / "s.json", {"user": {"id": "u1"}})
        code, out = _run(capsys, "resolve-role", "--session", str(session), "--store-dir", str(tmp_path))
        assert code == 0
        assert out.strip() == "/client"

    def test_config_overrides_pending_route(self, tmp_path: Path, capsys):
        config = tmp_path / "config.yaml"
        config.write_text("routing:\n  pending_approval: /waiting-room\n", encoding="utf-8")
        session = _write(tmp_path / "s.json", {"user": {"id": "u1"}})
        code, out = _run(
            capsys, "--config", str(config),
            "resolve-role", "--session", str(session), "--store-dir", str(tmp_path),
        )
        assert code == 0
        assert out.strip() == "/waiting-room"

    def test_invalid_session(self, tmp_path: Path, capsys):
        session = _write(tmp_path / "s.json", {"user": {}})
        code, out = _run(capsys, "resolve-role", "--session", str(session))
        assert code == 1
        assert out.strip() == "ERROR: invalid session"

    def test_corrupt_profiles_table_goes_to_pending(self, tmp_path: Path, capsys):
        (tmp_path / "profiles.json").write_bytes(b'[{"id": "u1", "role": "\xff"}]')
        session = _write(tmp_path / "s.json", {"user": {"id": "u1"}})
        code, out = _run(capsys, "resolve-role", "--session", str(session), "--store-dir", str(tmp_path))
        assert code == 0
        assert out.strip() == "/pending-approval"


class TestMisc:

    def test_bad_config_exits_1(self, tmp_path: Path, capsys):
        code, out = _run(capsys, "--config", str(tmp_path / "missing.yaml"), "verify")
        assert code == 1
        assert out.startswith("ERROR: Config file not found")

    def test_no_command_prints_help(self, capsys):
        code, out = _run(capsys)
        assert code == 1
        assert "brm-dashboard" in out

    def test_verify_passes(self, capsys):
        code, out = _run(capsys, "verify")
        assert code == 0
        assert out.strip() == "OK: brm-dashboard verified"
