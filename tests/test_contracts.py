"""Tests for the pydantic contracts: config, credentials, wire envelope, clock."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from codetracker.core.clock import format_timestamp, parse_timestamp
from codetracker.core.contracts.api import ApiEnvelope, SnapshotReceipt
from codetracker.core.contracts.config import (
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_MAX_FILE_SIZE,
    Credentials,
    TrackerConfig,
)
from codetracker.core.result import FailureKind
from codetracker.core.workspace import Workspace


def test_config_defaults() -> None:
    cfg = TrackerConfig()
    assert cfg.auto_track is True
    assert cfg.max_file_size == DEFAULT_MAX_FILE_SIZE == 1024 * 1024
    assert list(DEFAULT_IGNORE_PATTERNS) == cfg.ignore_patterns
    assert cfg.skip_patterns == []
    assert cfg.exit_requires_changes is True


def test_config_normalizes_url_and_extensions() -> None:
    """Trailing slashes go; bare extensions gain a dot; unknown keys are ignored."""
    cfg = TrackerConfig.model_validate(
        {
            "server_url": " https://example.com/api/ ",
            "tracked_extensions": ["ts", ".py"],
            "dashboard_theme": "dark",
        }
    )
    assert cfg.server_url == "https://example.com/api"
    assert cfg.tracked_extensions == [".ts", ".py"]


@pytest.mark.parametrize(
    "body",
    [
        {"server_url": "example.com"},
        {"max_file_size": 0},
        {"request_timeout": -1},
    ],
)
def test_config_rejects_invalid_values(body: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        TrackerConfig.model_validate(body)


def test_credentials_completeness() -> None:
    """Both the secret and the project id must be non-blank."""
    assert Credentials(api_key="k", current_project_hash="p").is_complete
    assert not Credentials(api_key="k").is_complete
    assert not Credentials(api_key="  ", current_project_hash="p").is_complete
    assert not Credentials().is_complete


def test_receipt_accepts_int_or_str_ids() -> None:
    assert SnapshotReceipt.model_validate({"snapshot_id": 12}).snapshot_id == "12"
    assert SnapshotReceipt.model_validate({"snapshot_id": "ab"}).snapshot_id == "ab"
    with pytest.raises(ValidationError):
        SnapshotReceipt.model_validate({"snapshot_id": "  "})


def test_envelope_ignores_extra_fields() -> None:
    env = ApiEnvelope.model_validate(
        {"success": True, "data": {"snapshot_id": 3, "lines_added": 10}, "meta": {}}
    )
    assert env.data is not None and env.data.snapshot_id == "3"


def test_timestamps_round_trip_to_milliseconds() -> None:
    """Serialized timestamps are UTC with millisecond precision and a `Z`."""
    moment = parse_timestamp("2026-05-04T03:02:01.123456+02:00")
    assert format_timestamp(moment) == "2026-05-04T01:02:01.123Z"
    assert format_timestamp(parse_timestamp(0)) == "1970-01-01T00:00:00.000Z"
    assert format_timestamp(parse_timestamp(1_700_000_000_500)) == "2023-11-14T22:13:20.500Z"
    with pytest.raises(ValueError):
        parse_timestamp("yesterday")


def test_workspace_loaders(tmp_path: Path) -> None:
    """Missing, malformed, and incomplete files are all `config_missing`."""
    ws = Workspace(root=tmp_path)
    assert ws.load_config().unwrap_err().kind is FailureKind.CONFIG_MISSING
    assert ws.load_credentials().unwrap_err().kind is FailureKind.CONFIG_MISSING

    ws.state_dir.mkdir()
    ws.config_path.write_text("{oops", encoding="utf-8")
    ws.credentials_path.write_text(json.dumps({"api_key": "k"}), encoding="utf-8")
    assert ws.load_config().unwrap_err().kind is FailureKind.CONFIG_MISSING
    assert ws.load_credentials().unwrap_err().kind is FailureKind.CONFIG_MISSING

    ws.config_path.write_text(json.dumps({"auto_track": False}), encoding="utf-8")
    ws.credentials_path.write_text(
        json.dumps({"api_key": "k", "current_project_hash": "p", "email": "a@b.c"}),
        encoding="utf-8",
    )
    assert ws.load_config().unwrap().auto_track is False
    assert ws.load_credentials().unwrap().current_project_hash == "p"
    assert ws.cache_dir == tmp_path / ".codetracker" / "cache"
