from __future__ import annotations

import json
from pathlib import Path

import pytest

from ui import cli


def _write_result(tmp_path: Path) -> Path:
    payload = {
        "tables": [
            {
                "name": "PrimaryResult",
                "columns": [
                    {"name": "timestamp", "type": "datetime"},
                    {"name": "message", "type": "string"},
                    {"name": "customDimensions", "type": "dynamic"},
                ],
                "rows": [
                    ["2025-01-01T00:00:00Z", "m", {"neutral": i, "errorCount": i, "eventId": "RT0001"}]
                    for i in range(5)
                ],
            }
        ]
    }
    path = tmp_path / "result.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_rank_prints_headers_as_json(tmp_path, capsys) -> None:
    result = _write_result(tmp_path)
    cli.main(["rank", str(result), "--json", "--config", str(_write_config(tmp_path))])
    headers = json.loads(capsys.readouterr().out)
    assert headers == ["timestamp", "message", "eventId", "errorCount", "neutral"]


def test_rank_honours_set_overrides(tmp_path, capsys) -> None:
    result = _write_result(tmp_path)
    cli.main(
        [
            "rank",
            str(result),
            "--config",
            str(_write_config(tmp_path)),
            "--set",
            "pinned=neutral",
        ]
    )
    lines = capsys.readouterr().out.splitlines()
    assert lines[:4] == ["timestamp", "message", "eventId", "neutral"]


def test_missing_table_exits(tmp_path) -> None:
    result = _write_result(tmp_path)
    with pytest.raises(SystemExit) as exc:
        cli.main(["rank", str(result), "--table", "other", "--config", str(_write_config(tmp_path))])
    assert "INPUT_ERROR" in str(exc.value)


def test_config_command_shows_resolved_settings(tmp_path, capsys, monkeypatch) -> None:
    monkeypatch.delenv("INSIGHTS_RANK_SAMPLE_SIZE", raising=False)
    cli.main(["config", "--config", str(_write_config(tmp_path)), "--set", "sample_size=10"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["sample_size"] == 10


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"version": 1, "ranking": {}}), encoding="utf-8")
    return path
