import json

from typer.testing import CliRunner

from sparkpulse.cli.cli import app

runner = CliRunner()
GIB = 1024**3
START = 1_700_000_000_000


def _write_recording(tmp_path, worker_heap: int):
    recording = {
        "appId": "app-3",
        "attempt": {"appSparkVersion": "3.5.0", "startTimeEpoch": START, "endTimeEpoch": -1},
        "configuration": {"sparkProperties": [["spark.app.name", "cli"], ["spark.executor.memory", "1g"]]},
        "frames": [
            {
                "time": START + 5000,
                "stages": [],
                "executors": [
                    {"id": "driver", "isActive": True, "totalDuration": 5000, "maxTasks": 1, "totalCores": 1},
                    {
                        "id": "1",
                        "isActive": True,
                        "totalDuration": 5000,
                        "maxTasks": 2,
                        "totalCores": 2,
                        "heapMemoryUsageBytes": worker_heap,
                    },
                ],
            }
        ],
    }
    path = tmp_path / "recording.json"
    path.write_text(json.dumps(recording))
    return path


def test_replay_without_alerts(tmp_path):
    path = _write_recording(tmp_path, int(GIB * 0.8))

    result = runner.invoke(app, ["app", "replay", str(path)])

    assert result.exit_code == 0
    assert "No alerts" in result.output


def test_replay_fail_on_error_exits_with_alert_code(tmp_path):
    path = _write_recording(tmp_path, int(GIB * 0.99))

    result = runner.invoke(app, ["app", "replay", str(path), "--fail-on-error"])

    assert result.exit_code == 2


def test_replay_error_alert_without_flag_exits_zero(tmp_path):
    path = _write_recording(tmp_path, int(GIB * 0.99))

    result = runner.invoke(app, ["app", "replay", str(path)])

    assert result.exit_code == 0


def test_replay_missing_file(tmp_path):
    result = runner.invoke(app, ["app", "replay", str(tmp_path / "missing.json")])

    assert result.exit_code == 1


def test_replay_invalid_recording(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"appId": "a", "attempt": {}, "configuration": {}, "frames": [{"time": 1}]}))

    result = runner.invoke(app, ["app", "replay", str(path)])

    assert result.exit_code == 1


def test_replay_non_numeric_frame_time(tmp_path):
    path = _write_recording(tmp_path, int(GIB * 0.8))
    recording = json.loads(path.read_text())
    recording["frames"][0]["time"] = "soon"
    path.write_text(json.dumps(recording))

    result = runner.invoke(app, ["app", "replay", str(path)])

    assert result.exit_code == 1
    assert "Invalid recording" in result.output
