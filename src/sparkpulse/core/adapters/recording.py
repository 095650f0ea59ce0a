"""Snapshot source backed by a recorded JSON document.

A recording holds the static payloads of one application and a list of
frames, one per poll:

    {
      "appId": "app-20240101",
      "attempt": {...},
      "configuration": {...},
      "environment": {"driverXmxBytes": 4294967296},
      "frames": [
        {"time": 1700000005000, "stages": [...], "executors": [...], "sql": [...]},
        ...
      ]
    }

``environment`` is optional; when missing it is derived from the
configuration like the live adapter does. Frame keys are optional too; a
missing key means that endpoint was not polled in that frame.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from sparkpulse.core.adapters.sparkui import driver_environment
from sparkpulse.core.snapshots import SnapshotError


def _epoch_ms(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SnapshotError(f"recording: {where} must be a number, got {value!r}")
    return int(value)


class RecordingSource:
    """Replays a recording frame by frame."""

    def __init__(self, document: dict[str, Any]):
        if not isinstance(document, dict):
            raise SnapshotError("recording: expected an object at the top level")
        frames = document.get("frames", [])
        if not isinstance(frames, list) or not all(isinstance(f, dict) for f in frames):
            raise SnapshotError("recording: 'frames' must be a list of objects")
        if "appId" not in document:
            raise SnapshotError("recording: missing field 'appId'")
        self.document = document
        self.frames: list[dict[str, Any]] = frames
        self._index = 0

    @classmethod
    def from_path(cls, path: Path) -> RecordingSource:
        """
        Load a recording from disk.

        Raises:
            OSError: If the file cannot be read.
            SnapshotError: If the file is not a valid recording.
        """
        try:
            document = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"recording: invalid JSON in {path}: {exc}") from exc
        return cls(document)

    @property
    def app_id(self) -> str:
        return str(self.document["appId"])

    def start_time(self) -> int:
        """Return the time of the first frame, or the attempt start time."""
        if self.frames and "time" in self.frames[0]:
            return _epoch_ms(self.frames[0]["time"], "frame 0 'time'")
        attempt = self.document.get("attempt") or {}
        return _epoch_ms(attempt.get("startTimeEpoch", 0), "attempt 'startTimeEpoch'")

    def iter_frames(self) -> Iterator[int]:
        """Advance through the frames, yielding each frame's time."""
        for index, frame in enumerate(self.frames):
            self._index = index
            if "time" not in frame:
                raise SnapshotError(f"recording: frame {index} has no 'time'")
            yield _epoch_ms(frame["time"], f"frame {index} 'time'")

    def _frame_value(self, key: str) -> Any:
        if not self.frames:
            return None
        return self.frames[self._index].get(key)

    def get_attempt(self, app_id: str) -> Any:
        return self.document.get("attempt")

    def get_configuration(self, app_id: str) -> Any:
        return self.document.get("configuration")

    def get_environment(self, app_id: str) -> Any:
        if "environment" in self.document:
            return self.document["environment"]
        configuration = self.document.get("configuration")
        if not isinstance(configuration, dict):
            return {}
        return driver_environment(configuration)

    def get_stages(self, app_id: str) -> Any:
        return self._frame_value("stages")

    def get_executors(self, app_id: str) -> Any:
        return self._frame_value("executors")

    def get_sql(self, app_id: str) -> Any:
        return self._frame_value("sql")
