"""Unit tests for the persistence gateway."""

import logging
from pathlib import Path

import httpx
import pytest

from fitness_rpg_ledger.domain.records import DailyLog, WorkoutSet
from fitness_rpg_ledger.infrastructure.remote_client.client import RemoteMirrorClient
from fitness_rpg_ledger.infrastructure.storage.state_store import StateStore
from fitness_rpg_ledger.services.persistence_gateway import PersistenceGateway
from fitness_rpg_ledger.utils.parameters import RemoteConfig, StorageConfig

SET = WorkoutSet(id="a", date="2024-01-01", exercise="Squat", weight=100, reps=5)


def _gateway(tmp_path: Path, handler, background: bool = False) -> PersistenceGateway:
    remote = RemoteMirrorClient(
        RemoteConfig(enabled=True, base_url="https://example.test", api_key="key"),
        transport=httpx.MockTransport(handler),
    )
    store = StateStore(StorageConfig(state_file=str(tmp_path / "state.json")))
    return PersistenceGateway(store, remote=remote, background_writes=background)


def test_local_only_gateway_skips_mirror(tmp_path: Path) -> None:
    """Test that without a remote nothing is mirrored or fetched."""
    gateway = PersistenceGateway(StateStore(StorageConfig(state_file=str(tmp_path / "s.json"))))

    gateway.mirror_sets([SET])
    gateway.mirror_daily_log(DailyLog(date="2024-01-01", meal1="Oats"))

    if gateway.has_remote:
        raise AssertionError("Expected no remote")
    if gateway.fetch_remote_sets() or gateway.fetch_remote_logs():
        raise AssertionError("Expected nothing fetched")
    gateway.close()


def test_remote_failure_is_logged_not_raised(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Test that a failing remote write is logged and swallowed."""
    gateway = _gateway(tmp_path, lambda request: httpx.Response(503))

    with caplog.at_level(logging.ERROR):
        gateway.mirror_sets([SET])

    if "Remote mirror failed" not in caplog.text:
        raise AssertionError(f"Expected the failure to be logged, got {caplog.text!r}")
    gateway.close()


def test_background_writes_complete_on_flush(tmp_path: Path) -> None:
    """Test that queued writes are sent in order by the background worker."""
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(201)

    gateway = _gateway(tmp_path, handler, background=True)
    gateway.mirror_sets([SET])
    gateway.mirror_rename(["Squat"], "Back Squat")
    gateway.flush()

    if paths != ["/workouts", "/workouts"]:
        raise AssertionError(f"Unexpected requests {paths}")
    gateway.close()


def test_fetch_remote_logs_folds_tables(tmp_path: Path) -> None:
    """Test that sleep, meal and supplement rows fold into one log per date."""
    responses = {
        "/sleep": [{"date": "2024-03-01", "duration_hours": "07:30:00", "quality": "85"}],
        "/meals": [
            {"date": "2024-03-01", "meal_type": "breakfast", "food": "Oats"},
            {"date": "2024-03-02", "meal_type": "lunch", "food": "Rice"},
        ],
        "/supplements": [{"date": "2024-03-01", "supplement": "Zinc", "dose": "15mg"}],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=responses[request.url.path])

    gateway = _gateway(tmp_path, handler)
    logs = gateway.fetch_remote_logs()

    if [log.date for log in logs] != ["2024-03-02", "2024-03-01"]:
        raise AssertionError(f"Unexpected dates {[log.date for log in logs]}")

    folded = logs[1]
    if (folded.sleep_duration, folded.sleep_score, folded.meal1) != (450, 85.0, "Oats"):
        raise AssertionError(f"Unexpected folded log {folded}")
    if folded.supplements != {"Zinc": "15mg"}:
        raise AssertionError(f"Unexpected supplements {folded.supplements}")
    gateway.close()


def test_fetch_remote_logs_skips_failing_table(tmp_path: Path) -> None:
    """Test that one failing table does not hide the others."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/sleep":
            return httpx.Response(500)
        if request.url.path == "/meals":
            return httpx.Response(200, json=[{"date": "2024-03-01", "meal_type": "dinner",
                                              "food": "Fish"}])
        return httpx.Response(200, json=[])

    gateway = _gateway(tmp_path, handler)
    logs = gateway.fetch_remote_logs()

    if len(logs) != 1 or logs[0].meal3 != "Fish":
        raise AssertionError(f"Unexpected logs {logs}")
    if gateway.fetch_remote_sets() != []:
        raise AssertionError("Expected no remote sets")
    gateway.close()
