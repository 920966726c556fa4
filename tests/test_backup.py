"""Storage backup and database-backup tracker tests"""

import json
from datetime import date, datetime

import httpx

from jumpstudy.services.backup import (
    BACKED_UP_TABLES,
    StorageClient,
    compute_backup_status,
    handle_database_backup,
    mark_database_backup_complete,
    read_tracker,
    run_daily_backup,
)


def _storage_transport(objects, failing=()):
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/storage/v1/object/list/"):
            bucket = path.rsplit("/", 1)[1]
            if bucket in failing:
                return httpx.Response(500, json={"error": "boom"})
            return httpx.Response(200, json=[
                {"id": f"{bucket}-{name}", "name": name}
                for name in objects.get(bucket, [])
            ])
        if path.endswith("broken.png"):
            return httpx.Response(404)
        return httpx.Response(200, content=b"image-bytes")

    return httpx.MockTransport(handler)


class TestBackupStatus:
    def test_thresholds(self):
        assert compute_backup_status(0)["status"] == "current"
        assert compute_backup_status(3)["status"] == "current"
        assert compute_backup_status(4)["status"] == "recommended"
        assert compute_backup_status(8)["status"] == "urgent"

    def test_missing_tracker_is_urgent(self, tmp_path):
        result = handle_database_backup(tmp_path, tmp_path / "missing.json", date(2026, 3, 1))
        assert result["daysSinceLastBackup"] == 999
        assert result["status"] == "urgent"

    def test_corrupt_tracker(self, tmp_path):
        tracker = tmp_path / "tracker.json"
        tracker.write_text("{not json")
        assert read_tracker(tracker)["date"] is None

    def test_mark_complete_then_current(self, tmp_path):
        tracker = tmp_path / "tracker.json"
        written = mark_database_backup_complete(tracker, now=datetime(2026, 3, 1, 8, 0))
        assert written["tables"] == BACKED_UP_TABLES
        assert json.loads(tracker.read_text())["date"] == "2026-03-01"

        result = handle_database_backup(tmp_path, tracker, date(2026, 3, 5))
        assert result["daysSinceLastBackup"] == 4
        assert result["status"] == "recommended"


def test_daily_backup_downloads_and_reports(tmp_path):
    client = StorageClient(
        base_url="https://storage.test",
        service_key="key",
        transport=_storage_transport(
            {"course-images": ["a.png", "broken.png"], "logo-images": ["logo.png"]}
        ),
    )
    result = run_daily_backup(
        client, root=tmp_path, tracker_path=tmp_path / "none.json", today=date(2026, 3, 1)
    )

    folder = tmp_path / "smart-backup-2026-03-01"
    assert (folder / "storage" / "course-images" / "a.png").read_bytes() == b"image-bytes"
    assert not (folder / "storage" / "course-images" / "broken.png").exists()
    assert result["storage"]["message"] == "2/3 files backed up automatically"

    report = json.loads((folder / "smart-backup-report.json").read_text())
    assert report["protection_status"]["database"] == "ACTION NEEDED"
    assert report["next_actions"][1].startswith("URGENT")


def test_failing_bucket_is_skipped(tmp_path):
    client = StorageClient(
        base_url="https://storage.test",
        service_key="key",
        transport=_storage_transport({"logo-images": ["logo.png"]}, failing=("course-images",)),
    )
    result = run_daily_backup(client, root=tmp_path, tracker_path=tmp_path / "t.json")
    assert result["storage"]["totalFiles"] == 1
    assert result["storage"]["successFiles"] == 1
