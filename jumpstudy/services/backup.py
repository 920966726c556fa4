"""
Daily backup of storage buckets plus database-backup reminders.

Bucket objects are downloaded through the Supabase Storage REST API. Database
dumps are taken by hand; a small tracker file records when that last happened
so the daily run can report how stale the dump is.
"""

import json
import logging
import os
import pathlib
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

BUCKETS = ("course-images", "logo-images")
BACKED_UP_TABLES = [
    "User",
    "Organization",
    "Course",
    "Image",
    "Badge",
    "FAQ",
    "AdminAllowList",
]
NO_PRIOR_BACKUP_DAYS = 999
URGENT_AFTER_DAYS = 7
RECOMMENDED_AFTER_DAYS = 3

project_dir = pathlib.Path(__file__).parent.parent.parent
BACKUP_ROOT = pathlib.Path(os.getenv("BACKUP_ROOT", str(project_dir / "backups")))
TRACKER_PATH = pathlib.Path(
    os.getenv("BACKUP_TRACKER_PATH", str(project_dir / ".backup-tracker.json"))
)


class StorageClient:
    """Minimal client for listing and downloading bucket objects."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        base_url = base_url or os.getenv("SUPABASE_URL", "")
        service_key = service_key or os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
        self._client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/storage/v1",
            headers={
                "Authorization": f"Bearer {service_key}",
                "apikey": service_key,
            },
            timeout=timeout,
            transport=transport,
        )

    def list_objects(self, bucket: str, limit: int = 1000) -> List[Dict[str, Any]]:
        response = self._client.post(
            f"/object/list/{bucket}",
            json={"prefix": "", "limit": limit, "offset": 0},
        )
        response.raise_for_status()
        # Folder placeholders come back without an id
        return [obj for obj in response.json() if obj.get("id")]

    def download(self, bucket: str, name: str) -> bytes:
        response = self._client.get(f"/object/{bucket}/{name}")
        response.raise_for_status()
        return response.content

    def close(self) -> None:
        self._client.close()


def backup_folder_for(day: date, root: pathlib.Path = BACKUP_ROOT) -> pathlib.Path:
    return root / f"smart-backup-{day.isoformat()}"


def backup_storage_files(
    client: StorageClient,
    backup_folder: pathlib.Path,
    buckets=BUCKETS,
) -> Dict[str, Any]:
    """Download every object of every bucket; failures are logged and skipped."""
    storage_folder = backup_folder / "storage"
    total_files = 0
    success_files = 0

    for bucket in buckets:
        bucket_folder = storage_folder / bucket
        bucket_folder.mkdir(parents=True, exist_ok=True)
        try:
            objects = client.list_objects(bucket)
        except httpx.HTTPError as e:
            logger.error(f"Error accessing bucket {bucket}: {e}")
            continue
        if not objects:
            logger.info(f"No files in {bucket}")
            continue

        logger.info(f"Downloading {len(objects)} files from {bucket}")
        total_files += len(objects)
        for obj in objects:
            name = obj["name"]
            try:
                (bucket_folder / name).write_bytes(client.download(bucket, name))
            except (httpx.HTTPError, OSError) as e:
                logger.warning(f"{bucket}/{name}: download failed: {e}")
                continue
            success_files += 1

    logger.info(f"Storage backup: {success_files}/{total_files} files")
    return {
        "status": "success",
        "totalFiles": total_files,
        "successFiles": success_files,
        "message": f"{success_files}/{total_files} files backed up automatically",
    }


def read_tracker(tracker_path: pathlib.Path = TRACKER_PATH) -> Dict[str, Any]:
    """Return the tracker contents, or an empty record when missing or corrupt."""
    try:
        data = json.loads(tracker_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {"date": None, "tables": []}
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable backup tracker {tracker_path}: {e}")
        return {"date": None, "tables": []}
    if not isinstance(data, dict):
        return {"date": None, "tables": []}
    return data


def days_since(last_date: Optional[str], today: date) -> int:
    if not last_date:
        return NO_PRIOR_BACKUP_DAYS
    try:
        last = date.fromisoformat(str(last_date)[:10])
    except ValueError:
        return NO_PRIOR_BACKUP_DAYS
    return (today - last).days


def compute_backup_status(days: int) -> Dict[str, Any]:
    if days > URGENT_AFTER_DAYS:
        status, message = "urgent", "Database backup URGENTLY needed (>7 days old)"
    elif days > RECOMMENDED_AFTER_DAYS:
        status, message = "recommended", "Database backup recommended (>3 days old)"
    else:
        status, message = "current", "Database backup is current"
    return {"status": status, "daysSinceLastBackup": days, "message": message}


def handle_database_backup(
    backup_folder: pathlib.Path,
    tracker_path: pathlib.Path = TRACKER_PATH,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    (backup_folder / "database").mkdir(parents=True, exist_ok=True)
    today = today or datetime.utcnow().date()
    tracker = read_tracker(tracker_path)
    days = days_since(tracker.get("date"), today)
    logger.info(f"Last database backup: {tracker.get('date') or 'Never'}")
    result = compute_backup_status(days)
    if result["status"] != "current":
        logger.warning(result["message"])
    return result


def next_actions(storage: Dict[str, Any], database: Dict[str, Any]) -> List[str]:
    actions = []
    if storage.get("status") == "success":
        actions.append("Files automatically protected - no action needed")
    else:
        actions.append("Check storage backup status")

    if database["status"] == "urgent":
        actions.append("URGENT: Backup database now (open database folder)")
    elif database["status"] == "recommended":
        actions.append("Recommended: Backup database soon (open database folder)")
    else:
        actions.append("Database backup current - no action needed")
    return actions


def write_report(
    backup_folder: pathlib.Path,
    storage: Dict[str, Any],
    database: Dict[str, Any],
    now: Optional[datetime] = None,
) -> pathlib.Path:
    now = now or datetime.utcnow()
    report = {
        "timestamp": now.isoformat().replace(":", "-").replace(".", "-"),
        "date": now.date().isoformat(),
        "type": "smart_daily_backup",
        "storage": storage,
        "database": database,
        "protection_status": {
            "files": "PROTECTED (automatic)",
            "database": (
                "PROTECTED" if database["status"] == "current" else "ACTION NEEDED"
            ),
        },
        "next_actions": next_actions(storage, database),
    }
    path = backup_folder / "smart-backup-report.json"
    path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    logger.info(f"Backup report written to {path}")
    return path


def run_daily_backup(
    client: StorageClient,
    root: pathlib.Path = BACKUP_ROOT,
    tracker_path: pathlib.Path = TRACKER_PATH,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    today = today or datetime.utcnow().date()
    backup_folder = backup_folder_for(today, root)
    backup_folder.mkdir(parents=True, exist_ok=True)
    logger.info(f"Backup folder: {backup_folder}")

    storage = backup_storage_files(client, backup_folder)
    database = handle_database_backup(backup_folder, tracker_path, today)
    report_path = write_report(backup_folder, storage, database)
    return {
        "folder": str(backup_folder),
        "report": str(report_path),
        "storage": storage,
        "database": database,
    }


def mark_database_backup_complete(
    tracker_path: pathlib.Path = TRACKER_PATH, now: Optional[datetime] = None
) -> Dict[str, Any]:
    now = now or datetime.utcnow()
    tracker = {
        "date": now.date().isoformat(),
        "timestamp": now.isoformat(),
        "tables": list(BACKED_UP_TABLES),
        "method": "manual_export",
    }
    tracker_path.parent.mkdir(parents=True, exist_ok=True)
    tracker_path.write_text(json.dumps(tracker, indent=2), encoding="utf-8")
    logger.info(f"Database backup marked complete for {tracker['date']}")
    return tracker
